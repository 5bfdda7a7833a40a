"""Rendered output documents."""

from __future__ import annotations

from pydantic import BaseModel


class RenderedReport(BaseModel):
    """A payslip notice ready for delivery or preview."""

    subject: str
    html: str
