"""Tests for configuration defaults and env overrides."""

from __future__ import annotations

from paydesk.core.config import AppSettings, PipelineConfig, TransportConfig


def test_default_settings():
    settings = AppSettings()
    assert settings.environment == "dev"
    assert settings.transport.provider == "memory"
    assert settings.log_format == "text"


def test_transport_config_defaults():
    config = TransportConfig()
    assert config.provider == "memory"
    assert config.smtp_port == 587
    assert config.smtp_use_tls is True


def test_pipeline_config_env_override(monkeypatch):
    monkeypatch.setenv("PAYDESK_PIPELINE_DISPATCH_WORKERS", "16")
    assert PipelineConfig().dispatch_workers == 16


def test_transport_provider_env_override(monkeypatch):
    monkeypatch.setenv("PAYDESK_MAIL_PROVIDER", "smtp")
    assert TransportConfig().provider == "smtp"
