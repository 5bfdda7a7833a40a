"""Application configuration using pydantic-settings with grouped env prefixes."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class DynamoDBConfig(BaseSettings):
    """DynamoDB configuration."""

    model_config = {"env_prefix": "PAYDESK_DYNAMO_"}

    table_suffix: str = ""  # "-dev", "-uat", or "" for prod
    region: str = "ap-northeast-2"
    endpoint_url: str | None = None  # LocalStack override


class TransportConfig(BaseSettings):
    """Outbound mail transport configuration."""

    model_config = {"env_prefix": "PAYDESK_MAIL_"}

    provider: Literal["memory", "ses", "smtp"] = "memory"
    sender_address: str = "payroll@example.com"
    sender_name: str = "급여명세서 시스템"
    region: str = "ap-northeast-2"
    endpoint_url: str | None = None  # LocalStack override
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_use_tls: bool = True
    timeout: int = 30


class PipelineConfig(BaseSettings):
    """Worker pool sizes for ingestion and dispatch."""

    model_config = {"env_prefix": "PAYDESK_PIPELINE_"}

    parse_workers: int = 4
    ingest_workers: int = 4
    dispatch_workers: int = 4


class TemplateConfig(BaseSettings):
    """Payslip report presentation settings."""

    model_config = {"env_prefix": "PAYDESK_TEMPLATE_"}

    logo_url: str = ""
    footer_contact: str = "문의사항은 인사팀으로 연락 바랍니다."


class AppSettings(BaseSettings):
    """Root application settings aggregating all sub-configs."""

    model_config = {"env_prefix": "PAYDESK_"}

    environment: Literal["dev", "uat", "prod"] = "dev"
    log_level: str = "INFO"
    log_format: Literal["text", "json"] = "text"

    dynamodb: DynamoDBConfig = DynamoDBConfig()
    transport: TransportConfig = TransportConfig()
    pipeline: PipelineConfig = PipelineConfig()
    template: TemplateConfig = TemplateConfig()
