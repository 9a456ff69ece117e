import os
from dataclasses import dataclass

DEFAULT_REGION = "us-east-1"


class ConfigurationError(RuntimeError):
    """Raised when required configuration is missing at startup."""


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "on", "yes"}


def _env_optional(name: str) -> str | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return raw.strip()


def _env_number(name: str, default: str, cast):
    raw = os.getenv(name, default)
    try:
        return cast(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
    AWS_REGION: str
    AWS_ACCESS_KEY_ID: str | None
    AWS_SECRET_ACCESS_KEY: str | None
    AWS_SESSION_TOKEN: str | None
    AWS_ENDPOINT_URL: str | None
    SQS_QUEUE_URL: str | None
    S3_BUCKET: str | None
    WORKER_ENABLED: bool
    WORKER_WAIT_SECONDS: int
    WORKER_ERROR_BACKOFF_SECONDS: float
    LOG_LEVEL: str


def get_settings() -> Settings:
    return Settings(
        AWS_REGION=_env_optional("AWS_REGION") or DEFAULT_REGION,
        AWS_ACCESS_KEY_ID=_env_optional("AWS_ACCESS_KEY_ID"),
        AWS_SECRET_ACCESS_KEY=_env_optional("AWS_SECRET_ACCESS_KEY"),
        AWS_SESSION_TOKEN=_env_optional("AWS_SESSION_TOKEN"),
        AWS_ENDPOINT_URL=_env_optional("AWS_ENDPOINT_URL"),
        SQS_QUEUE_URL=_env_optional("SQS_QUEUE_URL"),
        S3_BUCKET=_env_optional("S3_BUCKET"),
        WORKER_ENABLED=_env_bool("WORKER_ENABLED", False),
        WORKER_WAIT_SECONDS=_env_number("WORKER_WAIT_SECONDS", "20", int),
        WORKER_ERROR_BACKOFF_SECONDS=_env_number("WORKER_ERROR_BACKOFF_SECONDS", "5", float),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


def require_settings(settings: Settings | None = None) -> Settings:
    """Return settings, raising ConfigurationError if the queue or bucket is unset."""
    settings = settings or get_settings()
    if not settings.SQS_QUEUE_URL:
        raise ConfigurationError("SQS_QUEUE_URL environment variable is required")
    if not settings.S3_BUCKET:
        raise ConfigurationError("S3_BUCKET environment variable is required")
    return settings
