from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError

from config.settings import Settings, require_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class JobContext:
    """Clients and configuration bound once at startup and shared by handlers and the worker."""

    sqs_client: Any
    s3_client: Any
    queue_url: str
    bucket: str
    worker_enabled: bool = False
    wait_seconds: int = 20
    error_backoff_seconds: float = 5.0

    @property
    def ready(self) -> bool:
        return self.sqs_client is not None and self.s3_client is not None


def make_boto_client(service_name: str, settings: Settings):
    kwargs: dict[str, str] = {"region_name": settings.AWS_REGION}
    if settings.AWS_ACCESS_KEY_ID and settings.AWS_SECRET_ACCESS_KEY:
        kwargs["aws_access_key_id"] = settings.AWS_ACCESS_KEY_ID
        kwargs["aws_secret_access_key"] = settings.AWS_SECRET_ACCESS_KEY
        if settings.AWS_SESSION_TOKEN:
            kwargs["aws_session_token"] = settings.AWS_SESSION_TOKEN
    if settings.AWS_ENDPOINT_URL:
        kwargs["endpoint_url"] = settings.AWS_ENDPOINT_URL
    return boto3.client(service_name, **kwargs)


def _try_make_client(service_name: str, settings: Settings) -> Optional[Any]:
    try:
        client = make_boto_client(service_name, settings)
    except BotoCoreError as exc:
        logger.error("Failed to initialize %s client: %s", service_name, exc, exc_info=True)
        return None
    logger.info("%s client initialized (region: %s)", service_name.upper(), settings.AWS_REGION)
    return client


def build_context(settings: Settings | None = None) -> JobContext:
    """Validate configuration and construct the SQS and S3 clients.

    Raises ConfigurationError when the queue URL or bucket is missing. A client
    that fails to construct is left as None, which makes the service report
    not-ready.
    """
    settings = require_settings(settings)
    return JobContext(
        sqs_client=_try_make_client("sqs", settings),
        s3_client=_try_make_client("s3", settings),
        queue_url=settings.SQS_QUEUE_URL,
        bucket=settings.S3_BUCKET,
        worker_enabled=settings.WORKER_ENABLED,
        wait_seconds=settings.WORKER_WAIT_SECONDS,
        error_backoff_seconds=settings.WORKER_ERROR_BACKOFF_SECONDS,
    )
