from __future__ import annotations

import logging
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from app.context import JobContext
from models import JobMessage, encode_job_message

logger = logging.getLogger(__name__)

MAX_WAIT_SECONDS = 20


class QueueOperationError(RuntimeError):
    """Raised when an operation against the job queue fails."""


def _require_client(context: JobContext):
    if context.sqs_client is None:
        raise QueueOperationError("SQS client is not initialized.")
    return context.sqs_client


def enqueue_job(context: JobContext, message: JobMessage) -> str:
    """Send a job message to SQS and return the SQS message id, raising on failure."""
    sqs = _require_client(context)
    try:
        response = sqs.send_message(
            QueueUrl=context.queue_url,
            MessageBody=encode_job_message(message),
        )
    except (ClientError, BotoCoreError) as exc:
        logger.error("Failed to enqueue job %s: %s", message.id, exc, exc_info=True)
        raise QueueOperationError(f"Failed to enqueue job {message.id}") from exc

    message_id = response.get("MessageId", "unknown")
    logger.info("Enqueued job %s (MessageId: %s)", message.id, message_id)
    return message_id


def receive_jobs(context: JobContext, wait_seconds: int | None = None) -> list[dict[str, Any]]:
    """Long-poll for at most one message. Returns the raw SQS messages, possibly empty."""
    sqs = _require_client(context)
    if wait_seconds is None:
        wait_seconds = context.wait_seconds
    wait_time = max(0, min(int(wait_seconds), MAX_WAIT_SECONDS))
    try:
        response = sqs.receive_message(
            QueueUrl=context.queue_url,
            MaxNumberOfMessages=1,
            WaitTimeSeconds=wait_time,
        )
    except (ClientError, BotoCoreError) as exc:
        raise QueueOperationError("Failed to poll SQS for jobs.") from exc

    messages = response.get("Messages") or []
    logger.debug("SQS receive_message returned %s message(s)", len(messages))
    return messages


def ack_job(context: JobContext, receipt_handle: str | None) -> bool:
    """Delete a processed message from the queue. Failures are logged, never raised."""
    if not receipt_handle:
        logger.warning("No receipt handle provided; skipping ack.")
        return False

    try:
        sqs = _require_client(context)
        sqs.delete_message(QueueUrl=context.queue_url, ReceiptHandle=receipt_handle)
    except (ClientError, BotoCoreError, QueueOperationError) as exc:
        logger.warning("Failed to delete SQS message: %s", exc)
        return False
    return True
