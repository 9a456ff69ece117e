from __future__ import annotations

import logging

from botocore.exceptions import BotoCoreError, ClientError

from app.context import JobContext
from models import (
    RESULT_CONTENT_TYPE,
    JobDecodeError,
    JobResult,
    decode_job_result,
    encode_job_result,
    result_key,
)

logger = logging.getLogger(__name__)


class ResultStoreError(RuntimeError):
    """Raised when a job result cannot be written to the object store."""


class ResultNotFoundError(LookupError):
    """Raised when a job result cannot be read.

    Covers both a missing key and an unreachable store; callers cannot tell
    the two apart.
    """


class ResultDecodeError(RuntimeError):
    """Raised when a stored job result is not a valid JobResult document."""


def save_result(context: JobContext, result: JobResult) -> str:
    """Write ``result`` to ``jobs/{id}.json``, overwriting any previous copy."""
    key = result_key(result.id)
    if context.s3_client is None:
        raise ResultStoreError("S3 client is not initialized.")
    try:
        context.s3_client.put_object(
            Bucket=context.bucket,
            Key=key,
            Body=encode_job_result(result),
            ContentType=RESULT_CONTENT_TYPE,
        )
    except (ClientError, BotoCoreError) as exc:
        raise ResultStoreError(f"Failed to store result for job {result.id}") from exc
    logger.info("Stored result for job %s at s3://%s/%s", result.id, context.bucket, key)
    return key


def fetch_result(context: JobContext, job_id: str) -> JobResult:
    key = result_key(job_id)
    if context.s3_client is None:
        raise ResultNotFoundError(job_id)
    try:
        response = context.s3_client.get_object(Bucket=context.bucket, Key=key)
        body = response["Body"]
        try:
            payload = body.read()
        finally:
            close = getattr(body, "close", None)
            if close is not None:
                close()
    except ClientError as exc:
        code = exc.response.get("Error", {}).get("Code", "")
        if code not in {"NoSuchKey", "404", "NotFound"}:
            logger.warning("Failed to fetch result for job %s: %s", job_id, exc)
        raise ResultNotFoundError(job_id) from exc
    except BotoCoreError as exc:
        logger.warning("Failed to fetch result for job %s: %s", job_id, exc)
        raise ResultNotFoundError(job_id) from exc

    try:
        return decode_job_result(payload)
    except JobDecodeError as exc:
        logger.error("Stored result for job %s is corrupt: %s", job_id, exc)
        raise ResultDecodeError(f"Failed to decode result for job {job_id}") from exc
