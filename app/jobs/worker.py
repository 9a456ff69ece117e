from __future__ import annotations

import datetime
import logging
import threading
from dataclasses import dataclass
from typing import Any, Optional

from app.context import JobContext
from app.repositories.results_repo import ResultStoreError, save_result
from app.services.text_transform import transform_text
from models import JobDecodeError, JobMessage, JobResult, decode_job_message

from .queue import QueueOperationError, ack_job, receive_jobs

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class MessageOutcome:
    message_id: Optional[str]
    job_id: Optional[str]
    acknowledged: bool
    error: Optional[str] = None


def process_job(message: JobMessage, *, now: Optional[datetime.datetime] = None) -> JobResult:
    """Turn a queued job into its result. Pure apart from reading the clock."""
    timestamp = now or datetime.datetime.now(datetime.timezone.utc)
    return JobResult(
        id=message.id,
        text=message.text,
        output=transform_text(message.text),
        processed_at=timestamp,
    )


def handle_message(
    context: JobContext,
    raw_message: dict[str, Any],
    *,
    now: Optional[datetime.datetime] = None,
) -> MessageOutcome:
    """Decode, process, store and acknowledge a single SQS message.

    The message is only deleted after the result is stored. A message that does
    not decode, or whose result cannot be stored, stays on the queue and will be
    redelivered once its visibility timeout expires.
    """
    message_id = raw_message.get("MessageId")
    try:
        job = decode_job_message(raw_message.get("Body"))
    except JobDecodeError as exc:
        logger.warning("Skipping undecodable message %s: %s", message_id, exc)
        return MessageOutcome(message_id=message_id, job_id=None, acknowledged=False, error=str(exc))

    logger.info("Processing job %s (MessageId: %s)", job.id, message_id)
    result = process_job(job, now=now)

    try:
        save_result(context, result)
    except ResultStoreError as exc:
        logger.error("Failed to process job %s: %s", job.id, exc.__cause__ or exc)
        return MessageOutcome(message_id=message_id, job_id=job.id, acknowledged=False, error=str(exc))

    acknowledged = ack_job(context, raw_message.get("ReceiptHandle"))
    if not acknowledged:
        logger.warning("Job %s stored but not acknowledged; it may be delivered again", job.id)
    return MessageOutcome(message_id=message_id, job_id=job.id, acknowledged=acknowledged)


def run_worker_loop(
    context: JobContext,
    *,
    stop_event: Optional[threading.Event] = None,
    stop_after: Optional[int] = None,
) -> int:
    """
    Poll the queue and process jobs one at a time until ``stop_event`` is set.

    Args:
        context: Shared clients and worker timings.
        stop_event: Set it to end the loop after the current poll.
        stop_after: Optional number of polls before exiting (useful for tests).

    Returns:
        Number of messages that were stored and acknowledged.
    """
    stop_event = stop_event or threading.Event()
    polls = 0
    completed = 0

    while not stop_event.is_set():
        try:
            messages = receive_jobs(context)
        except QueueOperationError as exc:
            logger.error("Failed to receive message: %s", exc.__cause__ or exc)
            stop_event.wait(context.error_backoff_seconds)
            messages = []

        for raw_message in messages:
            try:
                outcome = handle_message(context, raw_message)
            except Exception:
                # Left unacknowledged; the queue redelivers it after the visibility timeout.
                logger.exception("Unexpected error handling message %s", raw_message.get("MessageId"))
                continue
            if outcome.acknowledged:
                completed += 1

        polls += 1
        if stop_after is not None and polls >= stop_after:
            break

    logger.info("Worker loop stopped after %s poll(s)", polls)
    return completed


class WorkerHandle:
    """A worker loop running on a background thread."""

    def __init__(self, context: JobContext) -> None:
        self.stop_event = threading.Event()
        self._thread = threading.Thread(
            target=run_worker_loop,
            args=(context,),
            kwargs={"stop_event": self.stop_event},
            name="job-worker",
            daemon=True,
        )

    def start(self) -> "WorkerHandle":
        self._thread.start()
        return self

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def stop(self, timeout: Optional[float] = None) -> None:
        self.stop_event.set()
        if self._thread.is_alive():
            self._thread.join(timeout)


def start_worker(context: JobContext) -> WorkerHandle:
    logger.info("Worker enabled, starting background processing")
    return WorkerHandle(context).start()


__all__ = [
    "MessageOutcome",
    "WorkerHandle",
    "handle_message",
    "process_job",
    "run_worker_loop",
    "start_worker",
]


if __name__ == "__main__":
    import signal
    import sys

    from app import ensure_env_loaded
    from app.context import build_context
    from config.settings import ConfigurationError, get_settings

    ensure_env_loaded()
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    logger = logging.getLogger(__name__)

    try:
        settings = get_settings()
        logging.basicConfig(level=settings.LOG_LEVEL, format=log_format)
        worker_context = build_context(settings)
    except ConfigurationError as exc:
        logging.basicConfig(format=log_format)
        logger.critical("%s", exc)
        sys.exit(1)

    stop = threading.Event()

    def signal_handler(sig, frame):
        logger.info("Received interrupt signal, shutting down gracefully...")
        stop.set()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    logger.info("Starting background worker (queue: %s, bucket: %s)", worker_context.queue_url, worker_context.bucket)
    run_worker_loop(worker_context, stop_event=stop)
