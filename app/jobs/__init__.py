"""Job queue and worker utilities."""

from .queue import QueueOperationError, ack_job, enqueue_job, receive_jobs
from .worker import WorkerHandle, handle_message, process_job, run_worker_loop, start_worker

__all__ = [
    "QueueOperationError",
    "WorkerHandle",
    "ack_job",
    "enqueue_job",
    "handle_message",
    "process_job",
    "receive_jobs",
    "run_worker_loop",
    "start_worker",
]
