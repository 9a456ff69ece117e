from __future__ import annotations

import atexit
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from app.context import JobContext, build_context

logger = logging.getLogger(__name__)

_ENV_LOADED = False


def ensure_env_loaded() -> None:
    global _ENV_LOADED
    if _ENV_LOADED:
        return

    base_dir = Path(__file__).resolve().parent.parent
    env_path = base_dir / ".env"
    if env_path.exists():
        load_dotenv(env_path)
    else:
        load_dotenv()

    _ENV_LOADED = True


def create_app(
    context: Optional[JobContext] = None,
    *,
    start_worker: Optional[bool] = None,
) -> Flask:
    """Build the Flask application.

    Args:
        context: Pre-built clients and configuration. When omitted the
            environment is read and real boto3 clients are created; a missing
            queue URL or bucket raises ConfigurationError.
        start_worker: Override the WORKER_ENABLED setting.
    """
    if context is None:
        ensure_env_loaded()
        context = build_context()

    app = Flask(__name__)
    app.extensions["job_context"] = context

    from .routes import bp as jobs_bp

    app.register_blueprint(jobs_bp)

    if start_worker is None:
        start_worker = context.worker_enabled
    if start_worker:
        from app.jobs.worker import start_worker as launch_worker

        worker = launch_worker(context)
        app.extensions["job_worker"] = worker
        atexit.register(worker.stop, 1.0)

    return app
