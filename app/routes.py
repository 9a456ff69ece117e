from __future__ import annotations

import logging
import uuid

from flask import Blueprint, Response, abort, current_app, jsonify, request

from app.context import JobContext
from app.jobs.queue import QueueOperationError, enqueue_job
from app.repositories.results_repo import (
    ResultDecodeError,
    ResultNotFoundError,
    fetch_result,
)
from models import JobDecodeError, JobMessage, decode_job_request

logger = logging.getLogger(__name__)

bp = Blueprint("jobs", __name__)

HEALTH_CHECK_PATHS = frozenset({"/healthz", "/readyz"})
IMPLICIT_METHODS = frozenset({"HEAD", "OPTIONS"})


def get_job_context() -> JobContext:
    return current_app.extensions["job_context"]


def _declared_methods() -> list[str]:
    if request.endpoint == "jobs.list_jobs_not_allowed":
        return ["POST"]
    return sorted(set(request.url_rule.methods) - IMPLICIT_METHODS)


def _plain(body: str, status: int) -> Response:
    return Response(body, status=status, mimetype="text/plain")


@bp.before_request
def reject_implicit_methods():
    # Flask answers HEAD and OPTIONS itself; each route serves only its declared method.
    if request.method in IMPLICIT_METHODS:
        abort(405, valid_methods=_declared_methods())


@bp.after_app_request
def log_request(response: Response) -> Response:
    if request.path not in HEALTH_CHECK_PATHS:
        logger.info("%s %s -> %s", request.method, request.path, response.status_code)
    return response


@bp.get("/healthz")
def healthz():
    return _plain("ok", 200)


@bp.get("/readyz")
def readyz():
    if not get_job_context().ready:
        return _plain("not ready", 503)
    return _plain("ready", 200)


@bp.post("/jobs")
def create_job():
    payload = request.get_json(force=True, silent=True)
    try:
        job_request = decode_job_request(payload)
    except JobDecodeError:
        return jsonify({"error": "invalid JSON"}), 400

    message = JobMessage(id=str(uuid.uuid4()), text=job_request.text)
    try:
        enqueue_job(get_job_context(), message)
    except QueueOperationError:
        return jsonify({"error": "failed to send message"}), 500

    return jsonify({"id": message.id}), 201


@bp.get("/jobs")
def list_jobs_not_allowed():
    # Without this rule werkzeug redirects GET /jobs to GET /jobs/.
    abort(405, valid_methods=["POST"])


@bp.get("/jobs/")
def get_job_missing_id():
    return jsonify({"error": "job id required"}), 400


@bp.get("/jobs/<path:job_id>")
def get_job(job_id: str):
    # Missing objects and store failures both surface as 404.
    try:
        result = fetch_result(get_job_context(), job_id)
    except ResultNotFoundError:
        return jsonify({"error": "job not found"}), 404
    except ResultDecodeError:
        return jsonify({"error": "failed to decode job"}), 500

    return jsonify(result.to_dict())
