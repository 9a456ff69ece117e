"""Job data shapes and their JSON encodings.

Three shapes travel through the service:

* ``JobRequest``  - the body of ``POST /jobs``
* ``JobMessage``  - the SQS message body
* ``JobResult``   - the object stored at ``jobs/{id}.json``

Everything here is pure; no I/O happens in this module.
"""

from __future__ import annotations

import datetime
import json
from dataclasses import dataclass
from typing import Any

RESULT_KEY_TEMPLATE = "jobs/{job_id}.json"
RESULT_CONTENT_TYPE = "application/json"
# Stand-in for results written without a processed_at field.
ZERO_TIME = datetime.datetime(1, 1, 1, tzinfo=datetime.timezone.utc)


class JobDecodeError(ValueError):
    """Raised when a payload cannot be decoded into one of the job shapes."""


@dataclass(frozen=True, slots=True)
class JobRequest:
    text: str


@dataclass(frozen=True, slots=True)
class JobMessage:
    id: str
    text: str


@dataclass(frozen=True, slots=True)
class JobResult:
    id: str
    text: str
    output: str
    processed_at: datetime.datetime

    def to_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "text": self.text,
            "output": self.output,
            "processed_at": format_timestamp(self.processed_at),
        }


def result_key(job_id: str) -> str:
    """Object store key holding the result for ``job_id``."""
    return RESULT_KEY_TEMPLATE.format(job_id=job_id)


def format_timestamp(value: datetime.datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=datetime.timezone.utc)
    return value.isoformat()


def parse_timestamp(raw: str) -> datetime.datetime:
    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    return datetime.datetime.fromisoformat(raw)


def _load_object(raw: str | bytes | None, shape: str) -> dict[str, Any]:
    if raw is None:
        raise JobDecodeError(f"{shape} body is empty")
    try:
        payload = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise JobDecodeError(f"{shape} body is not valid JSON") from exc
    return _require_object(payload, shape)


def _require_object(payload: Any, shape: str) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise JobDecodeError(f"{shape} must be a JSON object")
    return payload


def _string_field(payload: dict[str, Any], name: str, shape: str) -> str:
    value = payload.get(name, "")
    if value is None:
        return ""
    if not isinstance(value, str):
        raise JobDecodeError(f"{shape}.{name} must be a string")
    return value


def decode_job_request(payload: Any) -> JobRequest:
    """Build a JobRequest from an already-parsed JSON body."""
    body = _require_object(payload, "JobRequest")
    return JobRequest(text=_string_field(body, "text", "JobRequest"))


def encode_job_message(message: JobMessage) -> str:
    return json.dumps(
        {"id": message.id, "text": message.text},
        separators=(",", ":"),
        ensure_ascii=False,
    )


def decode_job_message(raw: str | bytes | None) -> JobMessage:
    body = _load_object(raw, "JobMessage")
    job_id = _string_field(body, "id", "JobMessage")
    if not job_id:
        raise JobDecodeError("JobMessage.id is required")
    return JobMessage(id=job_id, text=_string_field(body, "text", "JobMessage"))


def encode_job_result(result: JobResult) -> bytes:
    return json.dumps(result.to_dict(), separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def decode_job_result(raw: str | bytes | None) -> JobResult:
    body = _load_object(raw, "JobResult")
    processed_raw = body.get("processed_at")
    if processed_raw is None:
        processed_at = ZERO_TIME
    elif not isinstance(processed_raw, str):
        raise JobDecodeError("JobResult.processed_at must be a timestamp string")
    else:
        try:
            processed_at = parse_timestamp(processed_raw)
        except ValueError as exc:
            raise JobDecodeError("JobResult.processed_at is not an RFC 3339 timestamp") from exc
    return JobResult(
        id=_string_field(body, "id", "JobResult"),
        text=_string_field(body, "text", "JobResult"),
        output=_string_field(body, "output", "JobResult"),
        processed_at=processed_at,
    )


__all__ = [
    "JobDecodeError",
    "JobMessage",
    "JobRequest",
    "JobResult",
    "RESULT_CONTENT_TYPE",
    "ZERO_TIME",
    "decode_job_message",
    "decode_job_request",
    "decode_job_result",
    "encode_job_message",
    "encode_job_result",
    "format_timestamp",
    "parse_timestamp",
    "result_key",
]
