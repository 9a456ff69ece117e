from __future__ import annotations

import datetime
import json

import pytest

from models import (
    JobDecodeError,
    JobMessage,
    JobResult,
    ZERO_TIME,
    decode_job_message,
    decode_job_request,
    decode_job_result,
    encode_job_message,
    encode_job_result,
    result_key,
)

PROCESSED_AT = datetime.datetime(2024, 5, 1, 12, 30, 15, 123456, tzinfo=datetime.timezone.utc)


def test_result_key_format():
    assert result_key("abc-123") == "jobs/abc-123.json"


def test_decode_job_request_accepts_empty_text():
    assert decode_job_request({"text": ""}).text == ""


def test_decode_job_request_defaults_missing_text():
    assert decode_job_request({}).text == ""


@pytest.mark.parametrize("payload", [None, [], "hello", 3, {"text": 12}, {"text": ["a"]}])
def test_decode_job_request_rejects_non_structural_payloads(payload):
    with pytest.raises(JobDecodeError):
        decode_job_request(payload)


def test_encode_job_message_is_compact_json():
    body = encode_job_message(JobMessage(id="j1", text="héllo"))
    assert body == '{"id":"j1","text":"héllo"}'


def test_decode_job_message_reads_queue_body():
    message = decode_job_message('{"id": "j1", "text": "hello", "extra": true}')
    assert message == JobMessage(id="j1", text="hello")


@pytest.mark.parametrize(
    "raw",
    [None, "", "not json", "[]", '{"text": "no id"}', '{"id": "", "text": "x"}', '{"id": 7, "text": "x"}'],
)
def test_decode_job_message_failures(raw):
    with pytest.raises(JobDecodeError):
        decode_job_message(raw)


def test_encode_job_result_shape():
    result = JobResult(id="j1", text="hi", output="HI", processed_at=PROCESSED_AT)
    payload = json.loads(encode_job_result(result))
    assert payload == {
        "id": "j1",
        "text": "hi",
        "output": "HI",
        "processed_at": "2024-05-01T12:30:15.123456+00:00",
    }


def test_decode_job_result_accepts_zulu_suffix():
    raw = b'{"id":"j1","text":"hi","output":"HI","processed_at":"2024-05-01T12:30:15Z"}'
    result = decode_job_result(raw)
    assert result.processed_at == datetime.datetime(2024, 5, 1, 12, 30, 15, tzinfo=datetime.timezone.utc)
    assert (result.id, result.text, result.output) == ("j1", "hi", "HI")


def test_decode_job_result_preserves_stored_fields():
    result = JobResult(id="j1", text="hi", output="HI", processed_at=PROCESSED_AT)
    assert decode_job_result(encode_job_result(result)) == result


@pytest.mark.parametrize(
    "raw",
    [b"", b"{broken", b'{"id":"j1","processed_at":"yesterday"}', b'{"id":"j1","processed_at":12}'],
)
def test_decode_job_result_failures(raw):
    with pytest.raises(JobDecodeError):
        decode_job_result(raw)


def test_naive_timestamps_are_written_as_utc():
    result = JobResult(id="j1", text="", output="", processed_at=datetime.datetime(2024, 1, 1))
    assert result.to_dict()["processed_at"] == "2024-01-01T00:00:00+00:00"


def test_decode_job_result_without_timestamp_uses_zero_time():
    result = decode_job_result(b'{"id":"j1","text":"hi","output":"HI"}')
    assert result.processed_at == ZERO_TIME
    assert result.to_dict()["processed_at"] == "0001-01-01T00:00:00+00:00"
