from __future__ import annotations

import io
import itertools
import time
from collections.abc import Iterator
from typing import Any

import pytest
from botocore.exceptions import ClientError

from app import create_app
from app.context import JobContext

QUEUE_URL = "https://sqs.us-east-1.amazonaws.com/123456789012/test-queue"
BUCKET = "test-bucket"


def client_error(code: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


class FakeSQSClient:
    """In-memory SQS stand-in. Received messages stay visible until deleted."""

    def __init__(self) -> None:
        self.messages: list[dict[str, str]] = []
        self.deleted: list[str] = []
        self.receive_calls: list[dict[str, Any]] = []
        self.fail_send = False
        self.fail_delete = False
        self.receive_failures = 0
        self._ids = itertools.count(1)

    def send_message(self, QueueUrl: str, MessageBody: str, **kwargs) -> dict[str, str]:
        if self.fail_send:
            raise client_error("AWS.SimpleQueueService.NonExistentQueue", "SendMessage")
        index = next(self._ids)
        self.messages.append(
            {
                "MessageId": f"msg-{index}",
                "ReceiptHandle": f"receipt-{index}",
                "Body": MessageBody,
            }
        )
        return {"MessageId": f"msg-{index}"}

    def receive_message(self, QueueUrl: str, **kwargs) -> dict[str, Any]:
        self.receive_calls.append(kwargs)
        if self.receive_failures:
            self.receive_failures -= 1
            raise client_error("ServiceUnavailable", "ReceiveMessage")
        if not self.messages:
            time.sleep(0.01)
            return {}
        limit = kwargs.get("MaxNumberOfMessages", 1)
        return {"Messages": [dict(message) for message in self.messages[:limit]]}

    def delete_message(self, QueueUrl: str, ReceiptHandle: str) -> dict:
        if self.fail_delete:
            raise client_error("ReceiptHandleIsInvalid", "DeleteMessage")
        self.deleted.append(ReceiptHandle)
        self.messages = [m for m in self.messages if m["ReceiptHandle"] != ReceiptHandle]
        return {}

    def push(self, body: str) -> dict[str, str]:
        self.send_message(QueueUrl=QUEUE_URL, MessageBody=body)
        return self.messages[-1]


class FakeS3Client:
    def __init__(self) -> None:
        self.objects: dict[str, dict[str, Any]] = {}
        self.fail_put = False
        self.fail_get = False

    def put_object(self, Bucket: str, Key: str, Body: bytes, ContentType: str = "") -> dict:
        if self.fail_put:
            raise client_error("InternalError", "PutObject")
        self.objects[f"{Bucket}/{Key}"] = {"Body": bytes(Body), "ContentType": ContentType}
        return {}

    def get_object(self, Bucket: str, Key: str) -> dict[str, Any]:
        if self.fail_get:
            raise client_error("AccessDenied", "GetObject")
        stored = self.objects.get(f"{Bucket}/{Key}")
        if stored is None:
            raise client_error("NoSuchKey", "GetObject")
        return {"Body": io.BytesIO(stored["Body"]), "ContentType": stored["ContentType"]}


@pytest.fixture()
def fake_sqs() -> FakeSQSClient:
    return FakeSQSClient()


@pytest.fixture()
def fake_s3() -> FakeS3Client:
    return FakeS3Client()


@pytest.fixture()
def job_context(fake_sqs, fake_s3) -> JobContext:
    return JobContext(
        sqs_client=fake_sqs,
        s3_client=fake_s3,
        queue_url=QUEUE_URL,
        bucket=BUCKET,
        wait_seconds=0,
        error_backoff_seconds=0,
    )


@pytest.fixture()
def app(job_context):
    application = create_app(job_context, start_worker=False)
    application.config.update(TESTING=True)

    yield application


@pytest.fixture()
def client(app) -> Iterator:
    with app.test_client() as client:
        yield client
