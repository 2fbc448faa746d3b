"""
Pytest configuration and fixtures for recordgate tests

This module provides shared fixtures for unit, integration, and E2E tests.
"""
import json
import os
from typing import Any, Callable, Dict, List

import pytest

from recordgate.core.schema import SchemaStore
from recordgate.observability.logger import setup_logger


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require external services"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that exercise the CLI and files on disk"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests that test the full pipeline"
    )
    config.addinivalue_line(
        "markers", "slow: Tests that take more than 5 seconds to run"
    )


# =======================
# FILE FIXTURES
# =======================

@pytest.fixture(scope="session")
def test_data_dir() -> str:
    """
    Get path to test data fixtures directory

    Returns:
        Path to tests/fixtures directory
    """
    return os.path.join(os.path.dirname(__file__), "fixtures")


@pytest.fixture(scope="session")
def openapi_path(test_data_dir) -> str:
    """Path to the Items API OpenAPI document"""
    return os.path.join(test_data_dir, "openapi.yml")


@pytest.fixture
def openapi_store(openapi_path) -> SchemaStore:
    """Non-strict store backed by the Items API document"""
    return SchemaStore.from_file_path(openapi_path)


@pytest.fixture
def write_json(tmp_path) -> Callable[[str, Any], str]:
    """
    Write a JSON document into tmp_path

    Returns:
        Function (name, content) -> file path
    """
    def _write(name: str, content: Any) -> str:
        path = tmp_path / name
        path.write_text(json.dumps(content))
        return str(path)
    return _write


# =======================
# LOGGING FIXTURES
# =======================

@pytest.fixture
def test_logger():
    """Quiet text logger shared by components under test"""
    return setup_logger("recordgate.tests", level="WARNING", format_type="text")


# =======================
# EVENT BUILDERS
# =======================

def dynamodb_record(
    new_image: Dict[str, Any] | None = None,
    old_image: Dict[str, Any] | None = None,
    event_id: str = "ddb-1",
    event_name: str = "INSERT",
) -> Dict[str, Any]:
    """Build a DynamoDB stream record; images are attribute-value maps"""
    stream: Dict[str, Any] = {
        "Keys": {"id": {"S": "1"}},
        "SizeBytes": 59,
        "StreamViewType": "NEW_AND_OLD_IMAGES",
        "ApproximateCreationDateTime": 1479499740,
    }
    if new_image is not None:
        stream["NewImage"] = new_image
    if old_image is not None:
        stream["OldImage"] = old_image
    return {
        "eventID": event_id,
        "eventName": event_name,
        "eventVersion": "1.1",
        "eventSource": "aws:dynamodb",
        "awsRegion": "us-east-1",
        "dynamodb": stream,
        "eventSourceARN": "arn:aws:dynamodb:us-east-1:123456789012:table/items/stream/2024",
    }


def s3_record(
    event_name: str = "ObjectCreated:Put",
    key: str = "uploads/item.json",
    bucket: str = "item-bucket",
) -> Dict[str, Any]:
    """Build an S3 notification record"""
    return {
        "eventVersion": "2.1",
        "eventSource": "aws:s3",
        "awsRegion": "us-east-1",
        "eventTime": "2024-01-01T00:00:00.000Z",
        "eventName": event_name,
        "userIdentity": {"principalId": "AWS:USER"},
        "requestParameters": {"sourceIPAddress": "127.0.0.1"},
        "responseElements": {"x-amz-request-id": "REQ123", "x-amz-id-2": "ID2"},
        "s3": {
            "s3SchemaVersion": "1.0",
            "configurationId": "item-upload",
            "bucket": {
                "name": bucket,
                "ownerIdentity": {"principalId": "OWNER"},
                "arn": f"arn:aws:s3:::{bucket}",
            },
            "object": {"key": key, "size": 1024, "eTag": "abc123", "sequencer": "0A1B2C"},
        },
    }


def sqs_record(body: Any = '{"id": "x"}', message_id: str = "msg-1") -> Dict[str, Any]:
    """Build an SQS message record"""
    return {
        "messageId": message_id,
        "receiptHandle": "handle",
        "body": body,
        "attributes": {
            "ApproximateReceiveCount": "2",
            "SentTimestamp": "1523232000000",
            "SenderId": "123456789012",
            "ApproximateFirstReceiveTimestamp": "1523232000001",
        },
        "messageAttributes": {},
        "md5OfBody": "7b270e59b47ff90a553787216d55d91d",
        "eventSource": "aws:sqs",
        "eventSourceARN": "arn:aws:sqs:us-east-1:123456789012:items",
        "awsRegion": "us-east-1",
    }


def make_event(*records: Dict[str, Any]) -> Dict[str, List[Dict[str, Any]]]:
    """Wrap records in an event envelope"""
    return {"Records": list(records)}


class FakeObjectStore:
    """In-memory object store recording every fetch"""

    def __init__(self, objects: Dict[tuple, bytes]):
        self.objects = objects
        self.calls: List[tuple] = []

    async def get_object(self, bucket: str, key: str) -> Dict[str, Any]:
        self.calls.append((bucket, key))
        payload = self.objects[(bucket, key)]
        return {"Body": payload, "ContentType": "application/octet-stream", "ContentLength": len(payload)}
