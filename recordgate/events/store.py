"""
Object store used to fetch externally-stored record payloads.
"""

import asyncio
from typing import Any, Dict, Protocol

import boto3


class ObjectStore(Protocol):
    """
    Anything that can fetch a stored object.

    get_object returns a mapping holding at least "Body" (bytes) plus
    whatever metadata the store reports (ContentType, ContentLength, ...).
    """

    async def get_object(self, bucket: str, key: str) -> Dict[str, Any]:
        ...


class S3ObjectStore:
    """
    ObjectStore backed by an S3 client.

    The boto3 client is blocking, so calls run in a worker thread and the
    streaming body is read completely before returning.
    """

    def __init__(self, client: Any = None):
        """
        Initialize store.

        Args:
            client: boto3 S3 client (created from the default session when omitted)
        """
        self.client = client or boto3.client("s3")

    def _fetch(self, bucket: str, key: str) -> Dict[str, Any]:
        response = self.client.get_object(Bucket=bucket, Key=key)
        body = response.get("Body")
        payload = body.read() if hasattr(body, "read") else (body or b"")
        return {**{k: v for k, v in response.items() if k != "ResponseMetadata"}, "Body": payload}

    async def get_object(self, bucket: str, key: str) -> Dict[str, Any]:
        return await asyncio.to_thread(self._fetch, bucket, key)
