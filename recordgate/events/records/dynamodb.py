"""
DynamoDB stream record: before/after images of a table item.
"""

from decimal import Decimal
from typing import Any

from boto3.dynamodb.types import Binary, TypeDeserializer

from .base import BaseRecord

_deserializer = TypeDeserializer()


def _plain(value: Any) -> Any:
    # Decimal/Binary/set are not JSON Schema friendly
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, Binary):
        return value.value
    if isinstance(value, (set, frozenset)):
        items = [_plain(item) for item in value]
        try:
            return sorted(items)
        except TypeError:
            return items
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_plain(item) for item in value]
    return value


def unmarshall(image: dict[str, Any] | None) -> dict[str, Any]:
    """
    Convert a DynamoDB attribute-value map to plain Python values.

    Args:
        image: e.g. {"id": {"S": "1"}, "count": {"N": "3"}}

    Returns:
        e.g. {"id": "1", "count": 3}
    """
    if not image:
        return {}
    return {key: _plain(_deserializer.deserialize(value)) for key, value in image.items()}


class DynamoDBRecord(BaseRecord):
    """
    Change-feed record; the operation follows from which images are present.
    """

    @property
    def _stream(self) -> dict[str, Any]:
        return self._raw.get("dynamodb") or {}

    @property
    def id(self) -> str:
        return self._raw.get("eventID") or ""

    @property
    def name(self) -> str:
        """INSERT, MODIFY or REMOVE."""
        return self._raw.get("eventName") or ""

    @property
    def region(self) -> str:
        return self._raw.get("awsRegion") or ""

    @property
    def version(self) -> str:
        return self._raw.get("eventVersion") or ""

    @property
    def new_image(self) -> dict[str, Any]:
        return unmarshall(self._stream.get("NewImage"))

    @property
    def old_image(self) -> dict[str, Any]:
        return unmarshall(self._stream.get("OldImage"))

    @property
    def body(self) -> dict[str, Any]:
        return self.new_image

    @property
    def keys(self) -> dict[str, Any]:
        return unmarshall(self._stream.get("Keys"))

    @property
    def source_arn(self) -> str:
        return self._raw.get("eventSourceARN") or ""

    @property
    def stream_type(self) -> str:
        return self._stream.get("StreamViewType") or ""

    @property
    def size(self) -> int:
        return self._stream.get("SizeBytes") or 0

    @property
    def created(self) -> float:
        return self._stream.get("ApproximateCreationDateTime") or 0

    @property
    def identity(self) -> dict[str, Any] | None:
        """User identity; set by DynamoDB for TTL deletions."""
        return self._raw.get("userIdentity") or None

    @property
    def expired(self) -> bool:
        return bool((self.identity or {}).get("principalId"))

    @property
    def operation(self) -> str:
        has_new = bool(self._stream.get("NewImage"))
        has_old = bool(self._stream.get("OldImage"))

        if has_new and not has_old:
            return "create"
        if has_new and has_old:
            return "update"
        if not has_new and has_old:
            return "delete"
        return "unknown"
