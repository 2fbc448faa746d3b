"""
SQS record: one queue message.
"""

import json
from typing import Any

from .base import BaseRecord


def _reject_constant(token: str) -> Any:
    raise ValueError(f"{token} is not valid JSON")


def _to_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


class SQSRecord(BaseRecord):
    """
    Queue-message record. Always classified as a create.
    """

    @property
    def message_id(self) -> str:
        return self._raw.get("messageId") or ""

    @property
    def id(self) -> str:
        return self.message_id

    @property
    def receipt_handle(self) -> str:
        return self._raw.get("receiptHandle") or ""

    @property
    def raw_body(self) -> Any:
        """Message body exactly as delivered."""
        return self._raw.get("body")

    @property
    def body(self) -> Any:
        """Message body parsed as JSON, or the original text when it is not JSON."""
        try:
            return json.loads(self.raw_body, parse_constant=_reject_constant)
        except (ValueError, TypeError):
            return self.raw_body

    @property
    def attributes(self) -> dict[str, Any]:
        return self._raw.get("attributes") or {}

    @property
    def message_attributes(self) -> dict[str, Any]:
        parsed = {}
        for key, value in (self._raw.get("messageAttributes") or {}).items():
            if value.get("stringValue"):
                parsed[key] = value["stringValue"]
            elif value.get("binaryValue"):
                parsed[key] = value["binaryValue"]
            elif value.get("dataType"):
                parsed[key] = value
        return parsed

    @property
    def md5(self) -> str:
        return self._raw.get("md5OfBody") or ""

    @property
    def source_arn(self) -> str:
        return self._raw.get("eventSourceARN") or ""

    @property
    def region(self) -> str:
        return self._raw.get("awsRegion") or ""

    @property
    def receive_count(self) -> int:
        return _to_int(self.attributes.get("ApproximateReceiveCount", "0"))

    @property
    def first_receive_timestamp(self) -> int:
        return _to_int(self.attributes.get("ApproximateFirstReceiveTimestamp", "0"))

    @property
    def sender_id(self) -> str:
        return self.attributes.get("SenderId") or ""

    @property
    def sent_timestamp(self) -> int:
        return _to_int(self.attributes.get("SentTimestamp", "0"))

    @property
    def operation(self) -> str:
        return "create"
