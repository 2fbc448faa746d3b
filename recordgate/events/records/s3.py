"""
S3 event record: a create/remove/restore notification for a stored object.
"""

from typing import Any
from urllib.parse import unquote_plus

from .base import BaseRecord


class S3Record(BaseRecord):
    """
    Object-storage record.

    The body starts as None and is replaced in place when the object's
    content is fetched during enrichment.
    """

    def __init__(self, raw_record: dict[str, Any]):
        super().__init__(raw_record)
        self._body: Any = None

    @property
    def _s3(self) -> dict[str, Any]:
        return self._raw.get("s3") or {}

    @property
    def _object(self) -> dict[str, Any]:
        return self._s3.get("object") or {}

    @property
    def _bucket(self) -> dict[str, Any]:
        return self._s3.get("bucket") or {}

    @property
    def event_name(self) -> str:
        """e.g. ObjectCreated:Put, ObjectRemoved:Delete."""
        return self._raw.get("eventName") or ""

    @property
    def name(self) -> str:
        return self.event_name

    @property
    def version(self) -> str:
        return self._raw.get("eventVersion") or ""

    @property
    def time(self) -> str:
        return self._raw.get("eventTime") or ""

    @property
    def region(self) -> str:
        return self._raw.get("awsRegion") or ""

    @property
    def request(self) -> dict[str, str]:
        parameters = self._raw.get("requestParameters") or {}
        return {"sourceIPAddress": parameters.get("sourceIPAddress") or ""}

    @property
    def response(self) -> dict[str, str]:
        elements = self._raw.get("responseElements") or {}
        return {
            "x-amz-request-id": elements.get("x-amz-request-id") or "",
            "x-amz-id-2": elements.get("x-amz-id-2") or "",
        }

    @property
    def id(self) -> str:
        return self.configuration_id

    @property
    def configuration_id(self) -> str:
        return self._s3.get("configurationId") or ""

    @property
    def bucket_name(self) -> str:
        return self._bucket.get("name") or ""

    @property
    def bucket_arn(self) -> str:
        return self._bucket.get("arn") or ""

    @property
    def bucket(self) -> dict[str, Any]:
        owner = self._bucket.get("ownerIdentity") or {}
        return {
            "name": self.bucket_name,
            "ownerIdentity": {"principalId": owner.get("principalId") or ""},
            "arn": self.bucket_arn,
        }

    @property
    def key(self) -> str:
        """Object key, URL-decoded with '+' read as a space."""
        return unquote_plus(self._object.get("key") or "")

    @property
    def size(self) -> int:
        return self._object.get("size") or 0

    @property
    def etag(self) -> str:
        return self._object.get("eTag") or ""

    @property
    def version_id(self) -> str:
        return self._object.get("versionId") or ""

    @property
    def sequencer(self) -> str:
        return self._object.get("sequencer") or ""

    @property
    def object(self) -> dict[str, Any]:
        return {"key": self.key, "size": self.size, "eTag": self.etag, "sequencer": self.sequencer}

    @property
    def request_id(self) -> str:
        return self.response["x-amz-request-id"]

    @property
    def requester(self) -> str:
        return (self._raw.get("userIdentity") or {}).get("principalId") or ""

    @property
    def uri(self) -> str:
        return f"s3://{self.bucket_name}/{self.key}"

    @property
    def body(self) -> Any:
        return self._body

    @body.setter
    def body(self, value: Any) -> None:
        self._body = value

    @property
    def operation(self) -> str:
        event_name = self.event_name.lower()

        if "objectcreated" in event_name or "put" in event_name or "post" in event_name:
            return "create"
        if "objectremoved" in event_name or "delete" in event_name:
            return "delete"
        if "objectrestore" in event_name:
            return "update"
        return "unknown"

    @property
    def is_created(self) -> bool:
        return self.operation == "create"

    @property
    def is_removed(self) -> bool:
        return self.operation == "delete"
