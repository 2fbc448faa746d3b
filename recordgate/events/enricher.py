"""
Record enricher: replaces object-storage record bodies with the stored content.
"""

import csv
import io
import json
import logging
from typing import Any, Dict

from recordgate.core.models import RecordResult
from recordgate.events.records import S3Record
from recordgate.events.store import ObjectStore, S3ObjectStore
from recordgate.observability.logger import get_logger
from recordgate.observability.metrics import enrichment_fetches_total, increment_counter


class RecordEnricher:
    """
    Fetches and decodes the payload behind each object-storage record.

    Records are fetched one after another in input order; enrich() only
    returns once every eligible record has its body set.

    Decoding modes:
        is_json: payload parsed as JSON (None when empty)
        is_csv: payload parsed as delimited text with a header row into a
                list of row mappings (None when empty)
        otherwise: the store's metadata with "Body" as raw bytes
    """

    def __init__(
        self,
        store: ObjectStore | None = None,
        is_json: bool = False,
        is_csv: bool = False,
        logger: logging.Logger | None = None,
    ):
        self._store = store
        self.is_json = is_json
        self.is_csv = is_csv
        self.logger = logger or get_logger(__name__)

    @property
    def store(self) -> ObjectStore:
        if self._store is None:
            self._store = S3ObjectStore()
        return self._store

    @property
    def mode(self) -> str:
        if self.is_json:
            return "json"
        if self.is_csv:
            return "csv"
        return "raw"

    async def enrich(self, results: list[RecordResult]) -> None:
        """
        Fetch content for every S3 record in the batch.

        Args:
            results: Pipeline results; other record kinds are left untouched
        """
        for result in results:
            record = result.record
            if not isinstance(record, S3Record):
                continue

            self.logger.debug(
                "Fetching stored object",
                extra={"bucket": record.bucket_name, "key": record.key}
            )
            obj = await self.store.get_object(record.bucket_name, record.key)
            record.body = self.decode(obj)
            increment_counter(enrichment_fetches_total, mode=self.mode)

    def decode(self, obj: Dict[str, Any]) -> Any:
        """Decode a fetched object according to the configured mode."""
        payload = obj.get("Body") or b""
        if isinstance(payload, str):
            payload = payload.encode("utf-8")

        if self.is_json:
            text = payload.decode("utf-8")
            return json.loads(text) if text.strip() else None

        if self.is_csv:
            text = payload.decode("utf-8-sig")
            if not text.strip():
                return None
            return list(csv.DictReader(io.StringIO(text)))

        return {**obj, "Body": bytes(payload)}
