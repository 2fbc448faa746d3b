"""
Record classifier: picks a record adapter from a raw record's source tag.
"""

import logging
from typing import Any, Dict, Type

from recordgate.events.records import (
    BaseRecord,
    DynamoDBRecord,
    S3Record,
    SQSRecord,
    UnrecognizedRecord,
)
from recordgate.observability.logger import get_logger
from recordgate.observability.metrics import increment_counter, records_classified_total


class RecordClassifier:
    """
    Dispatches raw records to the adapter registered for their source tag.

    Unrecognized tags fall back to UnrecognizedRecord so that a batch
    never fails on source alone.
    """

    ADAPTERS: Dict[str, Type[BaseRecord]] = {
        "aws:dynamodb": DynamoDBRecord,
        "aws:s3": S3Record,
        "aws:sqs": SQSRecord,
    }

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or get_logger(__name__)

    def classify(self, raw_record: Dict[str, Any]) -> BaseRecord:
        """
        Wrap one raw record in its adapter.

        Args:
            raw_record: Record as delivered in the event's Records list

        Returns:
            Adapter instance owning a private copy of the record
        """
        source = raw_record.get("eventSource") or ""
        adapter = self.ADAPTERS.get(source)

        if adapter is None:
            self.logger.warning(
                "Unrecognized event source, using fallback record",
                extra={"event_source": source}
            )
            adapter = UnrecognizedRecord

        increment_counter(records_classified_total, source=source or "unknown")
        return adapter(raw_record)

    def classify_all(self, raw_records: list[Dict[str, Any]]) -> list[BaseRecord]:
        """Classify records in input order."""
        return [self.classify(raw_record) for raw_record in raw_records]
