"""
Event pipeline: classify, enrich, validate, hook, filter, transform.

Two modes:
    records (sync):    classify -> operation filter -> data_class
    process() (async): classify -> enrich -> validate -> before hook
                       -> validity filter -> operation filter -> data_class

Each mode computes its output once; later reads return the same list.
"""

import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from recordgate.core.errors import ConfigurationError, OperationNotAllowedError
from recordgate.core.models import EventConfig, RecordResult
from recordgate.core.rules import Validator
from recordgate.core.schema import SchemaStore
from recordgate.events.classifier import RecordClassifier
from recordgate.events.enricher import RecordEnricher
from recordgate.events.store import ObjectStore
from recordgate.observability.logger import get_logger, log_operation
from recordgate.observability.metrics import (
    increment_counter,
    pipeline_duration_seconds,
    record_validation,
    records_dropped_total,
    track_duration,
)

BeforeHook = Callable[[List[RecordResult]], Union[None, Awaitable[None]]]


class EventPipeline:
    """
    Turns one cloud event into the final sequence of kept records.

    Output items are RecordResult wrappers, or whatever data_class returns
    for each kept record when a data_class is supplied.
    """

    def __init__(
        self,
        event: Dict[str, Any],
        config: EventConfig | Dict[str, Any] | None = None,
        *,
        before: Optional[BeforeHook] = None,
        data_class: Optional[Callable[[Any], Any]] = None,
        store: ObjectStore | None = None,
        logger: logging.Logger | None = None,
    ):
        """
        Initialize pipeline.

        Args:
            event: Event mapping with a "Records" list
            config: EventConfig or mapping of options (camelCase accepted)
            before: Hook called with every RecordResult after validation
            data_class: Callable applied to each kept record
            store: Object store used when get_object is enabled
            logger: Logger shared by every pipeline component

        Raises:
            ConfigurationError: If the options are inconsistent
        """
        if config is None or isinstance(config, dict):
            config = EventConfig.from_options(config)

        self.event = event
        self.config = config
        self.before = before
        self.data_class = data_class
        self.logger = logger or get_logger(__name__)
        self.classifier = RecordClassifier(logger=self.logger)
        self.enricher = RecordEnricher(
            store=store,
            is_json=config.is_json,
            is_csv=config.is_csv,
            logger=self.logger,
        )

        self._results: Optional[List[RecordResult]] = None
        self._output: Optional[List[Any]] = None

    @property
    def raw_records(self) -> List[Dict[str, Any]]:
        return self.event.get("Records") or []

    @property
    def records(self) -> List[Any]:
        """
        Final records from the synchronous basic mode.

        Once process() has completed, returns its output instead.

        Raises:
            ConfigurationError: If a hook, validation or enrichment is configured
                and process() has not run
            OperationNotAllowedError: On a disallowed operation with operation_error set
        """
        if self._output is not None:
            return self._output

        if self.before is not None or self.config.needs_full_mode:
            raise ConfigurationError(
                "Must use process() with before, required_body or get_object and await the records"
            )

        with track_duration(pipeline_duration_seconds, mode="basic"):
            results = self._classify()
            results = self._filter_operations(results)
            self._finish(results)
        return self._output

    @property
    def all_valid(self) -> bool:
        """True when every kept record is valid; True for an empty batch."""
        return all(result.valid for result in (self._results or []))

    async def process(self) -> List[Any]:
        """
        Run the full pipeline.

        Returns:
            Final records (same list on repeated calls)

        Raises:
            ValidationFailureError: On the first invalid record with validation_error set
            OperationNotAllowedError: On a disallowed operation with operation_error set
            SchemaError: If the configured schema cannot be resolved
        """
        if self._output is not None:
            return self._output

        with log_operation("Processing event", logger=self.logger, records=len(self.raw_records)) as op:
            with track_duration(pipeline_duration_seconds, mode="full"):
                results = self._classify()
                if self.config.get_object:
                    await self.enricher.enrich(results)
                self._validate(results)
                await self._run_before(results)
                results = self._filter_valid(results)
                results = self._filter_operations(results)
                self._finish(results)
            op.fields["kept"] = len(self._output)
        return self._output

    # =======================
    # STAGES
    # =======================

    def _classify(self) -> List[RecordResult]:
        return [RecordResult(record=record) for record in self.classifier.classify_all(self.raw_records)]

    def _build_schema_store(self) -> SchemaStore:
        if self.config.schema_path:
            return SchemaStore.from_file_path(
                self.config.schema_path,
                strict_validation=self.config.strict_validation,
                logger=self.logger,
            )
        return SchemaStore.from_inline_schema(
            self.config.required_body,
            strict_validation=self.config.strict_validation,
            logger=self.logger,
        )

    def _validate(self, results: List[RecordResult]) -> None:
        if self.config.required_body is None:
            return

        store = self._build_schema_store()
        validator = Validator(store, validation_error=self.config.validation_error, logger=self.logger)

        # An inline schema with schema_path is passed through as the entity
        entity = self.config.required_body if self.config.schema_path else ""
        for result in results:
            valid = validator.validate_record(result, entity)
            record_validation(valid)

    async def _run_before(self, results: List[RecordResult]) -> None:
        if self.before is None:
            return
        outcome = self.before(results)
        if inspect.isawaitable(outcome):
            await outcome

    def _filter_valid(self, results: List[RecordResult]) -> List[RecordResult]:
        kept = [result for result in results if result.valid]
        increment_counter(records_dropped_total, len(results) - len(kept), reason="invalid")
        return kept

    def _filter_operations(self, results: List[RecordResult]) -> List[RecordResult]:
        allowed = self.config.operations
        kept = []
        for result in results:
            if result.operation in allowed:
                kept.append(result)
            elif self.config.operation_error:
                raise OperationNotAllowedError(result.operation, allowed)
            else:
                self.logger.debug(
                    "Dropping record with disallowed operation",
                    extra={"operation": result.operation}
                )
        increment_counter(records_dropped_total, len(results) - len(kept), reason="operation")
        return kept

    def _finish(self, results: List[RecordResult]) -> None:
        self._results = results
        if self.data_class is not None:
            self._output = [self.data_class(result.record) for result in results]
        else:
            self._output = results
