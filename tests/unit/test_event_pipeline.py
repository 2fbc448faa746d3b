"""
Unit tests for EventPipeline orchestration.
"""

import asyncio
import json

import pytest

from recordgate.core.errors import (
    ConfigurationError,
    OperationNotAllowedError,
    SchemaNotFoundError,
    ValidationFailureError,
)
from recordgate.core.models import EventConfig
from recordgate.events import EventPipeline
from recordgate.events.records import DynamoDBRecord, SQSRecord

from conftest import FakeObjectStore, dynamodb_record, make_event, s3_record, sqs_record


IMAGE = {"id": {"S": "1"}}
INLINE_SCHEMA = {
    "type": "object",
    "required": ["id"],
    "properties": {"id": {"type": "string"}},
}


def mixed_event():
    return make_event(
        dynamodb_record(new_image=IMAGE, event_id="c1"),
        dynamodb_record(new_image=IMAGE, old_image=IMAGE, event_id="u1"),
        dynamodb_record(old_image=IMAGE, event_id="d1"),
        dynamodb_record(event_id="n1"),
    )


class TestBasicMode:
    """Tests for the synchronous records accessor"""

    def test_default_operations(self, test_logger):
        pipeline = EventPipeline(mixed_event(), logger=test_logger)
        assert [result.record.id for result in pipeline.records] == ["c1", "u1", "d1"]

    def test_operation_filter(self, test_logger):
        pipeline = EventPipeline(mixed_event(), {"operations": ["delete"]}, logger=test_logger)
        assert [result.operation for result in pipeline.records] == ["delete"]

    def test_operation_error(self, test_logger):
        pipeline = EventPipeline(
            mixed_event(), {"operations": ["create"], "operationError": True}, logger=test_logger
        )
        with pytest.raises(OperationNotAllowedError) as exc_info:
            pipeline.records
        assert str(exc_info.value) == "record is operation: update; only allowed create"

    def test_data_class_applied(self, test_logger):
        pipeline = EventPipeline(
            mixed_event(), {"operations": ["create"]}, data_class=lambda record: record.id, logger=test_logger
        )
        assert pipeline.records == ["c1"]

    def test_records_memoized(self, test_logger):
        pipeline = EventPipeline(mixed_event(), logger=test_logger)
        assert pipeline.records is pipeline.records

    @pytest.mark.parametrize(
        "options,before",
        [
            ({"requiredBody": INLINE_SCHEMA}, None),
            ({"getObject": True}, None),
            ({}, lambda results: None),
        ],
    )
    def test_full_mode_options_rejected(self, options, before, test_logger):
        pipeline = EventPipeline(mixed_event(), options, before=before, logger=test_logger)
        with pytest.raises(ConfigurationError) as exc_info:
            pipeline.records
        assert "process()" in str(exc_info.value)

    def test_raw_records(self, test_logger):
        event = mixed_event()
        assert EventPipeline(event, logger=test_logger).raw_records is event["Records"]

    def test_unrecognized_source_kept(self, test_logger):
        raw = {"eventSource": "aws:kinesis", "kinesis": {"data": "abc"}}
        pipeline = EventPipeline(make_event(raw), logger=test_logger)
        assert pipeline.records[0].body == raw
        assert pipeline.records[0].operation == "create"


class TestConfiguration:
    """Tests for option combination checks"""

    @pytest.mark.parametrize(
        "options",
        [
            {"requiredBody": "v1-item"},
            {"isJSON": True},
            {"isCSV": True},
            {"getObject": True, "isJSON": True, "isCSV": True},
            {"operations": ["upsert"]},
        ],
    )
    def test_invalid_combinations(self, options):
        with pytest.raises(ConfigurationError):
            EventPipeline(make_event(), options)

    def test_accepts_event_config(self, test_logger):
        config = EventConfig(operations=["create"])
        assert EventPipeline(make_event(), config, logger=test_logger).config is config


class TestFullMode:
    """Tests for the asynchronous process() pipeline"""

    def test_validation_drops_invalid_records(self, test_logger):
        event = make_event(sqs_record('{"id": "a"}', "m1"), sqs_record('{"id": 2}', "m2"))
        pipeline = EventPipeline(
            event, {"requiredBody": INLINE_SCHEMA, "validationError": False}, logger=test_logger
        )

        results = asyncio.run(pipeline.process())

        assert [result.record.id for result in results] == ["m1"]
        assert pipeline.all_valid is True

    def test_null_body_fails_object_schema(self, test_logger):
        pipeline = EventPipeline(
            make_event(sqs_record("null")),
            {"requiredBody": {"type": "object"}, "validationError": False},
            logger=test_logger,
        )

        assert asyncio.run(pipeline.process()) == []

    def test_validation_error_raises(self, test_logger):
        event = make_event(sqs_record('{"id": "a"}'), sqs_record('{"id": 2}'))
        pipeline = EventPipeline(event, {"requiredBody": INLINE_SCHEMA}, logger=test_logger)

        with pytest.raises(ValidationFailureError) as exc_info:
            asyncio.run(pipeline.process())

        assert json.loads(str(exc_info.value))[0]["path"] == "/id"

    def test_named_entity_from_schema_file(self, openapi_path, test_logger):
        event = make_event(sqs_record('{"id": "1", "name": "lamp"}'), sqs_record('{"id": "2"}'))
        pipeline = EventPipeline(
            event,
            {"requiredBody": "v1-item", "schemaPath": openapi_path, "validationError": False},
            logger=test_logger,
        )
        assert len(asyncio.run(pipeline.process())) == 1

    def test_inline_schema_with_schema_path(self, openapi_path, test_logger):
        pipeline = EventPipeline(
            make_event(sqs_record('{"id": 3}')),
            {"requiredBody": INLINE_SCHEMA, "schemaPath": openapi_path, "validationError": False},
            logger=test_logger,
        )
        assert asyncio.run(pipeline.process()) == []

    def test_missing_entity_propagates(self, openapi_path, test_logger):
        pipeline = EventPipeline(
            make_event(sqs_record()),
            {"requiredBody": "v1-missing", "schemaPath": openapi_path, "validationError": False},
            logger=test_logger,
        )
        with pytest.raises(SchemaNotFoundError):
            asyncio.run(pipeline.process())

    def test_hook_sees_every_result_after_validation(self, test_logger):
        seen = []

        def before(results):
            seen.extend((result.record.id, result.valid) for result in results)

        event = make_event(sqs_record('{"id": "a"}', "m1"), sqs_record('{"id": 2}', "m2"))
        pipeline = EventPipeline(
            event, {"requiredBody": INLINE_SCHEMA, "validationError": False}, before=before, logger=test_logger
        )
        asyncio.run(pipeline.process())

        assert seen == [("m1", True), ("m2", False)]

    def test_async_hook_awaited(self, test_logger):
        calls = []

        async def before(results):
            await asyncio.sleep(0)
            calls.append(len(results))

        pipeline = EventPipeline(make_event(sqs_record()), before=before, logger=test_logger)
        asyncio.run(pipeline.process())

        assert calls == [1]

    def test_hook_can_invalidate_records(self, test_logger):
        def before(results):
            results[0].mark_invalid([])

        pipeline = EventPipeline(
            make_event(sqs_record(message_id="m1"), sqs_record(message_id="m2")), before=before, logger=test_logger
        )
        assert [result.record.id for result in asyncio.run(pipeline.process())] == ["m2"]

    def test_enrichment_then_validation(self, test_logger):
        store = FakeObjectStore({
            ("item-bucket", "good.json"): b'{"id": "ok"}',
            ("item-bucket", "bad.json"): b'{"id": 1}',
        })
        event = make_event(s3_record(key="good.json"), s3_record(key="bad.json"))
        pipeline = EventPipeline(
            event,
            {"getObject": True, "isJSON": True, "requiredBody": INLINE_SCHEMA, "validationError": False},
            store=store,
            logger=test_logger,
        )

        results = asyncio.run(pipeline.process())

        assert [result.body for result in results] == [{"id": "ok"}]

    def test_process_memoized(self, test_logger):
        store = FakeObjectStore({("item-bucket", "a.json"): b"{}"})
        pipeline = EventPipeline(
            make_event(s3_record(key="a.json")), {"getObject": True, "isJSON": True}, store=store, logger=test_logger
        )

        first = asyncio.run(pipeline.process())
        second = asyncio.run(pipeline.process())

        assert first is second
        assert pipeline.records is first
        assert len(store.calls) == 1

    def test_operation_filter_after_validation(self, test_logger):
        event = make_event(
            dynamodb_record(new_image=IMAGE, event_id="c1"),
            dynamodb_record(old_image=IMAGE, event_id="d1"),
        )
        pipeline = EventPipeline(
            event, {"operations": ["create"], "requiredBody": INLINE_SCHEMA}, logger=test_logger
        )
        results = asyncio.run(pipeline.process())
        assert [result.record.id for result in results] == ["c1"]

    def test_data_class_receives_record(self, test_logger):
        pipeline = EventPipeline(
            make_event(sqs_record()), before=lambda results: None, data_class=SQSRecord.body.fget, logger=test_logger
        )
        assert asyncio.run(pipeline.process()) == [{"id": "x"}]

    def test_all_valid_empty_batch(self, test_logger):
        pipeline = EventPipeline(make_event(), {"requiredBody": INLINE_SCHEMA}, logger=test_logger)
        assert asyncio.run(pipeline.process()) == []
        assert pipeline.all_valid is True

    def test_records_are_typed_adapters(self, test_logger):
        pipeline = EventPipeline(mixed_event(), logger=test_logger)
        assert all(isinstance(result.record, DynamoDBRecord) for result in pipeline.records)
