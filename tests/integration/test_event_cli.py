"""
Integration tests for the recordgate CLI.

Runs the process and validate commands against files on disk.
"""

import json

import pytest

from recordgate.cli.event_cli import main

from conftest import dynamodb_record, make_event, sqs_record


QUIET = ["--log-level", "CRITICAL"]

ITEM_SCHEMA = {
    "type": "object",
    "required": ["id"],
    "properties": {"id": {"type": "string"}},
}


def output_json(capsys):
    return json.loads(capsys.readouterr().out)


@pytest.mark.integration
class TestProcessCommand:
    """Tests for `recordgate process`"""

    def test_operation_filter(self, write_json, capsys):
        event = make_event(
            dynamodb_record(new_image={"id": {"S": "1"}}, event_id="c1"),
            dynamodb_record(old_image={"id": {"S": "2"}}, event_id="d1"),
        )
        event_path = write_json("event.json", event)

        code = main([*QUIET, "process", "--event", event_path, "--operations", "create"])

        assert code == 0
        records = output_json(capsys)
        assert [record["id"] for record in records] == ["c1"]
        assert records[0]["body"] == {"id": "1"}
        assert records[0]["source"] == "aws:dynamodb"

    def test_entity_validation_drops_invalid(self, write_json, openapi_path, capsys):
        event = make_event(sqs_record('{"id": "1", "name": "a"}', "m1"), sqs_record('{"id": "2"}', "m2"))
        event_path = write_json("event.json", event)

        code = main([
            *QUIET, "process", "--event", event_path,
            "--schema", openapi_path, "--entity", "v1-item", "--no-validation-error",
        ])

        assert code == 0
        assert [record["id"] for record in output_json(capsys)] == ["m1"]

    def test_dropped_invalid_records_logged(self, write_json, monkeypatch, capsys):
        monkeypatch.delenv("LOG_FORMAT", raising=False)
        event = make_event(sqs_record('{"id": "1"}', "m1"), sqs_record('{"id": 2}', "m2"))
        event_path = write_json("event.json", event)
        schema_path = write_json("item.json", ITEM_SCHEMA)

        code = main([
            "--log-level", "INFO", "process", "--event", event_path,
            "--inline-schema", schema_path, "--no-validation-error",
        ])

        assert code == 0
        captured = capsys.readouterr()
        assert [record["id"] for record in json.loads(captured.out)] == ["m1"]
        lines = [json.loads(line) for line in captured.err.splitlines() if line.strip()]
        summary = next(line for line in lines if line["message"] == "Event processed")
        assert summary["invalid_records"] == 1
        assert summary["kept_records"] == 1

    def test_validation_failure_exit_code(self, write_json, capsys):
        event_path = write_json("event.json", make_event(sqs_record('{"id": 5}')))
        schema_path = write_json("item.json", ITEM_SCHEMA)

        code = main([*QUIET, "process", "--event", event_path, "--inline-schema", schema_path])

        assert code == 1
        result = output_json(capsys)
        assert json.loads(result["error"])[0]["path"] == "/id"

    def test_configuration_error(self, write_json, capsys):
        event_path = write_json("event.json", make_event())

        code = main([*QUIET, "process", "--event", event_path, "--entity", "v1-item"])

        assert code == 1
        assert "schema_path" in output_json(capsys)["error"]

    def test_metrics_file_written(self, write_json, tmp_path, capsys):
        event_path = write_json("event.json", make_event(sqs_record('{"id": "1"}')))
        metrics_path = tmp_path / "recordgate.prom"

        code = main([*QUIET, "process", "--event", event_path, "--metrics-file", str(metrics_path)])

        assert code == 0
        assert len(output_json(capsys)) == 1
        assert 'recordgate_records_classified_total{source="aws:sqs"}' in metrics_path.read_text()

    def test_missing_event_file(self, tmp_path):
        assert main([*QUIET, "process", "--event", str(tmp_path / "missing.json")]) == 1


@pytest.mark.integration
class TestValidateCommand:
    """Tests for `recordgate validate`"""

    def test_valid_payload(self, write_json, openapi_path, capsys):
        payload = write_json("payload.json", {"id": "1", "name": "lamp"})

        code = main([*QUIET, "validate", "--payload", payload, "--schema", openapi_path, "--entity", "v1-item"])

        assert code == 0
        assert output_json(capsys) == []

    def test_invalid_payload_inline_schema(self, write_json, capsys):
        payload = write_json("payload.json", {"id": 1})
        schema = write_json("item.json", ITEM_SCHEMA)

        code = main([*QUIET, "validate", "--payload", payload, "--schema", schema])

        assert code == 1
        entries = output_json(capsys)
        assert entries == [{"key": "/id", "message": "1 is not of type 'string'"}]

    def test_unknown_entity(self, write_json, openapi_path):
        payload = write_json("payload.json", {})
        code = main([*QUIET, "validate", "--payload", payload, "--schema", openapi_path, "--entity", "nope"])
        assert code == 1


@pytest.mark.integration
def test_no_command_prints_help(capsys):
    assert main([]) == 1
    assert "process" in capsys.readouterr().out
