from __future__ import annotations

import asyncio
import json
import re
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from formschema.audit import JsonlAuditSink, LoggingAuditSink, MemoryAuditSink, generate_request_id
from formschema.typing.models import AuditRecord, AuditRequest, AuditResponse

if TYPE_CHECKING:
    from pathlib import Path


def _record(request_id: str = "req_1_abc") -> AuditRecord:
    return AuditRecord(
        timestamp=datetime(2026, 3, 1, tzinfo=UTC),
        request_id=request_id,
        request=AuditRequest(intent="buyer phone", field_type="text", group_type="buyer"),
        response=AuditResponse(success=True, data={"display_name": "Phone"}),
        sent_payload={"model": "gpt-test"},
        duration=4,
    )


def test_generate_request_id_format() -> None:
    first = generate_request_id()
    second = generate_request_id()

    assert re.fullmatch(r"req_\d+_[0-9a-f]{10}", first)
    assert first != second


def test_jsonl_sink_appends_one_line_per_record(tmp_path: Path) -> None:
    sink = JsonlAuditSink(tmp_path / "logs" / "ai-requests.jsonl")

    asyncio.run(sink.record(_record("req_1_a")))
    asyncio.run(sink.record(_record("req_2_b")))

    lines = sink.path.read_text(encoding="utf-8").splitlines()
    assert [json.loads(line)["requestId"] for line in lines] == ["req_1_a", "req_2_b"]
    assert json.loads(lines[0])["response"] == {"success": True, "data": {"display_name": "Phone"}}


def test_logging_sink_emits_structured_event(mocker) -> None:
    mock_logger = mocker.patch("formschema.audit.logger")

    asyncio.run(LoggingAuditSink().record(_record()))

    mock_logger.info.assert_called_once()
    args, kwargs = mock_logger.info.call_args
    assert args == ("Generation audit",)
    assert kwargs["extra"]["requestId"] == "req_1_abc"


def test_memory_sink_keeps_call_order() -> None:
    sink = MemoryAuditSink()

    asyncio.run(sink.record(_record("a")))
    asyncio.run(sink.record(_record("b")))

    assert [entry.request_id for entry in sink.records] == ["a", "b"]
