"""Audit trail of attribute generation calls."""

from __future__ import annotations

import asyncio
import secrets
import time
from pathlib import Path
from typing import TYPE_CHECKING

from formschema import logger

if TYPE_CHECKING:
    from formschema.typing.models import AuditRecord


def generate_request_id() -> str:
    """Return a fresh id correlating the log lines of one generation call.

    Returns:
        str: ``req_<epoch-ms>_<random>``.
    """
    return f"req_{int(time.time() * 1000)}_{secrets.token_hex(5)}"


class JsonlAuditSink:
    """Append audit records to a JSON-lines file."""

    def __init__(self, path: Path | str) -> None:
        """Initialize sink.

        Args:
            path (Path | str): Target file; parent directories are created on first write.
        """
        self.path = Path(path)

    def _append(self, line: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(line + "\n")

    async def record(self, entry: AuditRecord) -> None:
        """Append one record without blocking the event loop."""
        await asyncio.to_thread(self._append, entry.to_json())


class LoggingAuditSink:
    """Emit audit records as structured log events."""

    async def record(self, entry: AuditRecord) -> None:
        """Log one record."""
        logger.info("Generation audit", extra=entry.model_dump(mode="json", by_alias=True, exclude_none=True))


class MemoryAuditSink:
    """Keep audit records in memory, in call order."""

    def __init__(self) -> None:
        """Initialize an empty sink."""
        self.records: list[AuditRecord] = []

    async def record(self, entry: AuditRecord) -> None:
        """Store one record."""
        self.records.append(entry)
