"""Collaborator interfaces."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from formschema.typing.models import AuditRecord


class AttributeBackend(Protocol):
    """Transport to the external text-generation service."""

    async def complete(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Send one chat-completion payload.

        Args:
            payload: Request payload.

        Returns:
            dict[str, Any]: Raw response payload.
        """


class AuditSink(Protocol):
    """Destination of generation audit records."""

    async def record(self, entry: AuditRecord) -> None:
        """Persist one audit record.

        Args:
            entry: Audit record.
        """
