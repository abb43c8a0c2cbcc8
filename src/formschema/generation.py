"""Field attribute generation with sanitization and audit trail."""

from __future__ import annotations

import time
from datetime import UTC, datetime
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict

from formschema import logger
from formschema.audit import JsonlAuditSink, generate_request_id
from formschema.backends.openai_generator import OpenAIAttributeBackend, completion_content, parse_attribute_content
from formschema.exceptions import GeneratorError, GeneratorResponseError, MissingRequiredFieldError
from formschema.logging import request_context
from formschema.prompts import build_completion_payload
from formschema.sanitizer import sanitize_attributes
from formschema.typing.models import AuditRecord, AuditRequest, AuditResponse, SanitizerIssue

if TYPE_CHECKING:
    from formschema.settings import Settings
    from formschema.typing.models import AttributeRequest
    from formschema.typing.protocol import AttributeBackend, AuditSink

FALLBACK_ATTRIBUTES = MappingProxyType({"display_name": "Field", "width": 12})


class GenerationResult(BaseModel):
    """Outcome of one generation call."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    request_id: str
    attributes: dict[str, Any]
    issues: tuple[SanitizerIssue, ...] = ()
    degraded: bool = False


class AttributeGenerationService:
    """Generate display attributes for a field through the external text generator.

    Every call writes exactly one audit record. Upstream failures degrade to
    `FALLBACK_ATTRIBUTES`; a response without `display_name` is audited and
    re-raised as `MissingRequiredFieldError`.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        backend: AttributeBackend | None = None,
        audit_sink: AuditSink | None = None,
    ) -> None:
        """Initialize service.

        Args:
            settings (Settings): Runtime settings.
            backend (AttributeBackend | None): Transport; defaults to the OpenAI backend.
            audit_sink (AuditSink | None): Audit destination; defaults to the JSONL file in settings.
        """
        self._settings = settings
        self._backend = backend or OpenAIAttributeBackend(settings)
        self._audit_sink = audit_sink or JsonlAuditSink(settings.audit_log_path)

    async def generate(self, request: AttributeRequest) -> GenerationResult:
        """Generate, sanitize and audit attributes for one field.

        Args:
            request (AttributeRequest): Generation request.

        Raises:
            MissingRequiredFieldError: If the generator omitted `display_name`.

        Returns:
            GenerationResult: Cleaned attributes, or the fallback record when degraded.
        """
        request_id = generate_request_id()
        started = time.perf_counter()
        with request_context(request_id):
            return await self._generate(request, request_id, started)

    async def _generate(self, request: AttributeRequest, request_id: str, started: float) -> GenerationResult:
        payload = build_completion_payload(request, self._settings)
        if request.screenshot:
            logger.info("Ignoring screenshot; generation is intent-based")

        received: dict[str, Any] | None = None
        logger.info(
            "Sending generation request",
            extra={"model": payload["model"], "messages": len(payload["messages"])},
        )
        try:
            received = await self._backend.complete(payload)
            logger.info("Generation response received")
            raw = parse_attribute_content(completion_content(received))
        except (GeneratorError, GeneratorResponseError) as exc:
            logger.warning("Generation failed; returning fallback attributes", extra={"error": str(exc)})
            await self._audit(request, request_id, started, payload, received, error=str(exc))
            return GenerationResult(request_id=request_id, attributes=dict(FALLBACK_ATTRIBUTES), degraded=True)

        try:
            result = sanitize_attributes(raw, request.field_type)
        except MissingRequiredFieldError as exc:
            logger.warning("Generator response rejected", extra={"error": str(exc)})
            await self._audit(request, request_id, started, payload, received, error=str(exc), data=raw)
            raise

        await self._audit(request, request_id, started, payload, received, data=result.attributes)
        logger.info("Generated attributes", extra={"keys": sorted(result.attributes)})
        return GenerationResult(request_id=request_id, attributes=result.attributes, issues=result.issues)

    async def _audit(  # noqa: PLR0913
        self,
        request: AttributeRequest,
        request_id: str,
        started: float,
        sent: dict[str, Any],
        received: Any,
        *,
        data: dict[str, Any] | None = None,
        error: str | None = None,
    ) -> None:
        entry = AuditRecord(
            timestamp=datetime.now(UTC),
            request_id=request_id,
            request=AuditRequest(
                intent=request.intent,
                field_type=request.field_type.value,
                group_type=request.group_type,
                has_screenshot=bool(request.screenshot),
            ),
            response=AuditResponse(success=error is None, data=data, error=error),
            sent_payload=sent,
            received_payload=received,
            duration=int((time.perf_counter() - started) * 1000),
        )
        await self._audit_sink.record(entry)
