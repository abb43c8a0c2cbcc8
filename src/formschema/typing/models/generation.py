"""Attribute generation, sanitizer and audit models."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from formschema.typing.enums import InputType, IssueKind


class AttributeRequest(BaseModel):
    """Request for generated display attributes of one field."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    intent: str = Field(min_length=1)
    field_type: InputType
    group_type: str = Field(min_length=1)
    pdf_context: list[str] = Field(default_factory=list, description="Source PDF field names.")
    screenshot: str | None = Field(default=None, description="Accepted for compatibility; never sent upstream.")


class SanitizerIssue(BaseModel):
    """One recovered condition met while cleaning an attribute record."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: IssueKind
    key: str
    detail: str | None = None


class SanitizeResult(BaseModel):
    """Cleaned attribute record and the issues recovered along the way."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    attributes: dict[str, Any]
    issues: tuple[SanitizerIssue, ...] = ()

    def has_issue(self, kind: IssueKind, key: str | None = None) -> bool:
        """Return whether an issue of `kind` (optionally for `key`) was recorded."""
        return any(issue.kind == kind and (key is None or issue.key == key) for issue in self.issues)


class _CamelModel(BaseModel):
    model_config = ConfigDict(extra="forbid", alias_generator=to_camel, populate_by_name=True)


class AuditRequest(_CamelModel):
    """Request summary stored in an audit record."""

    intent: str
    field_type: str
    group_type: str
    has_screenshot: bool = False


class AuditResponse(_CamelModel):
    """Outcome stored in an audit record."""

    success: bool
    data: dict[str, Any] | None = None
    error: str | None = None


class AuditRecord(_CamelModel):
    """Pairing of one generation call's input, upstream traffic and cleaned output."""

    timestamp: datetime
    request_id: str
    request: AuditRequest
    response: AuditResponse
    sent_payload: dict[str, Any] | None = None
    received_payload: Any = None
    duration: int = Field(ge=0, description="Elapsed milliseconds.")

    def to_json(self) -> str:
        """Serialize with camelCase keys, omitting absent values."""
        return self.model_dump_json(by_alias=True, exclude_none=True)
