"""Typing-centric domain modules."""

from formschema.typing.enums import ColorTheme, CoordinateFormat, InputType, IssueKind
from formschema.typing.models import (
    AttributeRequest,
    AuditRecord,
    BlockStyle,
    DisplayAttributes,
    PdfAttributes,
    SanitizeResult,
    SanitizerIssue,
    Schema,
    SchemaItem,
)
from formschema.typing.protocol import AttributeBackend, AuditSink

__all__ = [
    "AttributeBackend",
    "AttributeRequest",
    "AuditRecord",
    "AuditSink",
    "BlockStyle",
    "ColorTheme",
    "CoordinateFormat",
    "DisplayAttributes",
    "InputType",
    "IssueKind",
    "PdfAttributes",
    "SanitizeResult",
    "SanitizerIssue",
    "Schema",
    "SchemaItem",
]
