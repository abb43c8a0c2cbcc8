"""Core domain model exports."""

from formschema.typing.models.generation import (
    AttributeRequest,
    AuditRecord,
    AuditRequest,
    AuditResponse,
    SanitizeResult,
    SanitizerIssue,
)
from formschema.typing.models.schema import (
    BlockStyle,
    DisplayAttributes,
    PdfAttributes,
    Schema,
    SchemaItem,
)

__all__ = [
    "AttributeRequest",
    "AuditRecord",
    "AuditRequest",
    "AuditResponse",
    "BlockStyle",
    "DisplayAttributes",
    "PdfAttributes",
    "SanitizeResult",
    "SanitizerIssue",
    "Schema",
    "SchemaItem",
]
