"""Attribute generator backends."""

from formschema.backends.openai_generator import (
    OpenAIAttributeBackend,
    completion_content,
    parse_attribute_content,
)
from formschema.typing.protocol import AttributeBackend

__all__ = [
    "AttributeBackend",
    "OpenAIAttributeBackend",
    "completion_content",
    "parse_attribute_content",
]
