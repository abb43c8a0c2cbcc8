"""Project enums."""

from __future__ import annotations

from enum import StrEnum


class _EnumMixin(StrEnum):
    """Shared conversion helpers for user-facing enums."""

    @classmethod
    def from_str(cls, value: str) -> _EnumMixin:
        """Parse enum from string.

        Args:
            value: Raw string value.

        Raises:
            ValueError: If the value is not supported.

        Returns:
            _EnumMixin: Parsed enum value.
        """
        try:
            return cls(value)
        except ValueError as exc:
            supported = ", ".join(member.value for member in cls)
            message = f"Unsupported {cls.__name__} value '{value}'. Expected one of: {supported}"
            raise ValueError(message) from exc

    def to_str(self) -> str:
        """Return string representation.

        Returns:
            str: Enum string value.
        """
        return self.value


class InputType(_EnumMixin):
    """Form input kinds a schema item can render as."""

    TEXT = "text"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    DROPDOWN = "dropdown"
    SIGNATURE = "signature"
    BUTTON = "button"


class ColorTheme(_EnumMixin):
    """Block color themes."""

    BLUE = "blue"
    GREEN = "green"
    PURPLE = "purple"
    ORANGE = "orange"
    GRAY = "gray"


class IssueKind(_EnumMixin):
    """Recovered sanitizer conditions reported alongside cleaned attributes."""

    INVALID_FIELD_VALUE = "invalid_field_value"
    RESTRICTED_FIELD_REJECTED = "restricted_field_rejected"
    UNKNOWN_FIELD_DROPPED = "unknown_field_dropped"
    SPECIAL_INPUT_DROPPED = "special_input_dropped"


class CoordinateFormat(_EnumMixin):
    """Output layouts for field coordinate summaries."""

    SIMPLE = "simple"
    JSON = "json"
    DETAILED = "detailed"
