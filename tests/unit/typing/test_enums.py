from __future__ import annotations

import pytest

from formschema.typing.enums import ColorTheme, CoordinateFormat, InputType, IssueKind


def test_input_type_from_str() -> None:
    assert InputType.from_str("radio") == InputType.RADIO
    assert InputType.from_str(InputType.SIGNATURE) == InputType.SIGNATURE
    assert InputType.BUTTON.to_str() == "button"


def test_enum_from_str_lists_supported_values() -> None:
    with pytest.raises(ValueError, match="Expected one of: blue, green, purple, orange, gray"):
        ColorTheme.from_str("pink")


def test_enum_values_are_strings() -> None:
    assert f"{CoordinateFormat.DETAILED}" == "detailed"
    assert IssueKind.SPECIAL_INPUT_DROPPED == "special_input_dropped"
    assert [member.value for member in InputType] == ["text", "checkbox", "radio", "dropdown", "signature", "button"]
