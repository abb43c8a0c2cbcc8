"""Allow-list sanitization of attribute records produced by the text generator.

The generator is untrusted: whatever it returns is reduced to the keys and
value shapes listed in `ATTRIBUTE_RULES` and `SPECIAL_INPUT_RULES`. Adding an
input type or a key is a change to those tables only.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping
from copy import deepcopy
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from formschema import logger
from formschema.exceptions import MissingRequiredFieldError
from formschema.typing.enums import InputType, IssueKind
from formschema.typing.models import SanitizeResult, SanitizerIssue

if TYPE_CHECKING:
    from formschema.typing.models import Schema

Validator = Callable[[Any], bool]

REQUIRED_KEY = "display_name"
RESTRICTED_KEYS = ("unique_id", "input_type", "value", "pdf_attributes")
SPECIAL_INPUT_KEY = "special_input"
RADIO_LAYOUTS = frozenset({"vertical", "horizontal", "grid"})


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return False
    return math.isfinite(value)


def _is_grid_width(value: Any) -> bool:
    return _is_number(value) and 1 <= value <= 12  # noqa: PLR2004


def _is_order(value: Any) -> bool:
    return _is_number(value) and value >= 0


def _is_text(value: Any) -> bool:
    return isinstance(value, str)


def _is_flag(value: Any) -> bool:
    return isinstance(value, bool)


def _is_column_count(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 1


def _is_radio_layout(value: Any) -> bool:
    return isinstance(value, str) and value in RADIO_LAYOUTS


def _is_mapping(value: Any) -> bool:
    return isinstance(value, Mapping)


def _is_json_value(value: Any) -> bool:
    """Return whether `value` survives a JSON round trip unchanged."""
    if value is None or isinstance(value, str | bool):
        return True
    if isinstance(value, int | float):
        return math.isfinite(value)
    if isinstance(value, list):
        return all(_is_json_value(entry) for entry in value)
    if isinstance(value, Mapping):
        return all(isinstance(key, str) and _is_json_value(entry) for key, entry in value.items())
    return False


ATTRIBUTE_RULES: Mapping[str, Validator] = MappingProxyType(
    {
        "display_name": _is_text,
        "description": _is_text,
        "width": _is_grid_width,
        "placeholder": _is_text,
        SPECIAL_INPUT_KEY: _is_mapping,
        "isRequired": _is_flag,
        "validation": _is_json_value,
        "order": _is_order,
    },
)

_TEXT_FORMATS = (
    "percentage",
    "phone",
    "date",
    "numbered_date",
    "month_year",
    "currency",
    "number",
    "email",
    "url",
)

SPECIAL_INPUT_RULES: Mapping[InputType, Mapping[str, Validator]] = MappingProxyType(
    {
        InputType.TEXT: MappingProxyType(dict.fromkeys(_TEXT_FORMATS, _is_flag)),
        InputType.CHECKBOX: MappingProxyType({"asRadio": _is_flag, "horizontal": _is_column_count}),
        InputType.RADIO: MappingProxyType({"layout": _is_radio_layout, "columns": _is_column_count}),
    },
)


def allowed_special_inputs(input_type: InputType | str) -> tuple[str, ...]:
    """Return the `special_input` keys permitted for an input type.

    Args:
        input_type (InputType | str): Target input type.

    Returns:
        tuple[str, ...]: Permitted keys, empty when the type takes no special input.
    """
    rules = SPECIAL_INPUT_RULES.get(InputType.from_str(input_type))
    return tuple(rules) if rules else ()


def _is_absent(value: Any) -> bool:
    return value is None or value == ""


def _note(issues: list[SanitizerIssue], kind: IssueKind, key: str, detail: str | None = None) -> None:
    issues.append(SanitizerIssue(kind=kind, key=key, detail=detail))
    logger.warning("Attribute dropped", extra={"kind": kind.value, "key": key, "detail": detail})


def _clean_special_input(
    value: Mapping[str, Any],
    input_type: InputType,
    issues: list[SanitizerIssue],
) -> dict[str, dict[str, Any]]:
    """Filter `special_input` against the table of its input type.

    Args:
        value (Mapping[str, Any]): Raw `special_input` record.
        input_type (InputType): Declared input type of the field.
        issues (list[SanitizerIssue]): Accumulator for recovered conditions.

    Returns:
        dict[str, dict[str, Any]]: Surviving sub-records; empty when nothing survives.
    """
    rules = SPECIAL_INPUT_RULES.get(input_type)
    cleaned: dict[str, dict[str, Any]] = {}

    for sub_kind, sub_value in value.items():
        path = f"{SPECIAL_INPUT_KEY}.{sub_kind}"
        if rules is None or sub_kind != input_type.value:
            _note(issues, IssueKind.SPECIAL_INPUT_DROPPED, path, f"not applicable to input type '{input_type}'")
            continue
        if not isinstance(sub_value, Mapping):
            _note(issues, IssueKind.INVALID_FIELD_VALUE, path, "expected an object")
            continue

        kept: dict[str, Any] = {}
        for prop, check in rules.items():
            if prop not in sub_value or _is_absent(sub_value[prop]):
                continue
            if check(sub_value[prop]):
                kept[prop] = sub_value[prop]
            else:
                _note(issues, IssueKind.INVALID_FIELD_VALUE, f"{path}.{prop}", repr(sub_value[prop]))
        for prop in sub_value:
            if prop not in rules:
                _note(issues, IssueKind.UNKNOWN_FIELD_DROPPED, f"{path}.{prop}")

        if kept:
            cleaned[sub_kind] = kept
        else:
            _note(issues, IssueKind.SPECIAL_INPUT_DROPPED, path, "no permitted keys left")

    return cleaned


def sanitize_attributes(raw: Mapping[str, Any], input_type: InputType | str) -> SanitizeResult:
    """Reduce an untrusted attribute record to the allow-list.

    Args:
        raw (Mapping[str, Any]): Attribute record as returned by the generator.
        input_type (InputType | str): Input type of the target field.

    Raises:
        MissingRequiredFieldError: If `display_name` is missing, empty or not a string.

    Returns:
        SanitizeResult: Cleaned attributes and recovered issues.
    """
    if not isinstance(raw, Mapping):
        raise MissingRequiredFieldError(field_name=REQUIRED_KEY)
    display_name = raw.get(REQUIRED_KEY)
    if not isinstance(display_name, str) or not display_name.strip():
        raise MissingRequiredFieldError(field_name=REQUIRED_KEY)

    kind = InputType.from_str(input_type)
    issues: list[SanitizerIssue] = []

    for key in raw:
        if key in RESTRICTED_KEYS:
            _note(issues, IssueKind.RESTRICTED_FIELD_REJECTED, key, "system-owned attribute")
        elif key not in ATTRIBUTE_RULES:
            _note(issues, IssueKind.UNKNOWN_FIELD_DROPPED, key)

    cleaned: dict[str, Any] = {}
    for key, check in ATTRIBUTE_RULES.items():
        if key not in raw or _is_absent(raw[key]):
            continue
        value = raw[key]
        if not check(value):
            _note(issues, IssueKind.INVALID_FIELD_VALUE, key, repr(value))
            continue
        if key == SPECIAL_INPUT_KEY:
            special = _clean_special_input(value, kind, issues)
            if special:
                cleaned[key] = special
            continue
        cleaned[key] = deepcopy(value)

    return SanitizeResult(attributes=cleaned, issues=tuple(issues))


def apply_attributes(schema: Schema, unique_id: str, attributes: Mapping[str, Any]) -> Schema:
    """Merge a cleaned attribute record into one item's display attributes.

    Only allow-listed keys are written, so `input_type` and other system-owned
    attributes of the item are never touched.

    Args:
        schema (Schema): Current schema.
        unique_id (str): Target item id.
        attributes (Mapping[str, Any]): Output of `sanitize_attributes`.

    Returns:
        Schema: New schema value.
    """
    item = schema.get(unique_id)
    updates = {key: value for key, value in attributes.items() if key in ATTRIBUTE_RULES}
    return schema.replace(unique_id, item.with_display(updates))
