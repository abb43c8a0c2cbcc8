"""Prompt builders for field attribute generation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from formschema.sanitizer import ATTRIBUTE_RULES, allowed_special_inputs
from formschema.typing.enums import InputType

if TYPE_CHECKING:
    from formschema.settings import Settings
    from formschema.typing.models import AttributeRequest

_ROLE_RULES = (
    "You help REALTORS fill out real estate forms by turning each form field into a question "
    "the realtor asks a client. Name the party explicitly (the buyer, the seller, the tenant, "
    "the landlord) and use 'your' only for the realtor's own details such as a license number. "
    "Start questions with a question word, keep them short and professional, and add a "
    "description only when the question needs clarification."
)

_LAYOUT_HINTS = {
    InputType.TEXT: "Set a text format flag (e.g. phone, email, currency, date) when the value needs one.",
    InputType.CHECKBOX: (
        "Use asRadio when options are mutually exclusive and horizontal (column count) "
        "to lay out short option lists side by side."
    ),
    InputType.RADIO: "Use layout (vertical, horizontal or grid) and columns for grid layouts.",
}


def build_system_prompt(request: AttributeRequest) -> str:
    """Build the system prompt for one generation request.

    The allowed properties are read from the sanitizer tables so the prompt
    never advertises a key that would be stripped.

    Args:
        request (AttributeRequest): Generation request.

    Returns:
        str: Prompt text.
    """
    keys = ", ".join(ATTRIBUTE_RULES)
    lines = [
        _ROLE_RULES,
        "",
        "Return ONLY a JSON object. display_name (string) is required.",
        f"Allowed properties: {keys}. Do not add any other property.",
        "width is a grid width from 1 to 12; use 6 for most fields and 12 for long answers.",
        "placeholder shows a realistic example value.",
    ]
    special = allowed_special_inputs(request.field_type)
    if special:
        lines.append(
            f"special_input may only contain a '{request.field_type}' object with: {', '.join(special)}.",
        )
        lines.append(_LAYOUT_HINTS[request.field_type])
    else:
        lines.append("Do not return special_input for this field type.")
    lines.extend(
        [
            "",
            f"Field Type: {request.field_type}",
            f"Group Type: {request.group_type}",
            f"PDF Field Names: {', '.join(request.pdf_context)}",
        ],
    )
    return "\n".join(lines)


def build_user_prompt(request: AttributeRequest) -> str:
    """Build the user prompt carrying the field intent.

    Args:
        request (AttributeRequest): Generation request.

    Returns:
        str: Prompt text.
    """
    return (
        f'User Intent: "{request.intent}"\n\n'
        "Turn this intent into the question a realtor would ask. Make it clear whether it is about "
        "the realtor, the buyer, the seller, the tenant, the landlord or the property.\n\n"
        'Example valid response: {"display_name": "What is the buyer\'s phone number?", "width": 6, '
        '"placeholder": "(555) 123-4567", "special_input": {"text": {"phone": true}}}'
    )


def build_completion_payload(request: AttributeRequest, settings: Settings) -> dict[str, Any]:
    """Build the chat-completion payload sent to the generator.

    Args:
        request (AttributeRequest): Generation request.
        settings (Settings): Runtime settings.

    Returns:
        dict[str, Any]: Request payload.
    """
    return {
        "model": settings.openai_model,
        "messages": [
            {"role": "system", "content": build_system_prompt(request)},
            {"role": "user", "content": build_user_prompt(request)},
        ],
        "max_completion_tokens": settings.openai_max_completion_tokens,
    }
