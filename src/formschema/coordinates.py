"""Coordinate summaries of extracted PDF fields."""

from __future__ import annotations

import json
import math
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from formschema.typing.enums import CoordinateFormat

if TYPE_CHECKING:
    from collections.abc import Iterable

    from formschema.typing.models import PdfAttributes, Schema


class FieldBox(BaseModel):
    """Integer bounding box of one field."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    x: int
    y: int
    width: int
    height: int

    @property
    def area(self) -> int:
        """Return the box area in square units."""
        return self.width * self.height


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def field_box(record: PdfAttributes) -> FieldBox:
    """Convert a `[x1, y1, x2, y2]` rectangle into an integer box.

    Args:
        record (PdfAttributes): Extracted field record.

    Returns:
        FieldBox: Rounded position and size; all zero when the record has no rectangle.
    """
    if record.rect is None:
        return FieldBox(x=0, y=0, width=0, height=0)
    x1, y1, x2, y2 = record.rect
    return FieldBox(
        x=_round_half_up(x1),
        y=_round_half_up(y1),
        width=_round_half_up(x2 - x1),
        height=_round_half_up(y2 - y1),
    )


def _simple(record: PdfAttributes) -> str:
    box = field_box(record)
    return f"{record.name}: page={record.page}, x={box.x}, y={box.y}, w={box.width}, h={box.height}"


def _detailed(record: PdfAttributes) -> str:
    box = field_box(record)
    return "\n".join(
        [
            f"Field: {record.name}",
            f"  Type: {record.type}",
            f"  Page: {record.page}",
            f"  Position: ({box.x}, {box.y})",
            f"  Size: {box.width} x {box.height}",
            f"  Area: {box.area} square units",
        ],
    )


def format_coordinates(records: Iterable[PdfAttributes], fmt: CoordinateFormat | str) -> str:
    """Render field coordinates as text.

    Args:
        records (Iterable[PdfAttributes]): Extracted field records.
        fmt (CoordinateFormat | str): `simple`, `json` or `detailed`.

    Returns:
        str: Rendered summary.
    """
    layout = CoordinateFormat.from_str(fmt)
    fields = list(records)
    if layout == CoordinateFormat.SIMPLE:
        return "\n".join(_simple(record) for record in fields)
    if layout == CoordinateFormat.DETAILED:
        return "\n\n".join(_detailed(record) for record in fields)

    payload = [
        {"name": record.name, "type": record.type, "page": record.page, **field_box(record).model_dump()}
        for record in fields
    ]
    return json.dumps(payload, indent=2)


def schema_records(schema: Schema) -> list[PdfAttributes]:
    """Return the extraction records carried by schema items, in order."""
    return [item.pdf_attributes for item in schema.all() if item.pdf_attributes is not None]
