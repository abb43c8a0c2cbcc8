"""Pytest marker auto-assignment by folder and shared schema fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from formschema import logger
from formschema.typing.enums import InputType
from formschema.typing.models import DisplayAttributes, PdfAttributes, Schema, SchemaItem


def _mark_tests_by_directory(
    config: pytest.Config,
    items: list[pytest.Item],
    marker: str,
) -> None:
    """Mark collected tests located under tests/<marker>/."""
    target_dir = (Path(config.rootpath) / "tests" / marker).resolve()

    for item in items:
        try:
            path = Path(str(item.fspath)).resolve()
        except OSError:
            logger.warning(f"Could not resolve path for test item {item.name!s}; skipping {marker!s} marker")
            continue

        if path == target_dir or target_dir in path.parents:
            item.add_marker(getattr(pytest.mark, marker))


def pytest_collection_modifyitems(
    config: pytest.Config,
    items: list[pytest.Item],
) -> None:
    """Apply directory-based markers to test items."""
    _mark_tests_by_directory(config, items, "unit")
    _mark_tests_by_directory(config, items, "integration")
    _mark_tests_by_directory(config, items, "end2end")


def make_item(
    unique_id: str,
    input_type: InputType = InputType.TEXT,
    *,
    display_name: str | None = None,
    page: int = 1,
    **display: object,
) -> SchemaItem:
    """Build a schema item the way the extraction step would."""
    return SchemaItem(
        unique_id=unique_id,
        display_attributes=DisplayAttributes(
            display_name=display_name or unique_id.replace("_", " ").title(),
            input_type=input_type,
            **display,
        ),
        pdf_attributes=PdfAttributes(name=unique_id, type=input_type.value, page=page, rect=(10, 20, 110, 40)),
    )


@pytest.fixture
def schema() -> Schema:
    return Schema.of(
        [
            make_item("buyer_name"),
            make_item("buyer_phone"),
            make_item("seller_name"),
            make_item("financing", InputType.CHECKBOX),
            make_item("possession", InputType.RADIO, page=2),
        ],
    )
