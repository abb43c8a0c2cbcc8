"""Block grouping view and block mutation operations.

Blocks have no storage of their own: a block exists while at least one item
names it in `display_attributes.block`, and its style is the `block_style`
shared by those items. Every operation here resolves one style and writes it to
every affected member in the same new `Schema`, so members never disagree.
"""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from formschema import logger
from formschema.exceptions import (
    BlockNotFoundError,
    EmptyNameError,
    EmptySelectionError,
    ReservedBlockNameError,
    StyleRequiredError,
)
from formschema.typing.enums import ColorTheme
from formschema.typing.models import BlockStyle, Schema, SchemaItem

if TYPE_CHECKING:
    from collections.abc import Iterable

UNASSIGNED = "unassigned"


class Block(BaseModel):
    """Computed view of one block."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    style: BlockStyle | None = None
    items: tuple[SchemaItem, ...]

    @property
    def title(self) -> str:
        """Return the display title, falling back to the block name."""
        return (self.style.title if self.style else None) or self.name

    def type_counts(self) -> dict[str, int]:
        """Count members per input type."""
        return dict(Counter(item.display_attributes.input_type.value for item in self.items))


class BlockUpdate(BaseModel):
    """Partial rename/restyle request; unset fields keep their value."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str | None = None
    title: str | None = None
    description: str | None = None
    color_theme: ColorTheme | None = None


def collect_blocks(schema: Schema) -> dict[str, Block]:
    """Group items by block name, ordered by first appearance.

    Args:
        schema (Schema): Current schema.

    Returns:
        dict[str, Block]: Blocks keyed by name.
    """
    members: dict[str, list[SchemaItem]] = {}
    for item in schema.all():
        if item.block:
            members.setdefault(item.block, []).append(item)
    return {
        name: Block(name=name, style=items[0].display_attributes.block_style, items=tuple(items))
        for name, items in members.items()
    }


def unassigned_items(schema: Schema) -> tuple[SchemaItem, ...]:
    """Return items that belong to no block, in schema order."""
    return tuple(item for item in schema.all() if not item.block)


def block_style_of(schema: Schema, block_name: str) -> BlockStyle | None:
    """Return the style of `block_name`, or None when the block has no members or no style."""
    for item in schema.all():
        if item.block == block_name:
            return item.display_attributes.block_style
    return None


def _has_members(schema: Schema, block_name: str) -> bool:
    return any(item.block == block_name for item in schema.all())


def _check_block_name(block_name: str) -> str:
    """Validate a block name about to be written to items.

    Raises:
        EmptyNameError: If the name is blank.
        ReservedBlockNameError: If the name is the unassigned sentinel.
    """
    if not block_name or not block_name.strip():
        raise EmptyNameError()
    if block_name == UNASSIGNED:
        raise ReservedBlockNameError(block_name=block_name)
    return block_name


def _selection(schema: Schema, item_ids: Iterable[str]) -> list[str]:
    selected = list(dict.fromkeys(item_ids))
    if not selected:
        raise EmptySelectionError()
    for unique_id in selected:
        schema.get(unique_id)
    return selected


def _place(schema: Schema, item_ids: Iterable[str], block_name: str, style: BlockStyle | None) -> Schema:
    """Put `item_ids` into `block_name` and write `style` to every member of the block."""
    targets = set(item_ids)
    replacements = {
        item.unique_id: item.with_display({"block": block_name, "block_style": style})
        for item in schema.all()
        if item.unique_id in targets or item.block == block_name
    }
    return schema.replace_many(replacements)


def assign_to_block(
    schema: Schema,
    item_ids: Iterable[str],
    block_name: str,
    style: BlockStyle | None = None,
) -> Schema:
    """Move items into a block.

    Without `style` the moved items take the block's current style; with
    `style` the whole block, old members included, is restyled.

    Args:
        schema (Schema): Current schema.
        item_ids (Iterable[str]): Items to move.
        block_name (str): Target block.
        style (BlockStyle | None): Optional new block style.

    Raises:
        StyleRequiredError: If the block has no members and no style was supplied.

    Returns:
        Schema: New schema value.
    """
    _check_block_name(block_name)
    selected = _selection(schema, item_ids)
    if style is None:
        if not _has_members(schema, block_name):
            raise StyleRequiredError(block_name=block_name)
        style = block_style_of(schema, block_name)

    logger.debug("Assigning items to block", extra={"block": block_name, "items": len(selected)})
    return _place(schema, selected, block_name, style)


def create_block(
    schema: Schema,
    item_ids: Iterable[str],
    block_name: str,
    *,
    title: str | None = None,
    description: str | None = None,
    color_theme: ColorTheme = ColorTheme.BLUE,
) -> Schema:
    """Create (or redefine) a block from a selection of items.

    Args:
        schema (Schema): Current schema.
        item_ids (Iterable[str]): Selected items.
        block_name (str): Block name.
        title (str | None): Display title; defaults to the block name.
        description (str | None): Optional description.
        color_theme (ColorTheme): Color theme.

    Returns:
        Schema: New schema value.
    """
    _check_block_name(block_name)
    style = BlockStyle(
        title=title or block_name,
        description=description or None,
        color_theme=ColorTheme.from_str(color_theme),
    )
    return assign_to_block(schema, item_ids, block_name, style)


def remove_from_block(schema: Schema, item_id: str) -> Schema:
    """Take one item out of its block; other members are untouched."""
    item = schema.get(item_id)
    return schema.replace(item_id, item.with_display({"block": None, "block_style": None}))


def move_to_unassigned(schema: Schema, item_id: str) -> Schema:
    """Drop target form of `remove_from_block`."""
    return remove_from_block(schema, item_id)


def move_item(schema: Schema, item_id: str, target: str) -> Schema:
    """Apply a drag-and-drop move of one item onto a block or the unassigned area.

    Args:
        schema (Schema): Current schema.
        item_id (str): Dragged item.
        target (str): Block name, or `UNASSIGNED`.

    Returns:
        Schema: New schema value.
    """
    if target == UNASSIGNED:
        return move_to_unassigned(schema, item_id)
    return assign_to_block(schema, [item_id], target)


def dissolve_block(schema: Schema, block_name: str) -> Schema:
    """Unassign every member of a block.

    Raises:
        BlockNotFoundError: If no item belongs to the block.
    """
    if not _has_members(schema, block_name):
        raise BlockNotFoundError(block_name=block_name)
    replacements = {
        item.unique_id: item.with_display({"block": None, "block_style": None})
        for item in schema.all()
        if item.block == block_name
    }
    logger.debug("Dissolving block", extra={"block": block_name, "items": len(replacements)})
    return schema.replace_many(replacements)


def update_block(schema: Schema, block_name: str, updates: BlockUpdate) -> Schema:
    """Rename and/or restyle every member of a block at once.

    Renaming onto an existing block merges the two; the merged block takes the
    updated style of `block_name`.

    Args:
        schema (Schema): Current schema.
        block_name (str): Block to update.
        updates (BlockUpdate): Fields to change.

    Raises:
        BlockNotFoundError: If no item belongs to the block.

    Returns:
        Schema: New schema value.
    """
    if not _has_members(schema, block_name):
        raise BlockNotFoundError(block_name=block_name)
    new_name = _check_block_name(updates.name) if updates.name is not None else block_name

    current = block_style_of(schema, block_name) or BlockStyle()
    style_updates = updates.model_dump(include={"title", "description", "color_theme"}, exclude_unset=True)
    style = current.merged(style_updates)

    members = [item.unique_id for item in schema.all() if item.block == block_name]
    return _place(schema, members, new_name, style)
