from __future__ import annotations

import pytest

from formschema.blocks import (
    UNASSIGNED,
    Block,
    BlockUpdate,
    assign_to_block,
    block_style_of,
    collect_blocks,
    create_block,
    dissolve_block,
    move_item,
    move_to_unassigned,
    remove_from_block,
    unassigned_items,
    update_block,
)
from formschema.exceptions import (
    BlockNotFoundError,
    EmptyNameError,
    EmptySelectionError,
    ItemNotFoundError,
    ReservedBlockNameError,
    StyleRequiredError,
)
from formschema.typing.enums import ColorTheme
from formschema.typing.models import BlockStyle, Schema


def _with_buyer_block(schema: Schema) -> Schema:
    return create_block(
        schema,
        ["buyer_name", "buyer_phone"],
        "buyer",
        title="Buyer Information",
        description="Contact details",
        color_theme=ColorTheme.GREEN,
    )


def _styles(schema: Schema, block_name: str) -> set[BlockStyle | None]:
    return {item.display_attributes.block_style for item in schema.all() if item.block == block_name}


def test_new_schema_has_no_blocks(schema: Schema) -> None:
    assert collect_blocks(schema) == {}
    assert [item.unique_id for item in unassigned_items(schema)] == list(schema.ids())


def test_create_block_assigns_members_and_style(schema: Schema) -> None:
    updated = _with_buyer_block(schema)

    blocks = collect_blocks(updated)
    assert list(blocks) == ["buyer"]
    block = blocks["buyer"]
    assert [item.unique_id for item in block.items] == ["buyer_name", "buyer_phone"]
    assert block.title == "Buyer Information"
    assert block.style == BlockStyle(
        title="Buyer Information",
        description="Contact details",
        color_theme=ColorTheme.GREEN,
    )
    assert [item.unique_id for item in unassigned_items(updated)] == ["seller_name", "financing", "possession"]


def test_create_block_defaults(schema: Schema) -> None:
    updated = create_block(schema, ["seller_name"], "seller", description="")

    style = block_style_of(updated, "seller")
    assert style == BlockStyle(title="seller", description=None, color_theme=ColorTheme.BLUE)


def test_block_operations_never_mutate_input(schema: Schema) -> None:
    before = schema.model_dump()

    _ = _with_buyer_block(schema)

    assert schema.model_dump() == before
    assert collect_blocks(schema) == {}


def test_assign_to_existing_block_inherits_style(schema: Schema) -> None:
    updated = assign_to_block(_with_buyer_block(schema), ["seller_name"], "buyer")

    assert updated.get("seller_name").block == "buyer"
    assert len(_styles(updated, "buyer")) == 1
    assert block_style_of(updated, "buyer").color_theme == ColorTheme.GREEN


def test_assign_with_style_restyles_whole_block(schema: Schema) -> None:
    style = BlockStyle(title="Parties", color_theme=ColorTheme.PURPLE)

    updated = assign_to_block(_with_buyer_block(schema), ["seller_name"], "buyer", style)

    assert _styles(updated, "buyer") == {style}


def test_assign_to_empty_block_requires_style(schema: Schema) -> None:
    with pytest.raises(StyleRequiredError) as exc_info:
        assign_to_block(schema, ["buyer_name"], "buyer")

    assert exc_info.value.block_name == "buyer"


@pytest.mark.parametrize("name", ["", "   "])
def test_block_name_must_not_be_blank(schema: Schema, name: str) -> None:
    with pytest.raises(EmptyNameError):
        create_block(schema, ["buyer_name"], name)


def test_unassigned_is_reserved(schema: Schema) -> None:
    with pytest.raises(ReservedBlockNameError):
        create_block(schema, ["buyer_name"], UNASSIGNED)


def test_selection_must_not_be_empty(schema: Schema) -> None:
    with pytest.raises(EmptySelectionError):
        create_block(schema, [], "buyer")


def test_selection_ids_must_exist(schema: Schema) -> None:
    with pytest.raises(ItemNotFoundError):
        create_block(schema, ["buyer_name", "ghost"], "buyer")


def test_remove_from_block_leaves_other_members(schema: Schema) -> None:
    grouped = _with_buyer_block(schema)

    updated = remove_from_block(grouped, "buyer_phone")

    phone = updated.get("buyer_phone").display_attributes
    assert phone.block is None
    assert phone.block_style is None
    assert updated.get("buyer_name") == grouped.get("buyer_name")
    assert "block" not in phone.model_dump()


def test_dissolve_block_unassigns_every_member(schema: Schema) -> None:
    updated = dissolve_block(_with_buyer_block(schema), "buyer")

    assert collect_blocks(updated) == {}
    assert len(unassigned_items(updated)) == len(schema)


def test_dissolve_unknown_block(schema: Schema) -> None:
    with pytest.raises(BlockNotFoundError):
        dissolve_block(schema, "buyer")


def test_update_block_merges_partial_style(schema: Schema) -> None:
    updated = update_block(_with_buyer_block(schema), "buyer", BlockUpdate(color_theme=ColorTheme.ORANGE))

    assert _styles(updated, "buyer") == {
        BlockStyle(title="Buyer Information", description="Contact details", color_theme=ColorTheme.ORANGE),
    }


def test_update_block_renames_every_member(schema: Schema) -> None:
    updated = update_block(_with_buyer_block(schema), "buyer", BlockUpdate(name="purchaser", title="Purchaser"))

    blocks = collect_blocks(updated)
    assert list(blocks) == ["purchaser"]
    assert blocks["purchaser"].title == "Purchaser"
    assert len(blocks["purchaser"].items) == 2


def test_update_block_rename_onto_existing_block_merges(schema: Schema) -> None:
    grouped = create_block(_with_buyer_block(schema), ["seller_name"], "seller", color_theme=ColorTheme.GRAY)

    updated = update_block(grouped, "seller", BlockUpdate(name="buyer"))

    blocks = collect_blocks(updated)
    assert list(blocks) == ["buyer"]
    assert [item.unique_id for item in blocks["buyer"].items] == ["buyer_name", "buyer_phone", "seller_name"]
    assert _styles(updated, "buyer") == {BlockStyle(title="seller", color_theme=ColorTheme.GRAY)}


def test_update_block_on_unstyled_block_adds_only_requested_fields(schema: Schema) -> None:
    tagged = schema.replace_many(
        {item_id: schema.get(item_id).with_display({"block": "imported"}) for item_id in ("buyer_name", "seller_name")},
    )

    updated = update_block(tagged, "imported", BlockUpdate(name="parties", color_theme=ColorTheme.BLUE))

    assert _styles(updated, "parties") == {BlockStyle(color_theme=ColorTheme.BLUE)}
    assert collect_blocks(updated)["parties"].title == "parties"


def test_update_block_rejects_reserved_name(schema: Schema) -> None:
    with pytest.raises(ReservedBlockNameError):
        update_block(_with_buyer_block(schema), "buyer", BlockUpdate(name=UNASSIGNED))


def test_update_unknown_block(schema: Schema) -> None:
    with pytest.raises(BlockNotFoundError):
        update_block(schema, "buyer", BlockUpdate(title="x"))


def test_move_item_between_blocks_and_unassigned(schema: Schema) -> None:
    grouped = _with_buyer_block(schema)

    moved = move_item(grouped, "seller_name", "buyer")
    assert moved.get("seller_name").block == "buyer"
    assert moved.get("seller_name").display_attributes.block_style == block_style_of(grouped, "buyer")

    back = move_item(moved, "seller_name", UNASSIGNED)
    assert back.get("seller_name").block is None
    assert move_to_unassigned(moved, "seller_name") == back


def test_move_item_to_missing_block(schema: Schema) -> None:
    with pytest.raises(StyleRequiredError):
        move_item(schema, "buyer_name", "nowhere")


def test_blocks_follow_first_appearance(schema: Schema) -> None:
    grouped = create_block(schema, ["possession"], "terms")
    grouped = create_block(grouped, ["buyer_phone"], "buyer")

    assert list(collect_blocks(grouped)) == ["buyer", "terms"]


def test_block_title_falls_back_to_name(schema: Schema) -> None:
    block = Block(name="misc", items=schema.all()[:2])

    assert block.title == "misc"
    assert block.type_counts() == {"text": 2}
