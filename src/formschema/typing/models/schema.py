"""Schema-centric domain models."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Self

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ModelWrapValidatorHandler,
    PrivateAttr,
    SerializerFunctionWrapHandler,
    StrictBool,
    StrictFloat,
    StrictInt,
    model_serializer,
    model_validator,
)

from formschema.exceptions import DuplicateItemIdError, ItemNotFoundError
from formschema.typing.enums import ColorTheme, InputType

Coordinate = StrictInt | StrictFloat


class _OpenRecord(BaseModel):
    """Frozen record that keeps unknown keys and the key order it was read with.

    Dumping omits absent optional fields and emits keys in source order. Keys
    first set by a later update follow, in declared order.
    """

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    _key_order: tuple[str, ...] = PrivateAttr(default=())

    @classmethod
    def _field_names(cls) -> dict[str, str]:
        """Map field names and aliases to field names."""
        names = {name: name for name in cls.model_fields}
        names.update({field.alias: name for name, field in cls.model_fields.items() if field.alias})
        return names

    @model_validator(mode="wrap")
    @classmethod
    def _remember_key_order(cls, data: Any, handler: ModelWrapValidatorHandler[Self]) -> Self:
        record = handler(data)
        if isinstance(data, Mapping):
            names = cls._field_names()
            record._key_order = tuple(names.get(key, key) for key in data)
        return record

    @model_serializer(mode="wrap")
    def _dump_in_source_order(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        extra = self.model_extra or {}
        names = self._field_names()
        rank = {key: index for index, key in enumerate(self._key_order)}
        present = [key for key, value in data.items() if value is not None or key in extra]
        present.sort(key=lambda key: rank.get(names.get(key, key), len(rank)))
        return {key: data[key] for key in present}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, _OpenRecord):
            return NotImplemented
        return type(self) is type(other) and self.__dict__ == other.__dict__ and self.model_extra == other.model_extra

    def __hash__(self) -> int:
        return hash((type(self), *self.__dict__.values()))

    def merged(self, updates: Mapping[str, Any]) -> Self:
        """Return a copy with `updates` applied; keys may be field names or aliases.

        Args:
            updates (Mapping[str, Any]): Values to set. `None` clears a declared field.

        Returns:
            Self: Updated copy.
        """
        names = self._field_names()
        return self.model_copy(update={names.get(key, key): value for key, value in updates.items()})


class PdfAttributes(_OpenRecord):
    """Provenance of one field as reported by the PDF extraction step."""

    name: str
    type: str | None = None
    page: StrictInt | None = None
    rect: tuple[Coordinate, Coordinate, Coordinate, Coordinate] | None = None


class BlockStyle(_OpenRecord):
    """Display metadata shared by every member of a block."""

    title: str | None = None
    description: str | None = None
    color_theme: ColorTheme | None = None


class DisplayAttributes(_OpenRecord):
    """Presentation metadata of a schema item."""

    display_name: str
    input_type: InputType
    order: Coordinate | None = None
    block: str | None = None
    block_style: BlockStyle | None = None
    width: Coordinate | None = None
    placeholder: str | None = None
    description: str | None = None
    special_input: dict[str, Any] | None = None
    checkbox_options: dict[str, Any] | None = None
    is_required: StrictBool | None = Field(default=None, alias="isRequired")
    validation: Any = None


class SchemaItem(_OpenRecord):
    """Single form field definition."""

    unique_id: str
    display_attributes: DisplayAttributes
    pdf_attributes: PdfAttributes | None = None

    @property
    def block(self) -> str | None:
        """Return the name of the owning block, if any."""
        return self.display_attributes.block

    def with_display(self, updates: Mapping[str, Any]) -> SchemaItem:
        """Return a copy whose display attributes carry `updates`.

        Args:
            updates (Mapping[str, Any]): Display attribute values keyed by name or alias.

        Returns:
            SchemaItem: Updated item.
        """
        return self.model_copy(update={"display_attributes": self.display_attributes.merged(updates)})


class Schema(BaseModel):
    """Ordered, immutable sequence of schema items.

    Every mutation returns a new `Schema`; the receiver is never modified.
    """

    model_config = ConfigDict(frozen=True)

    items: tuple[SchemaItem, ...] = ()

    @model_validator(mode="after")
    def _check_unique_ids(self) -> Schema:
        """Reject schemas where two items share one id.

        Raises:
            DuplicateItemIdError: If an id appears twice.

        Returns:
            Schema: Validated schema.
        """
        seen: set[str] = set()
        for item in self.items:
            if item.unique_id in seen:
                raise DuplicateItemIdError(unique_id=item.unique_id)
            seen.add(item.unique_id)
        return self

    @classmethod
    def of(cls, items: Iterable[SchemaItem]) -> Schema:
        """Build a schema from items in order."""
        return cls(items=tuple(items))

    def __len__(self) -> int:
        return len(self.items)

    def __contains__(self, unique_id: object) -> bool:
        return any(item.unique_id == unique_id for item in self.items)

    def all(self) -> tuple[SchemaItem, ...]:
        """Return items in export order."""
        return self.items

    def ids(self) -> tuple[str, ...]:
        """Return item ids in export order."""
        return tuple(item.unique_id for item in self.items)

    def get(self, unique_id: str) -> SchemaItem:
        """Return the item with `unique_id`.

        Args:
            unique_id (str): Item id.

        Raises:
            ItemNotFoundError: If no item carries the id.

        Returns:
            SchemaItem: Matching item.
        """
        for item in self.items:
            if item.unique_id == unique_id:
                return item
        raise ItemNotFoundError(unique_id=unique_id)

    def replace(self, unique_id: str, item: SchemaItem) -> Schema:
        """Return a new schema where the item `unique_id` is swapped for `item`.

        Args:
            unique_id (str): Id of the item to replace.
            item (SchemaItem): Replacement item.

        Returns:
            Schema: New schema value.
        """
        return self.replace_many({unique_id: item})

    def replace_many(self, replacements: Mapping[str, SchemaItem]) -> Schema:
        """Return a new schema with several items swapped in one step.

        Args:
            replacements (Mapping[str, SchemaItem]): Replacement items keyed by the id they replace.

        Raises:
            ItemNotFoundError: If a key does not match any item.

        Returns:
            Schema: New schema value.
        """
        known = set(self.ids())
        for unique_id in replacements:
            if unique_id not in known:
                raise ItemNotFoundError(unique_id=unique_id)
        return Schema.of(replacements.get(item.unique_id, item) for item in self.items)
