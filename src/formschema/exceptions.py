"""Package exceptions."""

from __future__ import annotations

from dataclasses import dataclass


class PackageError(Exception):
    """Root exception for the package."""


@dataclass(frozen=True)
class SettingsError(PackageError):
    """Raised when settings cannot be loaded or validated."""

    message: str = "Failed to load settings"
    exc: BaseException | None = None

    def __str__(self) -> str:
        """Return error message payload."""
        return f"{self.message}: {self.exc}" if self.exc else self.message


@dataclass(frozen=True)
class GeneratorError(PackageError):
    """Raised when the attribute generator call fails."""

    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message


@dataclass(frozen=True)
class GeneratorResponseError(PackageError):
    """Raised when the generator answers with no usable JSON object."""

    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message


@dataclass(frozen=True)
class MissingRequiredFieldError(PackageError):
    """Raised when an attribute record lacks a mandatory key."""

    field_name: str = "display_name"

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Missing required attribute '{self.field_name}'"


class SchemaError(PackageError):
    """Base class for schema model and block engine failures."""


@dataclass(frozen=True)
class ItemNotFoundError(SchemaError):
    """Raised when a schema item id is unknown."""

    unique_id: str

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Schema item not found: {self.unique_id}"


@dataclass(frozen=True)
class DuplicateItemIdError(SchemaError):
    """Raised when two schema items would share one id."""

    unique_id: str

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Duplicate schema item id: {self.unique_id}"


@dataclass(frozen=True)
class StyleRequiredError(SchemaError):
    """Raised when assigning to a block that has no members and no style was given."""

    block_name: str

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Block '{self.block_name}' has no members; a style is required to create it"


@dataclass(frozen=True)
class EmptyNameError(SchemaError):
    """Raised when a block name is blank."""

    message: str = "Block name must not be blank"

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message


@dataclass(frozen=True)
class EmptySelectionError(SchemaError):
    """Raised when a block operation receives no items."""

    message: str = "At least one item must be selected"

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message


@dataclass(frozen=True)
class ReservedBlockNameError(SchemaError):
    """Raised when a block would be named after the unassigned sentinel."""

    block_name: str

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Block name '{self.block_name}' is reserved"


@dataclass(frozen=True)
class BlockNotFoundError(SchemaError):
    """Raised when no item references the requested block."""

    block_name: str

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Block not found: {self.block_name}"


class CodecError(PackageError):
    """Base class for declaration import failures."""


@dataclass(frozen=True)
class SignatureNotFoundError(CodecError):
    """Raised when no schema declaration can be located in the text."""

    message: str = "Could not find schema definition in declaration text"

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message


@dataclass(frozen=True)
class MalformedLiteralError(CodecError):
    """Raised when the schema literal cannot be parsed into items."""

    message: str = "Schema literal is malformed"
    exc: BaseException | None = None

    def __str__(self) -> str:
        """Return error message payload."""
        return f"{self.message}: {self.exc}" if self.exc else self.message


@dataclass(frozen=True)
class NotASequenceError(CodecError):
    """Raised when the parsed schema literal is not a list."""

    type_name: str

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Schema must be an array, got {self.type_name}"
