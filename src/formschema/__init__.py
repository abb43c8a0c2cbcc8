"""FormSchema package."""

from formschema.exceptions import (
    CodecError,
    GeneratorError,
    MissingRequiredFieldError,
    PackageError,
    SchemaError,
    SettingsError,
)
from formschema.logging import configure_logging, get_logger
from formschema.settings import Settings, get_settings

__version__ = "0.1.0"

# Initialize package logger at import time via `get_logger`.
logger = get_logger("formschema")

__all__ = [
    "CodecError",
    "GeneratorError",
    "MissingRequiredFieldError",
    "PackageError",
    "SchemaError",
    "Settings",
    "SettingsError",
    "__version__",
    "configure_logging",
    "get_logger",
    "get_settings",
    "logger",
]
