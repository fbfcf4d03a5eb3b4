"""Shared helpers: indented JSON output, value coalescing and build metadata."""

import dataclasses
import json
from importlib import metadata
from typing import Any

_MODULE_NAME = "canyon"
_DEVEL_VERSION = "(devel)"

# Characters that are escaped inside JSON strings so the text stays safe to embed in HTML.
_HTML_SAFE = str.maketrans(
    {
        "<": "\\u003c",
        ">": "\\u003e",
        "&": "\\u0026",
        "\u2028": "\\u2028",
        "\u2029": "\\u2029",
    }
)


def _encode_default(value: Any) -> Any:
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    raise TypeError(f"object of type {type(value).__name__} is not JSON serializable")


def pretty_json(raw: Any) -> str:
    """Encode a value as two-space indented JSON followed by a newline.

    Values that cannot be encoded yield an empty string.
    """
    try:
        text = json.dumps(
            raw, indent=2, ensure_ascii=False, allow_nan=False, default=_encode_default
        )
    except (TypeError, ValueError):
        return ""
    return text.translate(_HTML_SAFE) + "\n"


def coalesce(*args: Any) -> Any:
    """Return the first argument that is not an empty or zero value."""
    for item in args:
        if item:
            return item
    raise ValueError("cannot coalesce with no non-nil items")


def module_name() -> str:
    """Return the name the program reports about itself."""
    return _MODULE_NAME


def module_version() -> str:
    """Return the installed version of the package, or "(devel)" when unknown."""
    try:
        return metadata.version(_MODULE_NAME)
    except metadata.PackageNotFoundError:
        return _DEVEL_VERSION