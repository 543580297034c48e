"""Key expression parsing and data context lookups.

A key expression is the value of a directive attribute. It may start with a
``?`` marker (the key is optional) followed by an ``@`` marker (the key is
read from another attribute of the same element)::

    <input name="email" data-bind:value="?@name" />

Lookups never raise for missing keys; they return :data:`MISSING` and let
the caller decide what absence means for the directive at hand.
"""

from __future__ import annotations

# Standard Libraries
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

# DomTemplate Libraries
from domtemplate.exceptions import BoundAttributeDoesNotExist

OPTIONAL_MARKER = "?"
INDIRECT_MARKER = "@"


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


@dataclass(frozen=True)
class DataKeyMatch:
    """A parsed key expression."""

    key: str
    required: bool = True


def resolve_key(raw_key: str | None, element=None, directive: str = "") -> DataKeyMatch:
    """Parse ``raw_key`` into a :class:`DataKeyMatch`.

    The ``@`` marker requires the hosting ``element``; the attribute it names
    must exist or :class:`BoundAttributeDoesNotExist` is raised.
    """

    key = (raw_key or "").strip()
    required = True

    if key.startswith(OPTIONAL_MARKER):
        required = False
        key = key[1:]

    if key.startswith(INDIRECT_MARKER):
        attribute = key[1:]
        attribute_value = element.get(attribute) if element is not None else None
        if attribute_value is None:
            raise BoundAttributeDoesNotExist(directive, attribute)
        key = attribute_value

    return DataKeyMatch(key=key, required=required)


def normalize_context(data: Any) -> dict:
    """Return ``data`` as a string-keyed mapping.

    Scalars are exposed under the empty key so ``data-bind:text`` (no key)
    and ``{{}}`` bind the value itself.
    """

    if data is None:
        return {}
    if isinstance(data, Mapping):
        return {str(key): value for key, value in data.items()}
    if isinstance(data, (str, bytes, int, float, bool)):
        return {"": data}
    if isinstance(data, (list, tuple)):
        return {str(index): value for index, value in enumerate(data)}
    if hasattr(data, "__dict__"):
        return {key: value for key, value in vars(data).items() if not key.startswith("_")}
    return {"": data}


def _traverse(context: Any, parts: list[str]) -> Any:
    value = context
    for part in parts:
        if isinstance(value, Mapping):
            if part not in value:
                return MISSING
            value = value[part]
        elif isinstance(value, (list, tuple)):
            try:
                value = value[int(part)]
            except (ValueError, IndexError):
                return MISSING
        elif hasattr(value, "__dict__") and part in vars(value):
            value = vars(value)[part]
        else:
            return MISSING
    return value


def lookup(match: DataKeyMatch | str, context: Mapping) -> Any:
    """Return the value for ``match`` in ``context`` or :data:`MISSING`."""

    key = match.key if isinstance(match, DataKeyMatch) else match
    if key in context:
        return context[key]
    if "." in key:
        return _traverse(context, key.split("."))
    return MISSING


def stringify(value: Any) -> str:
    """Render a bound value the way it is written into the document."""

    if value is None or value is MISSING:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)
