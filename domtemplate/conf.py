"""Configuration values shared by the binding and templating components."""

from __future__ import annotations

# Standard Libraries
from dataclasses import dataclass, field
from typing import FrozenSet, Optional

DEFAULT_DIRECTIVE_PREFIX = "data-bind"
DEFAULT_TEMPLATE_ATTRIBUTE = "data-template"
DEFAULT_TABLE_KEY_ATTRIBUTE = "data-table-key"
DEFAULT_TEMPLATE_CLASS_PREFIX = "t-"

# Elements whose text is never scanned for ``{{ placeholders }}``
DEFAULT_RAW_TEXT_TAGS: FrozenSet[str] = frozenset({"script", "style"})


@dataclass(frozen=True)
class BindingConfiguration:
    """Attribute names and switches used while binding a document."""

    directive_prefix: str = DEFAULT_DIRECTIVE_PREFIX
    template_attribute: str = DEFAULT_TEMPLATE_ATTRIBUTE
    table_key_attribute: str = DEFAULT_TABLE_KEY_ATTRIBUTE
    template_class_prefix: str = DEFAULT_TEMPLATE_CLASS_PREFIX
    interpolate_text: bool = True
    raw_text_tags: FrozenSet[str] = field(default=DEFAULT_RAW_TEXT_TAGS)

    @property
    def directive_attribute_prefix(self) -> str:
        """Return the prefix every directive attribute name starts with."""

        return f"{self.directive_prefix}:"

    def directive_name(self, bind_property: str) -> str:
        return f"{self.directive_attribute_prefix}{bind_property}"

    def is_directive(self, attribute_name: str) -> bool:
        return attribute_name.lower().startswith(self.directive_attribute_prefix)

    @classmethod
    def get_solo(cls) -> "BindingConfiguration":
        """Return the shared default configuration."""

        global _SOLO
        if _SOLO is None:
            _SOLO = cls()
        return _SOLO


_SOLO: Optional[BindingConfiguration] = None
