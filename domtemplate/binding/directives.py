"""Dispatch of ``data-bind:<property>`` directives onto elements."""

from __future__ import annotations

# Standard Libraries
import logging
from collections.abc import Callable, Mapping
from enum import Enum, auto
from typing import Any

# DomTemplate Libraries
from domtemplate.binding.keys import MISSING, lookup, resolve_key, stringify
from domtemplate.conf import BindingConfiguration
from domtemplate.dom import set_inner_html, set_text_content

logger = logging.getLogger(__name__)

# Receives the table data and the element carrying ``data-bind:table``
TableCallback = Callable[[Any, Any], None]


class BindProperty(Enum):
    """The element property a directive writes to."""

    TEXT = auto()  # text, innertext, textcontent
    HTML = auto()  # html, innerhtml
    VALUE = auto()  # form control value
    CLASS = auto()  # class toggling
    TABLE = auto()  # tabular data into tables
    ATTRIBUTE = auto()  # any other attribute name


PROPERTY_LOOKUP: dict[str, BindProperty] = {
    "text": BindProperty.TEXT,
    "innertext": BindProperty.TEXT,
    "inner-text": BindProperty.TEXT,
    "textcontent": BindProperty.TEXT,
    "text-content": BindProperty.TEXT,
    "html": BindProperty.HTML,
    "innerhtml": BindProperty.HTML,
    "inner-html": BindProperty.HTML,
    "value": BindProperty.VALUE,
    "class": BindProperty.CLASS,
    "table": BindProperty.TABLE,
}

_TEXT_VALUE_TAGS = frozenset({"textarea", "output"})


def property_for(bind_property: str) -> BindProperty:
    return PROPERTY_LOOKUP.get(bind_property.lower(), BindProperty.ATTRIBUTE)


def iter_directives(element, config: BindingConfiguration | None = None):
    """Yield ``(attribute_name, bind_property, key_expression)`` for ``element``."""

    active_config = config or BindingConfiguration.get_solo()
    prefix = active_config.directive_attribute_prefix
    for name, value in list(element.attrib.items()):
        if not active_config.is_directive(name):
            continue
        bind_property = name[len(prefix):]
        if not bind_property:
            continue
        yield name, bind_property, value


def _apply_text(element, bind_property: str, value: Any) -> None:
    set_text_content(element, stringify(value))


def _apply_html(element, bind_property: str, value: Any) -> None:
    set_inner_html(element, stringify(value))


def _apply_value(element, bind_property: str, value: Any) -> None:
    text = stringify(value)
    if element.tag == "select":
        selected = False
        for option in element.iter("option"):
            option_value = option.get("value")
            if option_value is None:
                option_value = option.text_content().strip()
            if not selected and option_value == text:
                option.set("selected", "selected")
                selected = True
            elif "selected" in option.attrib:
                del option.attrib["selected"]
    elif element.tag in _TEXT_VALUE_TAGS:
        set_text_content(element, text)
    else:
        element.set("value", text)


def _apply_attribute(element, bind_property: str, value: Any) -> None:
    element.set(bind_property.lower(), stringify(value))


_HANDLERS: dict[BindProperty, Callable[[Any, str, Any], None]] = {
    BindProperty.TEXT: _apply_text,
    BindProperty.HTML: _apply_html,
    BindProperty.VALUE: _apply_value,
    BindProperty.ATTRIBUTE: _apply_attribute,
}


def toggle_classes(element, class_expression: str, context: Mapping, directive: str = "") -> bool:
    """Toggle classes on ``element`` from ``tok[:cls]`` tokens.

    Each token is independent: a missing key skips that token, a truthy
    value adds the class and a falsy one removes it. Returns ``True`` when
    every token's key was found.
    """

    tokens = class_expression.split()
    all_found = bool(tokens)
    for token in tokens:
        raw_key, _, class_name = token.partition(":")
        match = resolve_key(raw_key, element, directive)
        class_name = class_name or match.key
        value = lookup(match, context)
        if value is MISSING:
            all_found = False
            continue
        if not class_name:
            continue
        if value:
            element.classes.add(class_name)
        else:
            element.classes.discard(class_name)
    return all_found


def apply_directives(
    element,
    context: Mapping,
    config: BindingConfiguration | None = None,
    table_callback: TableCallback | None = None,
) -> list[str]:
    """Apply every directive on ``element`` that ``context`` satisfies.

    Satisfied directive attributes are removed so binding the element again
    is a no-op. Returns the names of the removed attributes.
    """

    active_config = config or BindingConfiguration.get_solo()
    consumed: list[str] = []

    for name, bind_property, expression in iter_directives(element, active_config):
        kind = property_for(bind_property)

        if kind is BindProperty.CLASS:
            satisfied = toggle_classes(element, expression, context, name)
        else:
            match = resolve_key(expression, element, name)
            value = lookup(match, context)
            if value is MISSING:
                continue
            if kind is BindProperty.TABLE:
                if table_callback is None:
                    logger.debug("Leaving %s in place; no table binder was supplied", name)
                    continue
                table_callback(value, element)
            else:
                _HANDLERS[kind](element, bind_property, value)
            satisfied = True

        if satisfied and name in element.attrib:
            del element.attrib[name]
            consumed.append(name)

    return consumed


def remove_directives(element, config: BindingConfiguration | None = None) -> list[str]:
    """Strip every directive attribute from ``element``."""

    removed = []
    for name, _bind_property, _expression in iter_directives(element, config):
        del element.attrib[name]
        removed.append(name)
    return removed
