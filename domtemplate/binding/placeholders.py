"""``{{ key }}`` and ``{{ key ?? default }}`` placeholder substitution."""

from __future__ import annotations

# Standard Libraries
import re
from collections.abc import Mapping

# DomTemplate Libraries
from domtemplate.binding.keys import MISSING, lookup, stringify
from domtemplate.conf import BindingConfiguration
from domtemplate.dom import find_braced_attribute_elements, is_element

_PLACEHOLDER_RE = re.compile(
    r"\{\{[ \t]*(?P<key>[^{}?]*?)[ \t]*(?:\?\?[ \t]*(?P<default>[^{}]*?)[ \t]*)?\}\}"
)


def interpolate(text: str | None, context: Mapping, use_defaults: bool = True) -> str | None:
    """Substitute every placeholder in ``text`` that resolves in ``context``.

    Unresolved placeholders without a default are left untouched, as are
    unresolved placeholders with a default when ``use_defaults`` is false.
    """

    if not text or "{{" not in text:
        return text

    def replace(match: re.Match[str]) -> str:
        value = lookup(match.group("key"), context)
        if value is not MISSING:
            return stringify(value)
        default = match.group("default")
        if default is not None and use_defaults:
            return default
        return match.group(0)

    return _PLACEHOLDER_RE.sub(replace, text)


def has_placeholder(text: str | None, defaulted: bool = False) -> bool:
    """Return whether ``text`` holds a placeholder (one with a default if ``defaulted``)."""

    if not text or "{{" not in text:
        return False
    for match in _PLACEHOLDER_RE.finditer(text):
        if not defaulted or match.group("default") is not None:
            return True
    return False


def interpolate_attributes(
    element,
    context: Mapping,
    config: BindingConfiguration | None = None,
    use_defaults: bool = True,
) -> int:
    """Interpolate attribute values of ``element`` and its descendants.

    Directive attributes are skipped. Returns the number of attributes
    whose value changed.
    """

    active_config = config or BindingConfiguration.get_solo()
    changed = 0
    for node in find_braced_attribute_elements(element):
        for name, value in list(node.attrib.items()):
            if active_config.is_directive(name):
                continue
            updated = interpolate(value, context, use_defaults)
            if updated != value:
                node.set(name, updated)
                changed += 1
    return changed


def interpolate_text(
    element,
    context: Mapping,
    config: BindingConfiguration | None = None,
    use_defaults: bool = True,
) -> int:
    """Interpolate text content under ``element`` (the element's own tail excluded)."""

    active_config = config or BindingConfiguration.get_solo()
    changed = 0
    for node in element.iter():
        if node is not element and node.tail:
            updated = interpolate(node.tail, context, use_defaults)
            if updated != node.tail:
                node.tail = updated
                changed += 1
        if not is_element(node) or node.tag in active_config.raw_text_tags:
            continue
        if node.text:
            updated = interpolate(node.text, context, use_defaults)
            if updated != node.text:
                node.text = updated
                changed += 1
    return changed


def has_pending_defaults(element, config: BindingConfiguration | None = None) -> bool:
    """Return whether a defaulted placeholder under ``element`` is still unresolved."""

    active_config = config or BindingConfiguration.get_solo()
    for node in find_braced_attribute_elements(element):
        for name, value in node.attrib.items():
            if not active_config.is_directive(name) and has_placeholder(value, defaulted=True):
                return True
    if not active_config.interpolate_text:
        return False
    for node in element.iter():
        if node is not element and has_placeholder(node.tail, defaulted=True):
            return True
        if is_element(node) and node.tag not in active_config.raw_text_tags:
            if has_placeholder(node.text, defaulted=True):
                return True
    return False
