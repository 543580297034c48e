"""Helpers for querying and mutating the lxml document tree."""

from __future__ import annotations

# Standard Libraries
from typing import Iterator

# 3rd Party Libraries
from lxml import etree
from lxml import html as lxml_html

_DIRECTIVE_ELEMENTS_XPATH = etree.XPath(
    "descendant-or-self::*[@*[starts-with(name(), $prefix)]]"
)
_BRACED_ATTRIBUTE_ELEMENTS_XPATH = etree.XPath(
    "descendant-or-self::*[@*[contains(., '{')]]"
)


def is_element(node) -> bool:
    """Return ``True`` for element nodes (lxml models comments as children too)."""

    return isinstance(getattr(node, "tag", None), str)


def iter_child_elements(element) -> Iterator:
    for child in element:
        if is_element(child):
            yield child


def _path_segment(element) -> str:
    parent = element.getparent()
    tag = element.tag
    if parent is None:
        return tag
    siblings = [child for child in iter_child_elements(parent) if child.tag == tag]
    if len(siblings) < 2:
        return tag
    for position, sibling in enumerate(siblings, start=1):
        if sibling is element:
            return f"{tag}[{position}]"
    return tag


def structural_path(element, scope=None) -> str:
    """Return the positional path of ``element``.

    Paths follow libxml2's node path format (``/html/body/ul/li[2]``): a
    position predicate is only written when same-named siblings exist.
    Without ``scope`` the path is absolute. With ``scope`` the path is
    relative to that ancestor, which itself is not part of the path, so the
    scope element maps to ``""`` and its children to ``/tag``.
    """

    segments: list[str] = []
    current = element
    while current is not None:
        if scope is not None and current is scope:
            break
        segments.append(_path_segment(current))
        current = current.getparent()
    else:
        if scope is not None:
            raise ValueError("Element is not inside the given scope")

    if not segments:
        return ""
    return "/" + "/".join(reversed(segments))


def locate_path(path: str, scope=None, tree=None):
    """Return the element addressed by ``path`` or ``None``.

    ``scope`` resolves a relative path (see :func:`structural_path`);
    otherwise ``tree`` resolves an absolute one.
    """

    if scope is not None:
        if not path:
            return scope
        found = scope.xpath("." + path)
    elif tree is not None:
        found = tree.xpath(path) if path else []
    else:
        return None
    for candidate in found:
        if is_element(candidate):
            return candidate
    return None


def is_descendant_or_self(element, ancestor) -> bool:
    if element is ancestor:
        return True
    return any(node is ancestor for node in element.iterancestors())


def remove_element(element) -> None:
    """Detach ``element`` while keeping its tail text in the parent."""

    parent = element.getparent()
    if parent is None:
        return

    index = parent.index(element)
    tail = element.tail
    element.tail = None
    parent.remove(element)
    append_text(parent, index, tail)


def append_text(parent, index: int, text: str | None) -> None:
    """Append ``text`` right before the child at ``index`` of ``parent``."""

    if not text:
        return
    if index > 0:
        previous = parent[index - 1]
        previous.tail = (previous.tail or "") + text
    else:
        parent.text = (parent.text or "") + text


def clear_children(element) -> None:
    for child in list(element):
        element.remove(child)
    element.text = None


def set_text_content(element, value: str) -> None:
    """Replace everything inside ``element`` with a single text node."""

    clear_children(element)
    element.text = value or None


def set_inner_html(element, markup: str) -> None:
    """Replace everything inside ``element`` with parsed ``markup``."""

    clear_children(element)
    if not markup:
        return

    nodes = lxml_html.fragments_fromstring(markup)
    if nodes and isinstance(nodes[0], str):
        element.text = nodes.pop(0)
    for node in nodes:
        element.append(node)


def clear_whitespace_residue(element) -> bool:
    """Empty ``element`` when all it holds is whitespace text."""

    if len(element):
        return False
    if element.text is not None and not element.text.strip():
        element.text = None
        return True
    return False


def find_directive_elements(element, prefix: str) -> list:
    """Return ``element`` and descendants carrying an attribute named ``prefix*``."""

    return list(_DIRECTIVE_ELEMENTS_XPATH(element, prefix=prefix))


def find_braced_attribute_elements(element) -> list:
    return list(_BRACED_ATTRIBUTE_ELEMENTS_XPATH(element))


def find_elements(element, tag: str, include_self: bool = True) -> list:
    """Return descendants (and optionally ``element``) with the given tag."""

    found = [node for node in element.iter(tag)]
    if not include_self:
        found = [node for node in found if node is not element]
    return found
