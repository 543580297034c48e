"""Extraction, lookup and reinsertion of ``data-template`` fragments."""

from __future__ import annotations

# Standard Libraries
import itertools
import logging
from dataclasses import dataclass

# 3rd Party Libraries
from lxml import html as lxml_html

# DomTemplate Libraries
from domtemplate.conf import BindingConfiguration
from domtemplate.dom import (
    append_text,
    is_descendant_or_self,
    is_element,
    locate_path,
    remove_element,
    structural_path,
)
from domtemplate.exceptions import (
    DomTemplateError,
    DuplicateTemplateName,
    NamelessTemplateSpecificity,
)
from domtemplate.templates.fragment import Anchor, TemplateFragment

logger = logging.getLogger(__name__)

WRAPPER_TAG = "template"


@dataclass
class _DetachedMarker:
    container: object
    parent: object
    trailing: int
    tag: str
    name: str | None


class TemplateRegistry:
    """Templates of one document, keyed by explicit name or structural path.

    The registry belongs to a single document. Fragments are extracted once,
    right after the document is parsed, and are only ever cloned afterwards.
    """

    def __init__(self, config: BindingConfiguration | None = None):
        self.config = config or BindingConfiguration.get_solo()
        self._named: dict[str, TemplateFragment] = {}
        self._unnamed: list[TemplateFragment] = []
        self._identifiers = itertools.count(1)

    def __len__(self) -> int:
        return len(self._named) + len(self._unnamed)

    def __iter__(self):
        return iter(self.fragments())

    def fragments(self) -> list[TemplateFragment]:
        return sorted(
            [*self._named.values(), *self._unnamed],
            key=lambda fragment: fragment.identifier,
        )

    # ------------------------------------------------------------------
    # Extraction

    def _detach(self, marker) -> _DetachedMarker:
        parent = marker.getparent()
        if parent is None:
            raise DomTemplateError(f"The root <{marker.tag}> element cannot be a template")

        attribute = self.config.template_attribute
        name = (marker.get(attribute) or "").strip() or None
        del marker.attrib[attribute]

        trailing = len(parent) - parent.index(marker) - 1

        if marker.tag == WRAPPER_TAG:
            # text after a wrapper stays in the document
            remove_element(marker)
            container = marker
        else:
            parent.remove(marker)
            container = lxml_html.Element(WRAPPER_TAG)
            container.append(marker)

        return _DetachedMarker(
            container=container,
            parent=parent,
            trailing=trailing,
            tag=marker.tag,
            name=name,
        )

    def _build(self, detached: _DetachedMarker, scope: TemplateFragment | None) -> TemplateFragment:
        scope_root = scope.container if scope is not None else None
        fragment = TemplateFragment(
            identifier=next(self._identifiers),
            container=detached.container,
            tag=detached.tag,
            anchor=Anchor(
                parent_path=structural_path(detached.parent, scope=scope_root),
                trailing=detached.trailing,
            ),
            name=detached.name,
            scope=scope.identifier if scope is not None else None,
        )
        self.register(detached.name, fragment)
        return fragment

    def extract(self, marker, scope: TemplateFragment | None = None) -> TemplateFragment:
        """Detach a single marked element and register it."""

        return self._build(self._detach(marker), scope)

    def extract_all(self, root) -> list[TemplateFragment]:
        """Detach every marked element under ``root``.

        Markers are detached in reverse document order, so nested templates
        leave their enclosing template before it is detached itself and
        later siblings are gone before an earlier sibling counts what
        follows it. Paths are computed once everything is detached.
        """

        attribute = self.config.template_attribute
        markers = []
        for marker in root.xpath(f"descendant-or-self::*[@{attribute}]"):
            if marker.getparent() is None:
                logger.warning("Ignoring %s on the root <%s> element", attribute, marker.tag)
                continue
            markers.append(marker)
        if not markers:
            return []

        marker_ids = {id(marker) for marker in markers}
        owners = {}
        for marker in markers:
            owners[id(marker)] = next(
                (ancestor for ancestor in marker.iterancestors() if id(ancestor) in marker_ids),
                None,
            )

        detached = {}
        for marker in reversed(markers):
            detached[id(marker)] = self._detach(marker)

        fragments: dict[int, TemplateFragment] = {}
        for marker in markers:
            owner = owners[id(marker)]
            scope = fragments[id(owner)] if owner is not None else None
            fragments[id(marker)] = self._build(detached[id(marker)], scope)

        logger.debug(
            "Extracted %s templates (%s named)",
            len(fragments),
            sum(1 for fragment in fragments.values() if fragment.name),
        )
        return list(fragments.values())

    def register(self, name: str | None, fragment: TemplateFragment) -> None:
        """Store ``fragment`` under ``name``, or under its path when unnamed."""

        if not name:
            self._unnamed.append(fragment)
            return

        if name in self._named:
            raise DuplicateTemplateName(f'A template named "{name}" already exists')

        fragment.name = name
        if not name.startswith("/"):
            class_name = f"{self.config.template_class_prefix}{name}"
            for element in fragment.elements:
                element.classes.add(class_name)
        self._named[name] = fragment

    # ------------------------------------------------------------------
    # Resolution

    def resolve_named(self, name: str) -> TemplateFragment | None:
        return self._named.get(name)

    def resolve_unnamed(self, path: str, scope: TemplateFragment | int | None = None) -> TemplateFragment | None:
        """Return the single unnamed template extracted from under ``path``.

        Raises :class:`NamelessTemplateSpecificity` when more than one
        template matches.
        """

        scope_id = scope.identifier if isinstance(scope, TemplateFragment) else scope
        prefix = f"{path}/"
        matches = [
            fragment
            for fragment in self._unnamed
            if fragment.scope == scope_id and fragment.path.startswith(prefix)
        ]
        if len(matches) > 1:
            raise NamelessTemplateSpecificity(path, [fragment.path for fragment in matches])
        return matches[0] if matches else None

    def resolve(self, host, name: str | None = None, scope: TemplateFragment | None = None, scope_root=None):
        """Resolve the template for binding into ``host``."""

        if name:
            return self.resolve_named(name)
        return self.resolve_unnamed(structural_path(host, scope=scope_root), scope)

    def children_of(self, fragment: TemplateFragment) -> list[TemplateFragment]:
        return [child for child in self.fragments() if child.scope == fragment.identifier]

    # ------------------------------------------------------------------
    # Cloning and insertion

    def clone(self, fragment: TemplateFragment) -> TemplateFragment:
        return fragment.clone()

    def locate_anchor_parent(self, fragment: TemplateFragment, tree=None, scope_root=None):
        if fragment.scope is not None:
            if scope_root is None:
                return None
            return locate_path(fragment.anchor.parent_path, scope=scope_root)
        return locate_path(fragment.anchor.parent_path, tree=tree)

    def insert(self, clone: TemplateFragment, parent=None, scope_root=None) -> list:
        """Move the content of ``clone`` into the document.

        The copy lands where the template was extracted when that position
        lies inside ``parent`` (or when no parent is given); otherwise it is
        appended to ``parent``. Returns the inserted elements.
        """

        if not clone.is_clone:
            raise DomTemplateError(f"Only clones can be inserted, {clone!r} is a registered template")

        tree = parent.getroottree() if parent is not None else None
        anchor_parent = self.locate_anchor_parent(clone, tree=tree, scope_root=scope_root)

        if anchor_parent is not None and (parent is None or is_descendant_or_self(anchor_parent, parent)):
            target = anchor_parent
            index = max(0, len(target) - clone.anchor.trailing)
        elif parent is not None:
            target = parent
            index = len(target)
        else:
            raise DomTemplateError(f"Nowhere to insert {clone!r}; its original parent is gone")

        container = clone.container
        append_text(target, index, container.text)
        container.text = None

        inserted = []
        for node in list(container):
            target.insert(index, node)
            index += 1
            if is_element(node):
                inserted.append(node)
        return inserted
