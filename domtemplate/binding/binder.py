"""Binding of key-value, list and table data into a document subtree."""

from __future__ import annotations

# Standard Libraries
import logging
from collections.abc import Iterable, Mapping
from typing import Any, Optional

# DomTemplate Libraries
from domtemplate.binding.directives import (
    BindProperty,
    apply_directives,
    iter_directives,
    property_for,
    remove_directives,
)
from domtemplate.binding.keys import OPTIONAL_MARKER, normalize_context
from domtemplate.binding.placeholders import has_pending_defaults, interpolate_attributes, interpolate_text
from domtemplate.conf import BindingConfiguration
from domtemplate.dom import (
    clear_whitespace_residue,
    find_directive_elements,
    is_descendant_or_self,
    locate_path,
    structural_path,
)
from domtemplate.exceptions import (
    BoundDataNotSet,
    NamelessTemplateSpecificity,
    TemplateElementNotFound,
)
from domtemplate.tables.binder import TableBinder
from domtemplate.templates.fragment import TemplateFragment

logger = logging.getLogger(__name__)

_SCALAR_TYPES = (str, bytes, int, float, bool)


def _is_scalar(value: Any) -> bool:
    return value is None or isinstance(value, _SCALAR_TYPES)


def _is_nested_data(value: Any) -> bool:
    return isinstance(value, (Mapping, list, tuple))


class ElementBinder:
    """Binds data into the subtree of ``root`` using a document's templates.

    Every ``bind_*`` method takes an optional ``context`` element; binding
    is limited to that element's subtree, which defaults to ``root``.
    """

    def __init__(self, root, registry, config: Optional[BindingConfiguration] = None):
        self.root = root
        self.registry = registry
        self.config = config or BindingConfiguration.get_solo()
        self.table_binder = TableBinder(registry, self.config)

    def _context_element(self, context):
        return self.root if context is None else context

    def _bind_table_directive(self, value: Any, element) -> None:
        self.table_binder.bind_table_data(value, element)

    def bind_element(self, element, data_context: Mapping, use_defaults: bool = False) -> list[str]:
        """Apply directives and placeholders under ``element``.

        Placeholder defaults are only substituted with ``use_defaults``, so
        a key missing from ``data_context`` can still be bound later.
        Returns the names of the directive attributes that were consumed.
        """

        consumed: list[str] = []
        for node in find_directive_elements(element, self.config.directive_attribute_prefix):
            # An html directive may have replaced an ancestor's content
            if not is_descendant_or_self(node, element):
                continue
            consumed.extend(
                apply_directives(
                    node,
                    data_context,
                    self.config,
                    table_callback=self._bind_table_directive,
                )
            )
        interpolate_attributes(element, data_context, self.config, use_defaults)
        if self.config.interpolate_text:
            interpolate_text(element, data_context, self.config, use_defaults)
        return consumed

    def bind_data(self, data: Any, context=None) -> list[str]:
        """Bind every key of ``data`` (a mapping, object or scalar)."""

        element = self._context_element(context)
        data_context = normalize_context(data)
        try:
            return self.bind_element(element, data_context)
        except Exception:
            logger.exception(
                "Failed to bind data into %s",
                structural_path(element),
                extra={"bind_context": structural_path(element), "bind_keys": sorted(data_context)},
            )
            raise

    def bind_key_value(self, key: str, value: Any, context=None) -> list[str]:
        return self.bind_data({key: value}, context)

    def bind_value(self, value: Any, context=None) -> list[str]:
        """Bind ``value`` to directives and placeholders with an empty key."""

        return self.bind_data({"": value}, context)

    def bind_table(self, data: Any, context=None, key: Optional[str] = None):
        element = self._context_element(context)
        try:
            return self.table_binder.bind_table_data(data, element, key=key)
        except Exception:
            logger.exception(
                "Failed to bind table data into %s",
                structural_path(element),
                extra={"bind_context": structural_path(element), "bind_table_key": key},
            )
            raise

    # ------------------------------------------------------------------
    # Lists

    def bind_list(self, rows: Any, template_name: Optional[str] = None, context=None) -> list:
        """Clone a template once per row and insert the bound copies.

        The template is found by ``template_name`` or, without a name, as the
        single unnamed template extracted from below ``context``. Rows may be
        scalars, mappings or objects; a mapping of rows is treated as tree
        data whose values expand into the template's nested template.
        Returns the inserted elements.
        """

        host = self._context_element(context)
        try:
            fragment = self.registry.resolve(host, template_name)
            if fragment is None:
                raise TemplateElementNotFound(
                    f'No template named "{template_name}"'
                    if template_name
                    else f"No unnamed template below {structural_path(host)}"
                )
            logger.debug("Binding list into %s using %r", structural_path(host), fragment)
            return self._expand(host, fragment, rows)
        except Exception:
            logger.exception(
                "Failed to bind list into %s",
                structural_path(host),
                extra={"bind_context": structural_path(host), "bind_template": template_name},
            )
            raise

    def _sole_child(self, fragment: TemplateFragment) -> Optional[TemplateFragment]:
        children = self.registry.children_of(fragment)
        if len(children) > 1:
            raise NamelessTemplateSpecificity(fragment.key, [child.key for child in children])
        return children[0] if children else None

    def _nested_host(self, child: TemplateFragment, clone: TemplateFragment):
        host = locate_path(child.anchor.parent_path, scope=clone.container)
        if host is None:
            raise TemplateElementNotFound(
                f"The parent of nested template {child!r} is missing from {clone!r}"
            )
        return host

    def _render(self, fragment: TemplateFragment, row: Any, nested: Optional[list] = None) -> TemplateFragment:
        clone = self.registry.clone(fragment)
        # a row is the whole data of its clone
        self.bind_element(clone.container, normalize_context(row), use_defaults=True)
        for child, child_rows in nested or []:
            self._expand(self._nested_host(child, clone), child, child_rows, scope_root=clone.container)
        return clone

    def _nested_rows(self, fragment: TemplateFragment, row: Any) -> list:
        """Pair each named child template with the row entry of the same key."""

        if _is_scalar(row):
            return []
        children = {child.name: child for child in self.registry.children_of(fragment) if child.name}
        if not children:
            return []
        nested = []
        for key, value in normalize_context(row).items():
            if key in children and _is_nested_data(value):
                nested.append((children[key], value))
        return nested

    def _expand(self, host, fragment: TemplateFragment, rows: Any, scope_root=None) -> list:
        inserted: list = []

        if isinstance(rows, Mapping):
            child = self._sole_child(fragment)
            for key, value in rows.items():
                nested = [(child, value)] if child is not None and _is_nested_data(value) else None
                clone = self._render(fragment, key, nested)
                inserted.extend(self.registry.insert(clone, parent=host, scope_root=scope_root))
        elif isinstance(rows, Iterable) and not isinstance(rows, (str, bytes)):
            for row in rows:
                clone = self._render(fragment, row, self._nested_rows(fragment, row))
                inserted.extend(self.registry.insert(clone, parent=host, scope_root=scope_root))
        else:
            raise TypeError(f"List data must be iterable, got {type(rows).__name__}")

        if not inserted:
            clear_whitespace_residue(host)
        return inserted

    # ------------------------------------------------------------------
    # Cleanup

    def unsatisfied_binds(self, context=None) -> list[tuple[str, str]]:
        """Return required, non-class directives still left under ``context``."""

        element = self._context_element(context)
        remaining = []
        for node in find_directive_elements(element, self.config.directive_attribute_prefix):
            for name, bind_property, expression in iter_directives(node, self.config):
                if property_for(bind_property) is BindProperty.CLASS:
                    continue
                if expression.strip().startswith(OPTIONAL_MARKER):
                    continue
                remaining.append((name, expression))
        return remaining

    def validate_binds(self, context=None) -> None:
        """Raise :class:`BoundDataNotSet` if required directives were never bound."""

        remaining = self.unsatisfied_binds(context)
        if remaining:
            raise BoundDataNotSet(remaining)

    def pending_defaults(self, context=None) -> bool:
        return has_pending_defaults(self._context_element(context), self.config)

    def apply_defaults(self, context=None) -> int:
        """Replace every unresolved ``{{ key ?? default }}`` under ``context`` with its default.

        Returns the number of attribute values and text nodes that changed.
        """

        element = self._context_element(context)
        changed = interpolate_attributes(element, {}, self.config)
        if self.config.interpolate_text:
            changed += interpolate_text(element, {}, self.config)
        return changed

    def remove_binds(self, context=None) -> int:
        """Strip every remaining directive attribute under ``context``.

        Unresolved placeholder defaults are applied first.
        """

        element = self._context_element(context)
        self.apply_defaults(element)
        removed = 0
        for node in find_directive_elements(element, self.config.directive_attribute_prefix):
            removed += len(remove_directives(node, self.config))
        return removed
