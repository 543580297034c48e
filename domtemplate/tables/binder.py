"""Expansion of normalized table data into ``<table>`` elements."""

from __future__ import annotations

# Standard Libraries
import logging
from typing import Any, Optional

# 3rd Party Libraries
from lxml import etree

# DomTemplate Libraries
from domtemplate.binding.directives import apply_directives
from domtemplate.binding.keys import OPTIONAL_MARKER, stringify
from domtemplate.binding.placeholders import interpolate_attributes, interpolate_text
from domtemplate.conf import BindingConfiguration
from domtemplate.dom import (
    find_elements,
    is_descendant_or_self,
    iter_child_elements,
    set_text_content,
    structural_path,
)
from domtemplate.exceptions import TableElementNotFound
from domtemplate.tables.normalizer import TableMatrix, normalize_table_data

logger = logging.getLogger(__name__)

CELL_TAGS = ("td", "th")

# Children that must stay ahead of <thead> in a table
_LEADING_TABLE_TAGS = ("caption", "colgroup", "col")


def _cells(row) -> list:
    return [cell for cell in iter_child_elements(row) if cell.tag in CELL_TAGS]


class TableBinder:
    """Bind :class:`TableMatrix` data into every table of a context element."""

    def __init__(self, registry=None, config: Optional[BindingConfiguration] = None):
        self.registry = registry
        self.config = config or BindingConfiguration.get_solo()

    @property
    def directive(self) -> str:
        return self.config.directive_name("table")

    def _keyed_hosts(self, context, key: str) -> list:
        hosts = []
        for element in context.iter():
            value = element.get(self.directive) if isinstance(element.tag, str) else None
            if value is None:
                continue
            if value.strip().lstrip(OPTIONAL_MARKER) == key:
                hosts.append(element)
        return hosts

    def find_tables(self, context, key: Optional[str] = None) -> list:
        """Return the tables data should be bound into.

        The context itself when it is a table, otherwise every table below
        it. With ``key``, only tables at or below an element carrying
        ``data-bind:table="<key>"``.
        """

        if key is None:
            hosts = [context]
        else:
            hosts = self._keyed_hosts(context, key)

        tables = []
        for host in hosts:
            candidates = [host] if host.tag == "table" else find_elements(host, "table", include_self=False)
            for table in candidates:
                if not any(table is seen for seen in tables):
                    tables.append(table)
        return tables

    def header_cells(self, table) -> Optional[list[str]]:
        """Return the keys of the first header row of ``table``, if any."""

        thead = table.find("thead")
        if thead is None:
            return None
        row = thead.find("tr")
        if row is None:
            return None
        keys = []
        for cell in _cells(row):
            key = cell.get(self.config.table_key_attribute)
            keys.append(key if key is not None else cell.text_content().strip())
        return keys or None

    def _ensure_sections(self, table, headers: list[str]):
        thead = table.find("thead")
        if thead is None and headers:
            index = 0
            for child in iter_child_elements(table):
                if child.tag not in _LEADING_TABLE_TAGS:
                    break
                index = table.index(child) + 1
            thead = table.makeelement("thead", {})
            table.insert(index, thead)
            header_row = etree.SubElement(thead, "tr")
            for header in headers:
                etree.SubElement(header_row, "th").text = header

        tbody = table.find("tbody")
        if tbody is None:
            tbody = etree.SubElement(table, "tbody")
        return tbody

    def _row_template(self, tbody):
        if self.registry is None:
            return None
        return self.registry.resolve_unnamed(structural_path(tbody))

    def _append_synthesized_row(self, tbody, row: list, row_header: bool, width: int) -> None:
        tr = etree.SubElement(tbody, "tr")
        for index in range(max(width, len(row))):
            value = row[index] if index < len(row) else None
            tag = "th" if row_header and index == 0 else "td"
            cell = etree.SubElement(tr, tag)
            text = stringify(value)
            if text:
                cell.text = text

    def _fillable(self, cell) -> bool:
        """Cells with markup or their own directives are left to directive binding."""

        if len(cell):
            return False
        return not any(self.config.is_directive(name) for name in cell.attrib)

    def _insert_templated_row(self, template, tbody, row: list, record: dict) -> None:
        clone = self.registry.clone(template)
        rows = [element for element in clone.elements if element.tag == "tr"] or clone.elements
        tr = rows[0]
        cells = _cells(tr)
        if len(row) > len(cells):
            logger.warning(
                "Row has %s values but the row template only has %s cells; appending cells",
                len(row),
                len(cells),
            )
        for index, value in enumerate(row):
            if index >= len(cells):
                cell = etree.SubElement(tr, "td")
                cell.text = stringify(value) or None
            elif value is not None and self._fillable(cells[index]):
                set_text_content(cells[index], stringify(value))

        for element in clone.container.iter():
            if isinstance(element.tag, str):
                apply_directives(element, record, self.config)
        interpolate_attributes(clone.container, record, self.config)
        if self.config.interpolate_text:
            interpolate_text(clone.container, record, self.config)
        self.registry.insert(clone, parent=tbody)

    def bind_table_data(self, data: Any, context, key: Optional[str] = None) -> TableMatrix:
        """Normalize ``data`` and add its rows to the tables in ``context``.

        Raises :class:`TableElementNotFound` when there is no table to bind
        into. Data is normalized before the tree is touched, so malformed
        data leaves every table unchanged.
        """

        tables = self.find_tables(context, key)
        if not tables:
            target = f'"{key}"' if key is not None else structural_path(context)
            raise TableElementNotFound(f"No <table> element found for {target}")

        matrix = normalize_table_data(data, self.header_cells(tables[0]))
        records = matrix.records()

        for table in tables:
            tbody = self._ensure_sections(table, matrix.headers)
            template = self._row_template(tbody)
            for row, row_header, record in zip(matrix.rows, matrix.row_header_flags, records):
                if template is not None:
                    self._insert_templated_row(template, tbody, row, record)
                else:
                    self._append_synthesized_row(tbody, row, row_header, len(matrix.headers))

        if key is not None:
            for host in self._keyed_hosts(context, key):
                if any(is_descendant_or_self(table, host) for table in tables):
                    del host.attrib[self.directive]

        logger.debug("Bound %s table rows into %s tables", len(matrix), len(tables))
        return matrix
