"""Tests for binding table data into documents."""

from __future__ import annotations

import logging

import pytest

from domtemplate import HTMLDocument
from domtemplate.exceptions import (
    IncorrectTableDataFormat,
    TableColumnNotFound,
    TableElementNotFound,
)

EMPTY_TABLE = '<!DOCTYPE html><html><body><table id="people"></table></body></html>'

KEYED_HEADER = (
    "<!DOCTYPE html><html><body><table>"
    '<thead><tr><th data-table-key="name">Full name</th><th>Age</th></tr></thead>'
    "<tbody></tbody>"
    "</table></body></html>"
)

QUARTERS = (
    "<!DOCTYPE html><html><body><table>"
    "<caption>Sales</caption>"
    "<thead><tr><th></th><th>Q1</th></tr></thead>"
    "</table></body></html>"
)

ROW_TEMPLATE = (
    "<!DOCTYPE html><html><body><table>"
    "<thead><tr><th>name</th><th>age</th></tr></thead>"
    "<tbody>"
    "<tr><td>Static</td><td>1</td></tr>"
    '<tr data-template><td class="name"></td><td></td></tr>'
    "</tbody>"
    "</table></body></html>"
)

ROW_TEMPLATE_WITH_DIRECTIVES = (
    "<!DOCTYPE html><html><body><table>"
    "<thead><tr><th>name</th><th>age</th></tr></thead>"
    "<tbody>"
    '<tr data-template><td data-bind:text="name"></td>'
    '<td><a href="/people/{{name}}">profile</a></td></tr>'
    "</tbody>"
    "</table></body></html>"
)

KEYED_TABLES = (
    "<!DOCTYPE html><html><body>"
    '<div data-bind:table="left"><table id="left"></table></div>'
    '<div data-bind:table="right"><table id="right"></table></div>'
    "</body></html>"
)

SCORES = (
    "<!DOCTYPE html><html><body>"
    '<div data-bind:table="scores"><table></table></div>'
    "</body></html>"
)


def _texts(row):
    return [cell.text for cell in row]


def test_table_without_header_gets_one_from_the_data():
    document = HTMLDocument(EMPTY_TABLE)

    matrix = document.bind_table([["name", "age"], ["Ann", 3]])

    table = document.root.get_element_by_id("people")
    assert _texts(table.find("thead/tr")) == ["name", "age"]
    assert [cell.tag for cell in table.find("thead/tr")] == ["th", "th"]
    rows = table.findall("tbody/tr")
    assert [_texts(row) for row in rows] == [["Ann", "3"]]
    assert [cell.tag for cell in rows[0]] == ["td", "td"]
    assert matrix.headers == ["name", "age"]


def test_existing_header_keys_order_column_data():
    document = HTMLDocument(KEYED_HEADER)

    document.bind_table({"Age": ["3", "4"], "name": ["Ann", "Bob"]})

    rows = document.query("//tbody/tr")
    assert [_texts(row) for row in rows] == [["Ann", "3"], ["Bob", "4"]]


def test_double_header_rows_render_a_header_cell():
    document = HTMLDocument(QUARTERS)

    document.bind_table([{"North": [10]}, {"South": [8]}])

    table = document.query("//table")[0]
    assert [child.tag for child in table] == ["caption", "thead", "tbody"]
    rows = table.findall("tbody/tr")
    assert [[cell.tag for cell in row] for row in rows] == [["th", "td"], ["th", "td"]]
    assert [_texts(row) for row in rows] == [["North", "10"], ["South", "8"]]


def test_one_mapping_of_row_headers_renders_a_row_each():
    document = HTMLDocument(QUARTERS)

    document.bind_table([{"North": [10], "South": [8]}])

    rows = document.query("//table/tbody/tr")
    assert [[cell.tag for cell in row] for row in rows] == [["th", "td"], ["th", "td"]]
    assert [_texts(row) for row in rows] == [["North", "10"], ["South", "8"]]


def test_row_template_keeps_hand_authored_rows():
    document = HTMLDocument(ROW_TEMPLATE)

    document.bind_table([["Ann", 3], ["Bob", 4]])

    rows = document.query("//tbody/tr")
    assert [_texts(row) for row in rows] == [["Static", "1"], ["Ann", "3"], ["Bob", "4"]]
    assert rows[1][0].get("class") == "name"


def test_row_template_directives_bind_against_the_header_keys():
    document = HTMLDocument(ROW_TEMPLATE_WITH_DIRECTIVES)

    document.bind_table([["Ann", 3]])

    row = document.query("//tbody/tr")[0]
    assert row[0].text == "Ann"
    assert row[0].get("data-bind:text") is None
    link = row[1].find("a")
    assert link.get("href") == "/people/Ann"
    assert link.text == "profile"


def test_row_wider_than_its_template_logs_a_warning(caplog):
    document = HTMLDocument(ROW_TEMPLATE)

    with caplog.at_level(logging.WARNING, logger="domtemplate.tables.binder"):
        document.bind_table([["Ann", 3, "extra"]])

    assert "appending cells" in caplog.text
    assert _texts(document.query("//tbody/tr")[1]) == ["Ann", "3", "extra"]


def test_every_table_in_the_context_is_bound():
    document = HTMLDocument(KEYED_TABLES)

    document.bind_table([["n"], ["1"]])

    assert len(document.query("//table[@id='left']/tbody/tr")) == 1
    assert len(document.query("//table[@id='right']/tbody/tr")) == 1


def test_table_key_limits_binding_and_consumes_the_directive():
    document = HTMLDocument(KEYED_TABLES)

    document.bind_table([["n"], ["1"]], key="left")

    assert len(document.query("//table[@id='left']/tbody/tr")) == 1
    assert len(document.root.get_element_by_id("right")) == 0
    divs = document.query("//div")
    assert divs[0].get("data-bind:table") is None
    assert divs[1].get("data-bind:table") == "right"


def test_table_directive_in_bound_data():
    document = HTMLDocument(SCORES)

    document.bind_data({"scores": [["name", "score"], ["Ann", 3]]})

    assert _texts(document.query("//thead/tr")[0]) == ["name", "score"]
    assert _texts(document.query("//tbody/tr")[0]) == ["Ann", "3"]
    assert document.query("//div")[0].get("data-bind:table") is None


def test_missing_table_raises():
    document = HTMLDocument("<p>No tables here</p>")

    with pytest.raises(TableElementNotFound):
        document.bind_table([["a"], ["1"]])


def test_malformed_data_leaves_tables_untouched():
    document = HTMLDocument(EMPTY_TABLE)
    table = document.root.get_element_by_id("people")

    with pytest.raises(IncorrectTableDataFormat):
        document.bind_table([["a"], 5])

    with pytest.raises(TableColumnNotFound):
        HTMLDocument(KEYED_HEADER).bind_table([{"nickname": "Al"}])

    assert len(table) == 0
