"""Tests for table data normalization."""

from __future__ import annotations

import pytest
from tablib import Dataset

from domtemplate.exceptions import IncorrectTableDataFormat, TableColumnNotFound
from domtemplate.tables.normalizer import TableMatrix, normalize_table_data

PEOPLE_ROWS = [["Alice", "30"], ["Bob", "25"]]
PEOPLE_COLUMNS = {"name": ["Alice", "Bob"], "age": ["30", "25"]}


def test_row_major_with_header_hint():
    matrix = normalize_table_data(PEOPLE_ROWS, ["name", "age"])

    assert matrix.headers == ["name", "age"]
    assert matrix.rows == [["Alice", "30"], ["Bob", "25"]]
    assert len(matrix) == 2
    assert matrix.width == 2


def test_column_major_yields_the_same_matrix():
    by_rows = normalize_table_data(PEOPLE_ROWS, ["name", "age"])

    assert normalize_table_data(PEOPLE_COLUMNS) == by_rows
    assert normalize_table_data(PEOPLE_COLUMNS, ["name", "age"]) == by_rows


def test_row_major_without_hint_splits_the_header_row():
    matrix = normalize_table_data([["name", "age"], *PEOPLE_ROWS])

    assert matrix.headers == ["name", "age"]
    assert matrix.rows == PEOPLE_ROWS


def test_column_major_is_reordered_by_the_header_hint():
    matrix = normalize_table_data({"age": ["30"], "name": ["Alice"]}, ["name", "age"])

    assert matrix.rows == [["Alice", "30"]]


def test_uneven_columns_are_padded():
    matrix = normalize_table_data({"a": [1, 2], "b": [3]})

    assert matrix.rows == [[1, 3], [2, None]]


def test_double_header_values_land_under_their_column():
    matrix = normalize_table_data([{"id": [1]}, {"id": [2]}], ["id"])

    assert matrix.rows == [[1], [2]]
    assert matrix.row_header_flags == [False, False]


def test_double_header_row_keys_become_header_cells():
    matrix = normalize_table_data(
        [{"North": [10, 12]}, ["South", 8, 9]],
        ["", "Q1", "Q2"],
    )

    assert matrix.rows == [["North", 10, 12], ["South", 8, 9]]
    assert matrix.row_header_flags == [True, False]


def test_double_header_mapping_with_several_row_headers():
    matrix = normalize_table_data(
        [["West", 1, 2], {"North": [10, 12], "South": [8, 9]}, ["East", 5, 6]],
        ["", "Q1", "Q2"],
    )

    assert matrix.rows == [["West", 1, 2], ["North", 10, 12], ["South", 8, 9], ["East", 5, 6]]
    assert matrix.row_header_flags == [False, True, True, False]


def test_keyed_records_are_placed_by_header():
    matrix = normalize_table_data([{"name": "Ann", "age": 3}, {"age": 4, "name": "Bob"}])

    assert matrix.headers == ["name", "age"]
    assert matrix.rows == [["Ann", 3], ["Bob", 4]]


def test_keyed_records_missing_cells_are_none():
    matrix = normalize_table_data([{"age": 3}], ["name", "age"])

    assert matrix.rows == [[None, 3]]


def test_unknown_column_key_raises():
    with pytest.raises(TableColumnNotFound) as excinfo:
        normalize_table_data([{"nickname": "Al"}], ["name", "age"])

    assert excinfo.value.key == "nickname"
    assert isinstance(excinfo.value, IncorrectTableDataFormat)

    with pytest.raises(TableColumnNotFound):
        normalize_table_data({"nickname": ["Al"]}, ["name"])


def test_row_that_is_not_iterable_raises():
    with pytest.raises(IncorrectTableDataFormat, match="Row 1 data is not iterable"):
        normalize_table_data([["a"], 5])


def test_column_that_is_not_iterable_raises():
    with pytest.raises(IncorrectTableDataFormat, match='Column data "name" is not iterable'):
        normalize_table_data({"name": "Alice"})


def test_scalar_table_data_raises():
    with pytest.raises(IncorrectTableDataFormat):
        normalize_table_data(42)


def test_dataset_headers_and_rows():
    dataset = Dataset(headers=["name", "age"])
    dataset.append(["Ann", 3])

    assert normalize_table_data(dataset).rows == [["Ann", 3]]
    assert normalize_table_data(dataset, ["age", "name"]).rows == [[3, "Ann"]]


def test_dataset_loaded_from_csv():
    dataset = Dataset().load("name,age\nAnn,3\n", format="csv")

    matrix = normalize_table_data(dataset)

    assert matrix.headers == ["name", "age"]
    assert matrix.rows == [["Ann", "3"]]


def test_matrix_exports_records_and_datasets():
    matrix = TableMatrix(headers=["name", "age"], rows=[["Ann", 3], ["Bob"]])

    assert matrix.row_header_flags == [False, False]
    assert matrix.records() == [{"name": "Ann", "age": 3}, {"name": "Bob", "age": None}]
    dataset = matrix.as_dataset()
    assert dataset.headers == ["name", "age"]
    assert dataset.height == 2
    assert dataset["age"] == [3, None]
