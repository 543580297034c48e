"""Canonicalization of the accepted table data shapes.

Three shapes are accepted, plus a ``tablib.Dataset``:

* row-major, a sequence of rows: ``[["name", "age"], ["Alice", 30]]``;
* column-major, a mapping of column header to cell values:
  ``{"name": ["Alice"], "age": [30]}``;
* double-header rows, where a row is a mapping from a row header to the
  rest of the row: ``[{"Alice": [30]}, {"Bob": [25]}]``. A mapping with
  several row headers yields one row per header, in order.

Rows may also be keyed records (``{"name": "Alice", "age": 30}``); their
values are placed under the matching header.
"""

from __future__ import annotations

# Standard Libraries
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, List, Optional

# 3rd Party Libraries
from tablib import Dataset

# DomTemplate Libraries
from domtemplate.exceptions import IncorrectTableDataFormat, TableColumnNotFound

logger = logging.getLogger(__name__)


@dataclass
class TableMatrix:
    """Row-major table data with the header row split out."""

    headers: List[str]
    rows: List[List[Any]] = field(default_factory=list)
    row_header_flags: List[bool] = field(default_factory=list)

    def __post_init__(self):
        if len(self.row_header_flags) < len(self.rows):
            self.row_header_flags.extend([False] * (len(self.rows) - len(self.row_header_flags)))

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def width(self) -> int:
        return max([len(self.headers), *(len(row) for row in self.rows)], default=0)

    def records(self) -> list[dict]:
        """Return each row keyed by header, for binding row templates."""

        records = []
        for row in self.rows:
            records.append(
                {header: row[index] if index < len(row) else None for index, header in enumerate(self.headers)}
            )
        return records

    def as_dataset(self) -> Dataset:
        width = len(self.headers) or self.width
        dataset = Dataset(headers=list(self.headers) or None)
        for row in self.rows:
            padded = list(row) + [None] * (width - len(row))
            dataset.append(padded[:width])
        return dataset


def _is_iterable(value: Any) -> bool:
    return isinstance(value, Iterable) and not isinstance(value, (str, bytes))


def _has_sequence_values(row: Mapping) -> bool:
    return bool(row) and all(_is_iterable(value) and not isinstance(value, Mapping) for value in row.values())


def _header_index(key: Any, headers: list[str]) -> int:
    try:
        return headers.index(str(key))
    except ValueError:
        raise TableColumnNotFound(str(key), headers) from None


def _place(values: Mapping, headers: list[str]) -> list:
    row: list = [None] * len(headers)
    for key, value in values.items():
        row[_header_index(key, headers)] = value
    return row


def _from_dataset(data: Dataset, hint: Optional[list[str]]) -> TableMatrix:
    headers = [str(header) for header in (data.headers or [])]
    rows = [list(data[index]) for index in range(data.height)]
    if hint is None:
        if headers:
            return TableMatrix(headers=headers, rows=rows)
        return _split_header_row(rows)
    if not headers:
        return TableMatrix(headers=hint, rows=rows)
    return TableMatrix(headers=hint, rows=[_place(dict(zip(headers, row)), hint) for row in rows])


def _from_columns(data: Mapping, hint: Optional[list[str]]) -> TableMatrix:
    columns = []
    for name, values in data.items():
        if not _is_iterable(values):
            raise IncorrectTableDataFormat(f'Column data "{name}" is not iterable.')
        columns.append((str(name), list(values)))

    height = max((len(values) for _name, values in columns), default=0)
    records = [
        {name: values[index] for name, values in columns if index < len(values)}
        for index in range(height)
    ]

    if hint is None:
        headers = [name for name, _values in columns]
        rows = [[values[index] if index < len(values) else None for _name, values in columns] for index in range(height)]
        return TableMatrix(headers=headers, rows=rows)

    # Validate every column up front so nothing is placed for a bad key.
    for name, _values in columns:
        _header_index(name, hint)
    return TableMatrix(headers=hint, rows=[_place(record, hint) for record in records])


def _split_header_row(rows: list[list]) -> TableMatrix:
    if not rows:
        return TableMatrix(headers=[])
    return TableMatrix(headers=[str(cell) for cell in rows[0]], rows=rows[1:])


def _from_rows(data: Iterable, hint: Optional[list[str]]) -> TableMatrix:
    entries: list = []
    for index, value in enumerate(data):
        if not _is_iterable(value):
            raise IncorrectTableDataFormat(f"Row {index} data is not iterable.")
        entries.append(value if isinstance(value, Mapping) else list(value))

    if hint is not None:
        headers = hint
    elif entries and not isinstance(entries[0], Mapping):
        headers = [str(cell) for cell in entries[0]]
        entries = entries[1:]
    else:
        # Only keyed rows: the record keys become the header row.
        headers = []
        for value in entries:
            if not isinstance(value, Mapping) or _has_sequence_values(value):
                continue
            for key in value:
                if str(key) not in headers:
                    headers.append(str(key))

    rows: list[list] = []
    flags: list[bool] = []
    for value in entries:
        if not isinstance(value, Mapping):
            rows.append(value)
            flags.append(False)
        elif _has_sequence_values(value):
            # each row header of a double-header mapping is its own row
            for key, cells in value.items():
                row, row_header = _double_header_row(key, cells, headers)
                rows.append(row)
                flags.append(row_header)
        else:
            rows.append(_place(value, headers))
            flags.append(False)

    return TableMatrix(headers=headers, rows=rows, row_header_flags=flags)


def _double_header_row(key: Any, cells: Iterable, headers: list[str]) -> tuple[list, bool]:
    """Expand ``row_header: [cells...]`` into a flat row.

    A row header that is itself a column header means the cells belong to
    that column onward; any other row header becomes a leading ``th`` cell.
    """

    cells = list(cells)
    if str(key) in headers:
        start = headers.index(str(key))
        row: list = [None] * max(len(headers), start + len(cells))
        row[start:start + len(cells)] = cells
        return row, False
    return [key, *cells], True


def normalize_table_data(data: Any, header_cells: Optional[Iterable[str]] = None) -> TableMatrix:
    """Return ``data`` as a :class:`TableMatrix`.

    ``header_cells`` are the keys of an existing header row, if the target
    table already has one. Without them the header row comes from the data:
    column names, dataset headers, record keys or the first positional row.

    Raises :class:`IncorrectTableDataFormat` for rows or columns that are
    not iterable, and :class:`TableColumnNotFound` for a keyed value whose
    key is not a header.
    """

    hint = [str(cell) for cell in header_cells] if header_cells else None

    if isinstance(data, Dataset):
        matrix = _from_dataset(data, hint)
        shape = "dataset"
    elif isinstance(data, Mapping):
        matrix = _from_columns(data, hint)
        shape = "column-major"
    elif _is_iterable(data):
        matrix = _from_rows(data, hint)
        shape = "row-major"
    else:
        raise IncorrectTableDataFormat(f"Table data of type {type(data).__name__} is not iterable.")

    logger.debug(
        "Normalized %s table data into %s rows under %s headers",
        shape,
        len(matrix),
        len(matrix.headers),
    )
    return matrix
