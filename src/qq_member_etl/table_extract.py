"""qq_member_etl.table_extract

Generic HTML table extraction.

Three entry points locate a table in a document:
  find_first       — the first <table> in document order
  find_by_id       — the <table> whose id attribute matches
  find_by_headers  — the first <table> whose header row contains every
                     requested header (order-insensitive)

Each returns a Table or None. A Table holds a header-name → column-index map
built from the <th> cells of its first row, plus a grid of <td> cell strings.

Cell strings are the cell's inner HTML, trimmed, not its rendered text:
callers that need plain text re-parse the cell as a fragment.

Example:
    html = '''
        <table>
            <tr><th>Name</th><th>Age</th></tr>
            <tr><td>John</td><td>20</td></tr>
        </table>
    '''
    table = find_first(html)
    for row in table:
        print(row.get("Name"), row.get("Age"))
"""

from __future__ import annotations

import types
from dataclasses import dataclass, field
from typing import Iterator, Mapping, Sequence

from bs4 import BeautifulSoup, Tag
from soupsieve import SelectorSyntaxError

# Header name → zero-based position among the <th> cells of the header row.
# Read-only; a Table and all of its rows share one map.
Headers = Mapping[str, int]

_PARSER = "html.parser"


# ---------------------------------------------------------------------------
# Cell helpers
# ---------------------------------------------------------------------------

def cell_content(element: Tag) -> str:
    """Inner HTML of a cell, trimmed of surrounding whitespace."""
    return element.decode_contents().strip()


def _select_cells(row: Tag, name: str) -> list[str]:
    return [cell_content(cell) for cell in row.find_all(name)]


# ---------------------------------------------------------------------------
# Row view
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Row:
    """One data row of a Table.

    A lightweight view sharing the owning table's header map. If the row has
    as many cells as the header row, cells can be read by header name with
    get(); otherwise use as_slice() or iterate.
    """

    headers: Headers = field(repr=False)
    cells: tuple[str, ...]

    def get(self, header: str) -> str | None:
        """Return the cell under header, or None if the header is unknown or
        the row is too short to reach it."""
        idx = self.headers.get(header)
        if idx is None or idx >= len(self.cells):
            return None
        return self.cells[idx]

    def as_slice(self) -> tuple[str, ...]:
        return self.cells

    def __hash__(self) -> int:
        return hash(self.cells)

    def is_empty(self) -> bool:
        return not self.cells

    def __len__(self) -> int:
        return len(self.cells)

    def __iter__(self) -> Iterator[str]:
        return iter(self.cells)


# ---------------------------------------------------------------------------
# Table
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Table:
    """A parsed HTML table: header map plus data rows."""

    header_map: Headers
    data: tuple[tuple[str, ...], ...]

    @classmethod
    def from_element(cls, element: Tag) -> Table:
        """Build a Table from a parsed <table> element.

        If the first <tr> holds at least one <th>, its <th> texts become the
        headers and the row is left out of the data. Duplicate header text
        keeps the later position. Rows with no <td> become empty rows.
        """
        rows = element.find_all("tr")
        headers: dict[str, int] = {}
        if rows:
            for i, th in enumerate(rows[0].find_all("th")):
                headers[cell_content(th)] = i
        if headers:
            rows = rows[1:]
        data = tuple(tuple(_select_cells(tr, "td")) for tr in rows)
        return cls(header_map=types.MappingProxyType(headers), data=data)

    @classmethod
    def find_first(cls, html: str) -> Table | None:
        return find_first(html)

    @classmethod
    def find_by_id(cls, html: str, table_id: str) -> Table | None:
        return find_by_id(html, table_id)

    @classmethod
    def find_by_headers(cls, html: str, headers: Sequence[str]) -> Table | None:
        return find_by_headers(html, headers)

    def __hash__(self) -> int:
        return hash((frozenset(self.header_map.items()), self.data))

    def headers(self) -> Headers:
        """Header map; empty when the first row had no <th> cells."""
        return self.header_map

    def iter(self) -> Iterator[Row]:
        for cells in self.data:
            yield Row(self.header_map, cells)

    def __iter__(self) -> Iterator[Row]:
        return self.iter()

    def __len__(self) -> int:
        return len(self.data)


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------

def find_first(html: str) -> Table | None:
    """Return the first table in html, or None."""
    soup = BeautifulSoup(html, _PARSER)
    element = soup.find("table")
    return Table.from_element(element) if element is not None else None


def find_by_id(html: str, table_id: str) -> Table | None:
    """Return the table whose id is table_id, or None.

    table_id is interpolated into the selector as-is; an id that does not
    form a valid selector finds nothing.
    """
    soup = BeautifulSoup(html, _PARSER)
    try:
        element = soup.select_one(f'table[id="{table_id}"]')
    except SelectorSyntaxError:
        return None
    return Table.from_element(element) if element is not None else None


def find_by_headers(html: str, headers: Sequence[str]) -> Table | None:
    """Return the first table whose first row contains all of headers.

    Order does not matter and matching is exact. With no headers this is
    find_first. A bare string is taken as a single header.
    """
    if isinstance(headers, str):
        headers = (headers,)
    if not headers:
        return find_first(html)

    soup = BeautifulSoup(html, _PARSER)
    for element in soup.find_all("table"):
        first_row = element.find("tr")
        if first_row is None:
            continue
        found = set(_select_cells(first_row, "th"))
        if all(h in found for h in headers):
            return Table.from_element(element)
    return None
