"""qq_member_etl.members

Map the QQ group member table (table#groupMember, as saved from the group
member management page) to Member records.

Cells are read by fixed position, not by header name: the header row of
this page template cannot be relied on. A typical data row looks like:

    [
        "",
        "1",
        '<a class="group-master-a">...</a> <img ...> <span> 秘书组 </span>',
        '<span class="white"> </span>',
        "1452313818",
        "男",
        "11年",
        "2018/02/26",
        "2021/11/01",
        "",
    ]

Values other than gender are passed through verbatim; no date or number
parsing is done.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from bs4 import BeautifulSoup

from qq_member_etl.shared import (
    MissingFieldError,
    NotFoundError,
    UnrecognizedGenderError,
)
from qq_member_etl.table_extract import Table, cell_content, find_by_id

log = logging.getLogger(__name__)

MEMBER_TABLE_ID = "groupMember"

# (header label, cell position) per field
QQ_NAME_COL = ("成员", 2)
GROUP_NAME_COL = ("群昵称", 3)
QQ_NUMBER_COL = ("QQ号", 4)
GENDER_COL = ("性别", 5)
QQ_AGE_COL = ("Q龄", 6)
JOINED_DATE_COL = ("入群时间", 7)
LAST_SPOKEN_COL = ("最后发言", 8)

CSV_HEADER = ["成员", "群昵称", "QQ号", "性别", "Q龄", "入群时间"]


class Gender(enum.Enum):
    MALE = "男"
    FEMALE = "女"
    UNKNOWN = "未知"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Member:
    qq_name: str
    group_name: str
    qq_number: str
    gender: Gender
    qq_age: str
    joined_date: str
    last_spoken_date: str

    def csv_row(self) -> list[str]:
        """Output columns in CSV_HEADER order.

        The QQ号 column carries qq_name, as the exported sheets always have;
        last_spoken_date is not exported.
        """
        return [
            self.qq_name,
            self.group_name,
            self.qq_name,
            str(self.gender),
            self.qq_age,
            self.joined_date,
        ]


# ---------------------------------------------------------------------------
# Cell helpers
# ---------------------------------------------------------------------------

def _cell(cells: tuple[str, ...], column: tuple[str, int], row_index: int) -> str:
    header, idx = column
    if idx >= len(cells):
        raise MissingFieldError(header, row_index)
    return cells[idx]


def _first_span(fragment: str, header: str, row_index: int) -> str:
    """Re-parse fragment and return the trimmed inner HTML of its first <span>."""
    span = BeautifulSoup(fragment, "html.parser").find("span")
    if span is None:
        raise NotFoundError(f"Failed to find `{header}` for row `{row_index}`")
    return cell_content(span)


def parse_gender(value: str, row_index: int) -> Gender:
    try:
        return Gender(value)
    except ValueError:
        raise UnrecognizedGenderError(value, row_index) from None


# ---------------------------------------------------------------------------
# Row / table mapping
# ---------------------------------------------------------------------------

def member_from_cells(cells: tuple[str, ...], row_index: int) -> Member:
    qq_name = _first_span(_cell(cells, QQ_NAME_COL, row_index), QQ_NAME_COL[0], row_index)

    group_name = _first_span(
        _cell(cells, GROUP_NAME_COL, row_index), GROUP_NAME_COL[0], row_index
    )
    # The nickname span sometimes wraps another span; unwrap one more level.
    if group_name.startswith("<"):
        group_name = _first_span(group_name, GROUP_NAME_COL[0], row_index)

    return Member(
        qq_name=qq_name,
        group_name=group_name,
        qq_number=_cell(cells, QQ_NUMBER_COL, row_index),
        gender=parse_gender(_cell(cells, GENDER_COL, row_index), row_index),
        qq_age=_cell(cells, QQ_AGE_COL, row_index),
        joined_date=_cell(cells, JOINED_DATE_COL, row_index),
        last_spoken_date=_cell(cells, LAST_SPOKEN_COL, row_index),
    )


def members_from_table(table: Table) -> list[Member]:
    """Map every data row of table, in order.

    Any failing row raises; no partial list is returned.
    """
    log.debug("Table headers: %s", table.headers())
    members: list[Member] = []
    for i, row in enumerate(table):
        log.debug("Row %d: %s", i, row.as_slice())
        members.append(member_from_cells(row.as_slice(), i))
    return members


def members_from_html(html: str) -> list[Member]:
    """Locate table#groupMember in html and map its rows."""
    table = find_by_id(html, MEMBER_TABLE_ID)
    if table is None:
        raise NotFoundError(f"Failed to find table with id `{MEMBER_TABLE_ID}`")
    return members_from_table(table)
