"""Unit tests for qq_member_etl.members."""

from __future__ import annotations

import pytest

from qq_member_etl.members import (
    CSV_HEADER,
    Gender,
    Member,
    member_from_cells,
    members_from_html,
    members_from_table,
    parse_gender,
)
from qq_member_etl.shared import (
    MemberExtractError,
    MissingFieldError,
    NotFoundError,
    UnrecognizedGenderError,
)
from qq_member_etl.table_extract import find_first


def _cells(
    name: str = "<span> Alice </span>",
    nick: str = '<span class="white"> Ally </span>',
    qq: str = "1452313818",
    gender: str = "女",
    age: str = "11年",
    joined: str = "2018/02/26",
    spoken: str = "2021/11/01",
) -> tuple[str, ...]:
    return ("", "1", name, nick, qq, gender, age, joined, spoken, "")


def _row_html(cells: tuple[str, ...]) -> str:
    return "<tr>" + "".join(f"<td>{c}</td>" for c in cells) + "</tr>"


def _page(*rows: tuple[str, ...], table_id: str = "groupMember") -> str:
    header = "<tr>" + "".join(
        f"<th>{h}</th>"
        for h in ["", "", "成员", "群昵称", "QQ号", "性别", "Q龄", "入群时间", "最后发言", ""]
    ) + "</tr>"
    body = "".join(_row_html(r) for r in rows)
    return f'<html><body><table id="{table_id}">{header}{body}</table></body></html>'


# ---------------------------------------------------------------------------
# Gender
# ---------------------------------------------------------------------------

class TestParseGender:
    @pytest.mark.parametrize(
        "raw, expected",
        [("男", Gender.MALE), ("女", Gender.FEMALE), ("未知", Gender.UNKNOWN)],
    )
    def test_known_tokens(self, raw, expected):
        assert parse_gender(raw, 0) is expected

    @pytest.mark.parametrize("raw", ["", "male", " 男", "其他"])
    def test_unknown_token_raises_with_context(self, raw):
        with pytest.raises(UnrecognizedGenderError) as exc_info:
            parse_gender(raw, 7)
        assert exc_info.value.value == raw
        assert exc_info.value.row_index == 7

    def test_display_form(self):
        assert str(Gender.MALE) == "男"
        assert str(Gender.UNKNOWN) == "未知"


# ---------------------------------------------------------------------------
# Per-row mapping
# ---------------------------------------------------------------------------

class TestMemberFromCells:
    def test_all_fields(self):
        m = member_from_cells(_cells(), 0)
        assert m == Member(
            qq_name="Alice",
            group_name="Ally",
            qq_number="1452313818",
            gender=Gender.FEMALE,
            qq_age="11年",
            joined_date="2018/02/26",
            last_spoken_date="2021/11/01",
        )

    def test_name_taken_from_first_span_among_other_markup(self):
        name = (
            '<a class="group-master-a"><i class="icon-group-master"></i></a>\n'
            '<img class="" id="useIcon1452313818" src="//q4.qlogo.cn/g?b=qq&amp;nk=1">\n'
            "<span> 秘书组 </span>"
        )
        assert member_from_cells(_cells(name=name), 0).qq_name == "秘书组"

    def test_nickname_double_nested_span_unwrapped(self):
        m = member_from_cells(_cells(nick="<span><span> X </span></span>"), 0)
        assert m.group_name == "X"

    def test_nickname_unwrapped_only_once(self):
        m = member_from_cells(_cells(nick="<span><span><span>X</span></span></span>"), 0)
        assert m.group_name == "<span>X</span>"

    def test_empty_nickname_span(self):
        m = member_from_cells(_cells(nick='<span class="white"> </span>'), 0)
        assert m.group_name == ""

    def test_name_without_span_raises_not_found(self):
        with pytest.raises(NotFoundError, match="成员"):
            member_from_cells(_cells(name="Alice"), 3)

    def test_nested_nickname_without_inner_span_raises(self):
        with pytest.raises(NotFoundError, match="群昵称"):
            member_from_cells(_cells(nick="<span><b>X</b></span>"), 0)

    def test_values_passed_through_verbatim(self):
        m = member_from_cells(_cells(qq=" 42 ", age="3年", joined="2020-1-1"), 0)
        assert m.qq_number == " 42 "
        assert m.qq_age == "3年"
        assert m.joined_date == "2020-1-1"

    def test_short_row_raises_missing_field(self):
        cells = _cells()[:8]
        with pytest.raises(MissingFieldError) as exc_info:
            member_from_cells(cells, 5)
        assert exc_info.value.header == "最后发言"
        assert exc_info.value.row_index == 5

    def test_empty_row_names_first_required_column(self):
        with pytest.raises(MissingFieldError) as exc_info:
            member_from_cells((), 0)
        assert exc_info.value.header == "成员"


# ---------------------------------------------------------------------------
# Table / document mapping
# ---------------------------------------------------------------------------

class TestMembersFromTable:
    def test_order_preserved(self):
        html = _page(_cells(name="<span>A</span>"), _cells(name="<span>B</span>"))
        names = [m.qq_name for m in members_from_html(html)]
        assert names == ["A", "B"]

    def test_positional_even_without_header_row(self):
        html = "<table>" + _row_html(_cells()) + "</table>"
        members = members_from_table(find_first(html))
        assert len(members) == 1
        assert members[0].qq_name == "Alice"

    def test_empty_table_gives_no_members(self):
        assert members_from_html(_page()) == []

    def test_bad_row_fails_whole_table(self):
        html = _page(_cells(), _cells(gender="?"))
        with pytest.raises(UnrecognizedGenderError) as exc_info:
            members_from_html(html)
        assert exc_info.value.row_index == 1

    def test_missing_table_raises_not_found(self):
        html = _page(_cells(), table_id="otherTable")
        with pytest.raises(NotFoundError):
            members_from_html(html)

    def test_errors_share_base_class(self):
        with pytest.raises(MemberExtractError):
            members_from_html("<p>no table</p>")


class TestCsvRow:
    def test_columns_match_header_order(self):
        m = member_from_cells(_cells(), 0)
        assert len(m.csv_row()) == len(CSV_HEADER)
        assert m.csv_row() == ["Alice", "Ally", "Alice", "女", "11年", "2018/02/26"]
