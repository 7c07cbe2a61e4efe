import logging

from pyscorer.config import get_layout
from pyscorer.ingest import missing_columns, parse_csv
from pyscorer.ingest.parser import warn_missing_columns


def test_parse_minimal_batting_export():
    rows = parse_csv("日付,打数,安打\n2024-04-01,4,2\n")

    assert rows == [{"日付": "2024-04-01", "打数": 4, "安打": 2}]


def test_fewer_than_two_lines_yields_nothing():
    assert parse_csv("") == []
    assert parse_csv("日付,打数,安打\n") == []
    assert parse_csv("   \n\n") == []


def test_header_byte_order_mark_is_removed():
    rows = parse_csv("\ufeff選手ID,打数\nP001,3")

    assert list(rows[0]) == ["選手ID", "打数"]
    assert rows[0]["選手ID"] == "P001"


def test_text_columns_are_never_coerced():
    rows = parse_csv("選手ID,背番号,試合ID,打数\n001,07,12,3")

    assert rows[0]["選手ID"] == "001"
    assert rows[0]["背番号"] == "07"
    assert rows[0]["試合ID"] == "12"
    assert rows[0]["打数"] == 3


def test_numeric_coercion_rules():
    rows = parse_csv("a,b,c,d,e\n3.5, 1e3 ,abc,,-2")

    assert rows[0] == {"a": 3.5, "b": 1000.0, "c": "abc", "d": "", "e": -2}
    assert isinstance(rows[0]["e"], int)


def test_short_lines_are_skipped_and_missing_fields_are_blank():
    rows = parse_csv("日付,打数,安打\n2024-04-01,4\n\nlonely\n2024-04-02,3,1")

    assert rows == [
        {"日付": "2024-04-01", "打数": 4, "安打": ""},
        {"日付": "2024-04-02", "打数": 3, "安打": 1},
    ]


def test_quoted_fields_are_split_naively():
    rows = parse_csv('名前,球場,打数\n山田,"市民,第二",3')

    # A quoted comma shifts the remaining columns.
    assert rows[0]["球場"] == '"市民'
    assert rows[0]["打数"] == '第二"'


def test_missing_columns_reports_absent_stat_headers(caplog):
    rows = parse_csv("選手ID,打席数,打数\nP001,4,3")
    layout = get_layout("batting")

    missing = missing_columns(rows, layout)
    assert "安打" in missing
    assert "打数" not in missing
    assert missing_columns([], layout) == []

    with caplog.at_level(logging.WARNING):
        warn_missing_columns(rows, layout, source="x_b.csv")
    assert "lacks columns" in caplog.text
