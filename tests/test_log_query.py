"""Tests for log_query: filtering, quick-filter toggling and export naming."""

from datetime import datetime, timedelta, timezone

import pytest

from log_query import (
    QUICK_FILTERS,
    export_filename,
    export_logs,
    export_text,
    filter_lines,
    toggle_filter,
)

NOW = datetime(2026, 10, 19, 8, 15, 2, 123000, tzinfo=timezone.utc)


def test_filter_is_case_insensitive_and_ordered():
    lines = ["Error one", "ok", "an ERROR", "error", "fine"]
    assert filter_lines(lines, "eRRoR") == ["Error one", "an ERROR", "error"]


def test_empty_filter_is_identity():
    lines = ["b", "a", "b"]
    result = filter_lines(lines, "")
    assert result == lines
    assert result is not lines


@pytest.mark.parametrize("tag", QUICK_FILTERS)
def test_quick_filter_toggle_twice_clears(tag):
    assert toggle_filter(toggle_filter("", tag), tag) == ""


def test_quick_filter_replaces_other_term():
    assert toggle_filter("ERROR", "WARN") == "WARN"
    assert toggle_filter("disk", "INFO") == "INFO"


def test_export_filename():
    assert export_filename("3f2a9c0d1e4b", False, NOW) == "logs-3f2a9c0d1e4b-full-2026-10-19T08-15-02-123Z.txt"
    assert export_filename("deploy", True, NOW) == "logs-deploy-selection-2026-10-19T08-15-02-123Z.txt"


def test_export_filename_normalizes_to_utc():
    local = NOW.astimezone(timezone(timedelta(hours=3)))
    assert export_filename("x", False, local) == export_filename("x", False, NOW)


def test_selection_wins_over_view():
    assert export_text(["a", "b"], "b") == ("b", True)
    assert export_text(["a", "b"], "") == ("a\nb", False)
    assert export_text(["a", "b"], None) == ("a\nb", False)


def test_export_writes_file(tmp_path):
    path = export_logs(["one", "two"], "abc", tmp_path / "out", now=NOW)
    assert path == tmp_path / "out" / "logs-abc-full-2026-10-19T08-15-02-123Z.txt"
    assert path.read_text(encoding='utf-8') == "one\ntwo"


def test_nothing_to_export(tmp_path):
    assert export_logs([], "abc", tmp_path) is None
    assert list(tmp_path.iterdir()) == []
