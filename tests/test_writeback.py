"""Tests for rebuilding task lines and swapping them into a document."""

from dataclasses import replace

import pytest

from tasksmd_kanban.classifier import status_for_column
from tasksmd_kanban.parser import parse_task_line
from tasksmd_kanban.writeback import (
    check_status,
    get_line,
    reconstruct_line,
    replace_line,
    set_line_status,
    task_text_for,
)


@pytest.mark.parametrize("line", [
    "- [ ] Write report #work 📅 2024-03-01",
    "  - [/] Call client [[Client Notes]] 🔼",
    "- [x] Everything [[A|alias]] [[B]] 🛫 2024-01-01 ⏰ 2024-01-02 📅 2024-01-03 🔽 Low #t1 #t-2",
    "\t- [?] Tabbed #waiting",
    "- [-] Nothing but text",
])
def test_round_trip_preserves_fields(line):
    task = parse_task_line(line, "doc.md", 0)
    rebuilt = reconstruct_line(task, line)
    reparsed = parse_task_line(rebuilt, "doc.md", 0)
    assert reparsed.fields_dict() == task.fields_dict()


def test_round_trip_is_stable_after_one_pass():
    line = "- [ ] #work Write 📅 2024-03-01 report"
    task = parse_task_line(line)
    once = reconstruct_line(task, line)
    twice = reconstruct_line(parse_task_line(once), once)
    assert once == "- [ ] Write report 📅 2024-03-01 #work"
    assert twice == once


def test_reconstruct_keeps_indent_bullet_and_separator():
    line = "    -   [ ]  Foo #a"
    task = parse_task_line(line)
    edited = replace(task, status="x", tags=["a", "b"])
    assert reconstruct_line(edited, line) == "    -   [x]  Foo #a #b"


def test_reconstruct_uses_current_line_not_parsed_text():
    parsed_from = "- [ ] Old text #a"
    task = parse_task_line(parsed_from)
    current = "  - [/] Someone else edited this #b"
    edited = replace(task, clean_text="New text")
    assert reconstruct_line(edited, current) == "  - [ ] New text #a"


def test_reconstruct_fallback_when_line_is_not_a_task():
    task = parse_task_line("  - [ ] Foo", "doc.md", 4)
    edited = replace(task, status="/")
    assert reconstruct_line(edited, "prose replaced the task") == "  - [/] Foo"


def test_reconstruct_keeps_carriage_return():
    line = "- [ ] Foo\r"
    task = parse_task_line(line)
    assert reconstruct_line(replace(task, status="x"), line) == "- [x] Foo\r"


def test_cleared_fields_are_not_emitted():
    line = "- [ ] Pay rent 📅 2024-03-01 🔺 #home"
    task = parse_task_line(line)
    edited = replace(task, due_date=None, priority=None, tags=[])
    assert reconstruct_line(edited, line) == "- [ ] Pay rent"


def test_task_text_for_emission_order():
    task = parse_task_line("- [ ] #b Do 🔽 it [[N]] 📅 2024-02-02 🛫 2024-01-01")
    assert task_text_for(task) == "Do it [[N]] 🛫 2024-01-01 📅 2024-02-02 🔽 #b"


def test_move_todo_to_done_changes_only_the_bracket():
    line = "  - [ ] Write report #work 📅 2024-03-01"
    new_line = set_line_status(line, status_for_column("Done"))
    assert new_line == "  - [x] Write report #work 📅 2024-03-01"


def test_set_line_status_on_non_task_line():
    assert set_line_status("not a task", "x") is None


@pytest.mark.parametrize("status", ["", "]", "x]", "x\n", "\r"])
def test_status_that_would_break_the_line_is_rejected(status):
    with pytest.raises(ValueError):
        check_status(status)
    with pytest.raises(ValueError):
        set_line_status("- [ ] Pay rent", status)
    task = parse_task_line("- [ ] Pay rent")
    with pytest.raises(ValueError):
        reconstruct_line(replace(task, status=status), "- [ ] Pay rent")


def test_padded_status_is_written_trimmed():
    task = parse_task_line("- [x ] Odd bracket")
    assert reconstruct_line(task, "- [x ] Odd bracket") == "- [x] Odd bracket"


def test_replace_line_touches_one_line():
    content = "# Title\n- [ ] a\n- [ ] b\n"
    assert replace_line(content, 2, "- [x] b") == "# Title\n- [ ] a\n- [x] b\n"


def test_replace_line_preserves_crlf_elsewhere():
    content = "one\r\n- [ ] two\r\nthree"
    assert replace_line(content, 1, "- [x] two\r") == "one\r\n- [x] two\r\nthree"


def test_replace_line_out_of_range():
    with pytest.raises(IndexError):
        replace_line("a\nb", 5, "c")


def test_get_line():
    assert get_line("a\nb\n", 1) == "b"
    assert get_line("a\nb\n", 2) == ""
    assert get_line("a\nb\n", 3) is None
