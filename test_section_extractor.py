#!/usr/bin/env python3
"""
Test suite for section_extractor module.

Tests @startuml/@enduml splitting, line offsets, and the two hard parse
failures (closing without opening, opening inside an open section).
"""

import pytest

from section_extractor import SectionParseError, extract_sections


def test_single_section():
    text = "@startuml\nstart\n:a;\nstop\n@enduml\n"

    result = extract_sections(text)

    assert len(result.sections) == 1
    assert result.sections[0].lines == ("start", ":a;", "stop")
    assert result.sections[0].starting_line == 1
    assert result.unterminated is None


def test_text_outside_sections_ignored():
    text = "Some prose\n\n@startuml\n:a;\n@enduml\nmore prose;\n"

    result = extract_sections(text)

    assert [s.lines for s in result.sections] == [(":a;",)]
    assert result.sections[0].starting_line == 3


def test_multiple_sections_in_order():
    text = "@startuml\n:a;\n@enduml\nx\n@startuml\n:b;\n:c;\n@enduml\n"

    result = extract_sections(text)

    assert [s.starting_line for s in result.sections] == [1, 5]
    assert result.sections[1].lines == (":b;", ":c;")


def test_lines_are_trimmed():
    text = "  @startuml\n    :a;\t\n  @enduml  \n"

    result = extract_sections(text)

    assert result.sections[0].lines == (":a;",)


def test_delimiter_with_suffix():
    """Delimiters are matched by prefix, e.g. '@startuml name'."""
    text = "@startuml activity\n:a;\n@enduml\n"

    result = extract_sections(text)

    assert result.sections[0].lines == (":a;",)


def test_empty_section():
    result = extract_sections("@startuml\n@enduml\n")

    assert result.sections[0].lines == ()


def test_file_line_mapping():
    result = extract_sections("x\n@startuml\n:a;\n:b;\n@enduml\n")
    section = result.sections[0]

    assert section.file_line(0) == 3
    assert section.file_line(1) == 4


def test_no_sections():
    result = extract_sections("nothing to see\n")

    assert result.sections == []
    assert result.unterminated is None


def test_end_without_start():
    text = ":a;\n@enduml\n"

    with pytest.raises(SectionParseError) as exc_info:
        extract_sections(text)

    error = exc_info.value
    assert error.line_number == 2
    assert error.line == "@enduml"
    assert "without starting one" in error.detail
    assert error.open_section_line is None


def test_start_inside_open_section():
    text = "@startuml\n:a;\n@startuml\n:b;\n@enduml\n"

    with pytest.raises(SectionParseError) as exc_info:
        extract_sections(text)

    error = exc_info.value
    assert error.line_number == 3
    assert error.open_section_line == 1
    assert "without closing the previous at line 1" in error.detail


def test_parse_error_message():
    with pytest.raises(SectionParseError) as exc_info:
        extract_sections("@enduml\n")

    assert str(exc_info.value).startswith("1: @enduml  <- closing uml section")


def test_second_end_after_closed_section():
    text = "@startuml\n:a;\n@enduml\n@enduml\n"

    with pytest.raises(SectionParseError) as exc_info:
        extract_sections(text)
    assert exc_info.value.line_number == 4


def test_unterminated_section_reported_not_returned():
    text = "@startuml\n:a;\n@enduml\n@startuml\n:b;\n"

    result = extract_sections(text)

    assert len(result.sections) == 1
    assert result.unterminated == 4
