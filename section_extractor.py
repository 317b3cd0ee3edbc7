#!/usr/bin/env python3
"""
Section extraction for @startuml/@enduml delimited diagrams.

Splits raw file text into diagram sections. Delimiter lines are recognised
after trimming, by prefix (so ``@startuml my-diagram`` opens a section), and
are not part of the section lines. Malformed delimiters make the whole file
unusable: extract_sections raises SectionParseError and returns nothing.

Line numbers reported by this module are 1-based file line numbers.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from section_validator import Section


START_DELIMITER = "@startuml"
END_DELIMITER = "@enduml"


class SectionParseError(ValueError):
    """
    Raised when section delimiters are unbalanced.

    Attributes:
        line_number: 1-based line of the offending delimiter
        line: Trimmed text of the offending line
        detail: What went wrong
        open_section_line: Start line of the section still open (nested start only)
    """

    def __init__(self, line_number: int, line: str, detail: str, open_section_line: Optional[int] = None):
        self.line_number = line_number
        self.line = line
        self.detail = detail
        self.open_section_line = open_section_line
        super().__init__(f"{line_number}: {line}  <- {detail}")


@dataclass
class ExtractionResult:
    """
    Sections found in one file.

    Attributes:
        sections: Complete sections, in file order
        unterminated: Start line of a section still open at end of file, if any
    """
    sections: List[Section] = field(default_factory=list)
    unterminated: Optional[int] = None


def extract_sections(text: str) -> ExtractionResult:
    """
    Split file text into @startuml/@enduml sections.

    Args:
        text: Raw file content

    Returns:
        ExtractionResult with every closed section in order

    Raises:
        SectionParseError: On @enduml without an open section, or @startuml
            inside an open section

    Example:
        >>> result = extract_sections("intro\\n@startuml\\n:a;\\n@enduml\\n")
        >>> result.sections[0].starting_line, result.sections[0].lines
        (2, (':a;',))
    """
    result = ExtractionResult()
    reading = False
    starting_line = 0
    buffer: List[str] = []

    for line_number, line in enumerate(text.splitlines(), start=1):
        line = line.strip()

        if line.startswith(END_DELIMITER):
            if not reading:
                raise SectionParseError(
                    line_number,
                    line,
                    f"closing uml section without starting one before with {START_DELIMITER}",
                )
            result.sections.append(Section(lines=tuple(buffer), starting_line=starting_line))
            reading = False
            buffer = []
            continue

        if line.startswith(START_DELIMITER):
            if reading:
                raise SectionParseError(
                    line_number,
                    line,
                    f"opening another uml section without closing the previous at line {starting_line}",
                    open_section_line=starting_line,
                )
            reading = True
            starting_line = line_number
            continue

        if reading:
            buffer.append(line)

    if reading:
        result.unterminated = starting_line

    return result
