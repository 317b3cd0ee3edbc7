#!/usr/bin/env python3
"""
Console output for validation results.

Reports go to stdout; file-level problems (unreadable files, broken section
delimiters) go to the error channel on stderr. Styling uses rich and is
dropped automatically when the output is not a terminal.
"""

from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console
from rich.text import Text

from section_extractor import SectionParseError
from section_validator import SectionReport


def _plain_console(stderr: bool = False) -> Console:
    # Diagram text is printed verbatim: no markup, emoji codes or highlighting.
    return Console(stderr=stderr, markup=False, emoji=False, highlight=False, soft_wrap=True)


class Reporter:
    """
    Render validation results and file-level errors.

    Attributes:
        out: Console for reports
        err: Console for the error channel
    """

    def __init__(self, out: Optional[Console] = None, err: Optional[Console] = None):
        self.out = out if out is not None else _plain_console()
        self.err = err if err is not None else _plain_console(stderr=True)

    def usage(self) -> None:
        self.out.print("usage: pumlchk <file1> <file2> ...")

    def file_report(self, path: Path, reports: Sequence[SectionReport]) -> None:
        """
        Print the results of one file.

        Each section is introduced by its starting line and followed by either
        "OK!" or one line per diagnostic: file line number, source line, message.
        """
        self.out.print(f"In file {path}:")

        for report in reports:
            self.out.print()
            self.out.print(f"PlantUML starting at line {report.starting_line}:")

            if report.ok:
                self.out.print("OK!")

            for diagnostic in report.diagnostics:
                source_line = report.section.lines[diagnostic.line_number]
                self.out.print(Text.assemble(
                    (str(report.section.file_line(diagnostic.line_number)), "grey50"),
                    ": ",
                    (source_line, "bold"),
                    " ",
                    (diagnostic.message, "red"),
                ))

            self.out.print()

    def read_error(self, path: Path, error: Exception) -> None:
        self.err.print(Text(f"[ERROR] ignoring file {path}, error while reading: {error}", style="red"))

    def parse_error(self, path: Path, error: SectionParseError) -> None:
        """Print why a file was skipped because of malformed section delimiters."""
        self.err.print()
        self.err.print(Text(
            f"[ERROR] skipping file {path} because of error while parsing uml sections!",
            style="red",
        ))
        if error.open_section_line is not None:
            self.err.print(f"{error.open_section_line}: @startuml... <- opening uml section")
        self.err.print(f"{error.line_number}: {error.line}  <- {error.detail}")
        self.err.print()

    def unterminated_warning(self, path: Path, starting_line: int) -> None:
        self.err.print(Text(
            f"[WARN] {path}:{starting_line}: uml section is never closed with @enduml, not validated",
            style="yellow",
        ))

    def config_error(self, error: Exception) -> None:
        self.err.print(Text(f"[ERROR] Failed to load validation rules: {error}", style="red"))
