#!/usr/bin/env python3
"""PlantUML diagram validation tool.

Checks the @startuml/@enduml sections of text files (and PlantUML fences in
markdown files) for missing ':'/';' markers and unbalanced control blocks.
"""

import argparse
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from markdown_parser import fenced_sections, is_markdown
from reporter import Reporter
from rule_evaluator import RuleConfigError
from rule_loader import RuleSet, load_ruleset
from section_extractor import SectionParseError, extract_sections
from section_validator import Section, SectionReport, validate_section


# Exit codes
EXIT_OK = 0
EXIT_DIAGNOSTICS = 1
EXIT_CONFIG_ERROR = 2


@dataclass
class FileResult:
    """
    Validation results of one file.

    Attributes:
        path: File that was validated
        reports: One report per section, in file order
        unterminated: Start line of a trailing section without @enduml, if any
    """
    path: Path
    reports: List[SectionReport] = field(default_factory=list)
    unterminated: Optional[int] = None

    @property
    def diagnostic_count(self) -> int:
        return sum(len(report.diagnostics) for report in self.reports)


def collect_sections(path: Path, text: str) -> Tuple[List[Section], Optional[int]]:
    """Return (sections in file order, unterminated start line) for ``text``.

    Raises:
        SectionParseError: If the @startuml/@enduml delimiters are malformed
    """
    extraction = extract_sections(text)
    sections: List[Section] = list(extraction.sections)

    if is_markdown(path):
        sections.extend(fenced_sections(text))
        sections.sort(key=lambda s: s.starting_line)

    return sections, extraction.unterminated


def validate_text(path: Path, text: str, ruleset: Optional[RuleSet] = None) -> FileResult:
    """Validate every section of ``text``; SectionParseError propagates."""
    sections, unterminated = collect_sections(path, text)
    reports = [validate_section(section, ruleset) for section in sections]
    return FileResult(path=path, reports=reports, unterminated=unterminated)


def validate_files(paths: Sequence[Path], ruleset: RuleSet, reporter: Reporter) -> List[FileResult]:
    """Validate and report each file independently.

    Unreadable files and files with malformed delimiters are reported on the
    error channel and skipped; the remaining files are still validated.

    Returns:
        Results of the files that were validated, in argument order
    """
    results = []

    for path in paths:
        try:
            text = path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            reporter.read_error(path, e)
            continue

        try:
            result = validate_text(path, text, ruleset)
        except SectionParseError as e:
            reporter.parse_error(path, e)
            continue

        if result.unterminated is not None:
            reporter.unterminated_warning(path, result.unterminated)

        reporter.file_report(path, result.reports)
        results.append(result)

    return results


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pumlchk",
        description="Validate PlantUML activity diagrams embedded in text files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s docs/flow.puml
  %(prog)s README.md design/*.md
  %(prog)s --rules my_rules.yaml docs/flow.puml
        """
    )
    parser.add_argument(
        'files',
        nargs='*',
        type=Path,
        help='Files to validate'
    )
    parser.add_argument(
        '--rules',
        type=Path,
        default=None,
        help='YAML rule set replacing the built-in rules'
    )
    return parser


def main(argv: Optional[Sequence[str]] = None, reporter: Optional[Reporter] = None) -> int:
    """Main entry point for the validation tool.

    Returns:
        Exit code: 0 if all sections pass (or nothing to do), 1 if any
        diagnostic was reported, 2 if the rule set is invalid
    """
    args = build_parser().parse_args(argv)
    reporter = reporter if reporter is not None else Reporter()

    if not args.files:
        reporter.usage()
        return EXIT_OK

    try:
        ruleset = load_ruleset(args.rules)
    except RuleConfigError as e:
        reporter.config_error(e)
        return EXIT_CONFIG_ERROR

    results = validate_files(args.files, ruleset, reporter)

    if any(result.diagnostic_count for result in results):
        return EXIT_DIAGNOSTICS
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
