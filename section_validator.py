#!/usr/bin/env python3
"""
Section Validator - runs every rule of a rule set over one diagram section.

Diagnostics of all rules are concatenated in rule order (pattern rules first,
then block constructs in their declared order) and stable-sorted by line
number, so diagnostics on the same line keep that rule order.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from rule_evaluator import Diagnostic
from rule_loader import RuleSet, default_ruleset


@dataclass(frozen=True)
class Section:
    """
    A delimited run of diagram lines inside a file.

    Attributes:
        lines: Trimmed section lines, delimiters excluded
        starting_line: 1-based file line of the opening delimiter or fence
        source: "delimited" for @startuml blocks, "fenced" for markdown fences
    """
    lines: Tuple[str, ...]
    starting_line: int
    source: str = "delimited"

    def file_line(self, line_number: int) -> int:
        """Map a section line index to its 1-based line in the file."""
        return self.starting_line + 1 + line_number


@dataclass(frozen=True)
class SectionReport:
    """Ordered diagnostics of one validated section."""
    section: Section
    diagnostics: Tuple[Diagnostic, ...]

    @property
    def ok(self) -> bool:
        return not self.diagnostics

    @property
    def starting_line(self) -> int:
        return self.section.starting_line


def collect_diagnostics(lines: Sequence[str], ruleset: RuleSet) -> List[Diagnostic]:
    """
    Run all rules over ``lines`` and order the result by line number.

    Args:
        lines: Section lines
        ruleset: Compiled rules to apply

    Returns:
        Diagnostics sorted by line number; ties keep rule evaluation order
    """
    diagnostics: List[Diagnostic] = []

    for rule in ruleset.pattern_rules:
        diagnostics.extend(rule.check(lines))

    for construct in ruleset.block_rules:
        diagnostics.extend(construct.check(lines))

    diagnostics.sort(key=lambda d: d.line_number)
    return diagnostics


def validate_section(section: Section, ruleset: Optional[RuleSet] = None) -> SectionReport:
    """
    Validate one section.

    Args:
        section: Section to check
        ruleset: Rules to apply (built-in rule set when omitted)

    Returns:
        SectionReport with the ordered diagnostics
    """
    if ruleset is None:
        ruleset = default_ruleset()

    diagnostics = collect_diagnostics(section.lines, ruleset)
    return SectionReport(section=section, diagnostics=tuple(diagnostics))
