#!/usr/bin/env python3
"""
Rule Evaluator - Line and block rules for PlantUML diagram sections.

This module provides the two rule engines used to check the lines of one
PlantUML section:

Key Features:
- Pattern rules: "if a line matches the trigger, it must also match the
  validation pattern" (missing ':' / missing ';' checks)
- Block rules: one generic open/middle/close matcher that verifies nesting of
  paired constructs (if/endif, switch/endswitch, fork/end fork, ...)
- Structured diagnostics with section-local line numbers

Both engines work on single physical lines. Statements spread over several
lines are not joined before checking.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union


MESSAGE_MARKER = "<- "

PatternLike = Union[str, re.Pattern[str]]


class RuleConfigError(ValueError):
    """Raised when a rule definition or one of its regular expressions is invalid."""
    pass


@dataclass(frozen=True)
class Diagnostic:
    """
    One rule violation inside a diagram section.

    Attributes:
        line_number: Line index within the section (0-based)
        message: Human readable message, prefixed with the "<- " marker
        rule: Name of the pattern rule or block construct that produced it
    """
    line_number: int
    message: str
    rule: str = ""


@dataclass(frozen=True)
class PatternRule:
    """
    A line-local rule: lines matching ``trigger`` must also match ``validation``.

    Attributes:
        name: Rule identifier used in diagnostics
        trigger: Broad pattern selecting the lines the rule applies to
        validation: Stricter pattern every selected line must satisfy
        message: Message reported for a violating line (without marker)
    """
    name: str
    trigger: re.Pattern[str]
    validation: re.Pattern[str]
    message: str

    def check(self, lines: Sequence[str]) -> List[Diagnostic]:
        return check_pattern(lines, self.trigger, self.validation, self.message, rule=self.name)


@dataclass(frozen=True)
class BlockConstruct:
    """
    A paired construct checked by the generic block matcher.

    Attributes:
        name: Construct identifier used in diagnostics
        open: Pattern of the line opening the block
        middle: Optional pattern of interior separator lines (else, case, ...)
        close: Pattern of the line closing the block
        open_label: Display text of the opening line, used in messages
        close_label: Display text of the closing line, used in messages
    """
    name: str
    open: re.Pattern[str]
    middle: Optional[re.Pattern[str]]
    close: re.Pattern[str]
    open_label: str
    close_label: str

    def check(self, lines: Sequence[str]) -> List[Diagnostic]:
        return check_block(
            lines,
            self.open,
            self.middle,
            self.close,
            self.open_label,
            self.close_label,
            rule=self.name,
        )


def compile_pattern(pattern: PatternLike, what: str = "pattern") -> re.Pattern[str]:
    """
    Compile a rule pattern, failing loudly on invalid expressions.

    Args:
        pattern: Regular expression string or an already compiled pattern
        what: Description of the pattern used in the error message

    Returns:
        Compiled pattern

    Raises:
        RuleConfigError: If the expression does not compile

    Example:
        >>> compile_pattern(r"^endif").pattern
        '^endif'
    """
    if isinstance(pattern, re.Pattern):
        return pattern

    try:
        return re.compile(pattern)
    except re.error as e:
        raise RuleConfigError(f"Invalid regex for {what}: {pattern!r} ({e})") from e


def check_pattern(
    lines: Sequence[str],
    trigger: PatternLike,
    validation: PatternLike,
    message: str,
    rule: str = "pattern",
) -> List[Diagnostic]:
    """
    Flag every line that matches ``trigger`` but not ``validation``.

    Lines are trimmed before matching and patterns are searched anywhere in
    the line. Each violating line yields exactly one diagnostic.

    Args:
        lines: Section lines
        trigger: Pattern selecting the lines the rule applies to
        validation: Pattern the selected lines must also match
        message: Message for violating lines (the "<- " marker is added)
        rule: Rule name recorded on the diagnostics

    Returns:
        Diagnostics in line order

    Raises:
        RuleConfigError: If a string pattern does not compile

    Example:
        >>> check_pattern(["foo;"], r"[^;]*?;$", r":[^;]*?;", "missing ':'")
        [Diagnostic(line_number=0, message="<- missing ':'", rule='pattern')]
    """
    trigger = compile_pattern(trigger, f"{rule} trigger")
    validation = compile_pattern(validation, f"{rule} validation")

    diagnostics = []
    for line_number, line in enumerate(lines):
        line = line.strip()
        if trigger.search(line) and not validation.search(line):
            diagnostics.append(Diagnostic(
                line_number=line_number,
                message=f"{MESSAGE_MARKER}{message}",
                rule=rule,
            ))

    return diagnostics


def check_block(
    lines: Sequence[str],
    open_pattern: PatternLike,
    middle_pattern: Optional[PatternLike],
    close_pattern: PatternLike,
    open_label: str,
    close_label: str,
    rule: str = "block",
) -> List[Diagnostic]:
    """
    Verify that open/middle/close lines of one construct are correctly nested.

    Each trimmed line is tested against open, then middle (if given), then
    close; only the first matching category applies. Opens push their index
    on a stack, closes pop it. A middle or close with an empty stack reports
    a missing opening; opens left on the stack at the end report a missing
    closing, outermost first.

    Args:
        lines: Section lines
        open_pattern: Pattern of the opening line
        middle_pattern: Optional pattern of interior separator lines
        close_pattern: Pattern of the closing line
        open_label: Display text of the opening line
        close_label: Display text of the closing line
        rule: Construct name recorded on the diagnostics

    Returns:
        Diagnostics found during the scan, followed by unclosed openings

    Example:
        >>> check_block(["switch (x)", "endswitch", "endswitch"],
        ...             r"^switch\\s*\\((.*?)\\)", r"^case\\s*\\((.*?)\\)", r"^endswitch$",
        ...             "switch (*)", "endswitch")[0].line_number
        2
    """
    open_pattern = compile_pattern(open_pattern, f"{rule} open")
    if middle_pattern is not None:
        middle_pattern = compile_pattern(middle_pattern, f"{rule} middle")
    close_pattern = compile_pattern(close_pattern, f"{rule} close")

    diagnostics = []
    opening_stack: List[int] = []

    for line_number, line in enumerate(lines):
        line = line.strip()

        if open_pattern.search(line):
            opening_stack.append(line_number)
            continue

        if middle_pattern is not None and middle_pattern.search(line):
            if not opening_stack:
                diagnostics.append(Diagnostic(
                    line_number=line_number,
                    message=f"{MESSAGE_MARKER}no opening {open_label} found",
                    rule=rule,
                ))
            continue

        if close_pattern.search(line):
            if opening_stack:
                opening_stack.pop()
            else:
                diagnostics.append(Diagnostic(
                    line_number=line_number,
                    message=f"{MESSAGE_MARKER}no opening {open_label} found",
                    rule=rule,
                ))

    for line_number in opening_stack:
        diagnostics.append(Diagnostic(
            line_number=line_number,
            message=f"{MESSAGE_MARKER}no closing {close_label} found",
            rule=rule,
        ))

    return diagnostics
