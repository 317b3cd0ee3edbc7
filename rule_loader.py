#!/usr/bin/env python3
"""
Rule set definitions and loading.

The built-in rule set covers the PlantUML activity diagram vocabulary. A rule
set can also be loaded from a YAML file with the same shape as DEFAULT_RULES:

    schema_version: 1
    pattern_rules:
      - name: missing-prefix
        trigger: '[^;]*?;$'
        validation: ':[^;]*?;'
        message: "missing ':' at the beginning of the line"
    block_rules:
      - name: if
        open: '^if\\s*\\([^)]*\\)\\s*then\\s*\\([^)]*\\)'
        middle: '^else'
        close: '^endif'
        open_label: 'if (*) then (*)'
        close_label: 'endif'

Definitions are checked against RULES_SCHEMA and every regex is compiled up
front; any problem raises RuleConfigError before a single file is read.
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Tuple

import yaml
from jsonschema import Draft7Validator
from jsonschema.exceptions import best_match

from rule_evaluator import BlockConstruct, PatternRule, RuleConfigError, compile_pattern


DEFAULT_RULES: Dict[str, Any] = {
    "schema_version": 1,
    "pattern_rules": [
        {
            "name": "missing-prefix",
            "trigger": r"[^;]*?;$",
            "validation": r":[^;]*?;",
            "message": "missing ':' at the beginning of the line (doesnt check multiline)",
        },
        {
            "name": "missing-terminator",
            "trigger": r":[^;]*?",
            "validation": r":[^;]*?;$",
            "message": "missing ';' at the end of the line (doesnt check multiline)",
        },
    ],
    "block_rules": [
        {
            "name": "if",
            "open": r"^if\s*\([^)]*\)\s*then\s*\([^)]*\)",
            "middle": r"^(?:else\s*\([^)]*\)|(?:\([^)]*\))?\s*elseif\s*(?:\([^)]*\))?\s*then\s*(?:\([^)]*\))?)",
            "close": r"^endif",
            "open_label": "if (*) then (*)",
            "close_label": "endif",
        },
        {
            "name": "switch",
            "open": r"^switch\s*\((.*?)\)",
            "middle": r"^case\s*\((.*?)\)",
            "close": r"^endswitch$",
            "open_label": "switch (*)",
            "close_label": "endswitch",
        },
        {
            "name": "repeat",
            "open": r"^repeat\b",
            "close": r"^repeat\s+while\s*\((.*?)\)\s+is\s+(.*)",
            "open_label": "repeat",
            "close_label": "repeat while (*) is (*)",
        },
        {
            "name": "while",
            "open": r"^while\s*\((.*?)\)",
            "close": r"^endwhile\s*\((.*?)\)",
            "open_label": "while (*) [is (*)]",
            "close_label": "endwhile [(*)]",
        },
        {
            "name": "fork",
            "open": r"^fork",
            "middle": r"^fork again$",
            "close": r"^end fork|^end merge",
            "open_label": "fork",
            "close_label": "end fork|end merge",
        },
        {
            "name": "split",
            "open": r"^split",
            "middle": r"^fork again$",
            "close": r"^end split",
            "open_label": "split",
            "close_label": "end split",
        },
    ],
}


_NAME = {"type": "string", "minLength": 1}
_REGEX = {"type": "string"}

RULES_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["schema_version"],
    "additionalProperties": False,
    "properties": {
        "schema_version": {"type": "integer", "const": 1},
        "pattern_rules": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name", "trigger", "validation", "message"],
                "additionalProperties": False,
                "properties": {
                    "name": _NAME,
                    "trigger": _REGEX,
                    "validation": _REGEX,
                    "message": {"type": "string"},
                },
            },
        },
        "block_rules": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name", "open", "close", "open_label", "close_label"],
                "additionalProperties": False,
                "properties": {
                    "name": _NAME,
                    "open": _REGEX,
                    "middle": {"type": ["string", "null"]},
                    "close": _REGEX,
                    "open_label": {"type": "string"},
                    "close_label": {"type": "string"},
                },
            },
        },
    },
}


@dataclass(frozen=True)
class RuleSet:
    """
    Compiled rules applied to every section, in evaluation order.

    Attributes:
        pattern_rules: Line-local rules, evaluated first
        block_rules: Paired constructs, evaluated after the pattern rules
    """
    pattern_rules: Tuple[PatternRule, ...]
    block_rules: Tuple[BlockConstruct, ...]


def validate_rules_definition(definition: Any) -> None:
    """
    Check a rule set definition against RULES_SCHEMA.

    Args:
        definition: Parsed rule set (from DEFAULT_RULES or a YAML file)

    Raises:
        RuleConfigError: Describing the first schema violation found
    """
    validator = Draft7Validator(RULES_SCHEMA)
    error = best_match(validator.iter_errors(definition))
    if error is not None:
        location = "/".join(str(p) for p in error.path) or "<root>"
        raise RuleConfigError(f"Invalid rule set at {location}: {error.message}")


def build_ruleset(definition: Dict[str, Any]) -> RuleSet:
    """
    Validate a rule set definition and compile all of its patterns.

    Args:
        definition: Rule set in DEFAULT_RULES form

    Returns:
        Compiled RuleSet, rule order preserved

    Raises:
        RuleConfigError: If the definition is malformed or a regex does not compile
    """
    validate_rules_definition(definition)

    pattern_rules = []
    for rule in definition.get("pattern_rules", []):
        name = rule["name"]
        pattern_rules.append(PatternRule(
            name=name,
            trigger=compile_pattern(rule["trigger"], f"pattern rule '{name}' trigger"),
            validation=compile_pattern(rule["validation"], f"pattern rule '{name}' validation"),
            message=rule["message"],
        ))

    block_rules = []
    for rule in definition.get("block_rules", []):
        name = rule["name"]
        middle = rule.get("middle")
        block_rules.append(BlockConstruct(
            name=name,
            open=compile_pattern(rule["open"], f"block rule '{name}' open"),
            middle=compile_pattern(middle, f"block rule '{name}' middle") if middle is not None else None,
            close=compile_pattern(rule["close"], f"block rule '{name}' close"),
            open_label=rule["open_label"],
            close_label=rule["close_label"],
        ))

    return RuleSet(pattern_rules=tuple(pattern_rules), block_rules=tuple(block_rules))


def load_rules_file(rules_path: Path) -> Dict[str, Any]:
    """
    Read a YAML rule set file.

    Args:
        rules_path: Path to the YAML file

    Returns:
        Parsed rule set definition (not yet validated)

    Raises:
        RuleConfigError: If the file cannot be read or is not valid YAML
    """
    try:
        content = Path(rules_path).read_text(encoding='utf-8')
    except OSError as e:
        raise RuleConfigError(f"Cannot read rule file {rules_path}: {e}") from e

    try:
        definition = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise RuleConfigError(f"Failed to parse YAML in {rules_path}: {e}") from e

    if not isinstance(definition, dict):
        raise RuleConfigError(f"Rule file {rules_path} must contain a mapping")

    return definition


@lru_cache(maxsize=None)
def default_ruleset() -> RuleSet:
    """Return the compiled built-in rule set (compiled once)."""
    return build_ruleset(DEFAULT_RULES)


def load_ruleset(rules_path: Path | None = None) -> RuleSet:
    """Load the rule set from ``rules_path``, or the built-in one when not given."""
    if rules_path is None:
        return default_ruleset()
    return build_ruleset(load_rules_file(rules_path))
