#!/usr/bin/env python3
"""
Markdown fence extraction for embedded PlantUML diagrams.

Markdown documents often carry diagrams in fenced code blocks tagged
``plantuml`` or ``puml`` without their own @startuml/@enduml delimiters.
This module finds those fences using markdown-it-py and turns them into
sections.

Key Features:
- Parse markdown to AST using markdown-it-py
- Extract PlantUML fences with their file line offsets
- Leave fences that contain @startuml to the delimiter scan
"""

from pathlib import Path
from typing import List
from markdown_it import MarkdownIt
from markdown_it.token import Token

from section_extractor import START_DELIMITER
from section_validator import Section


MARKDOWN_SUFFIXES = {".md", ".markdown"}

FENCE_LANGUAGES = {"plantuml", "puml"}


# Shared markdown-it-py instance; parsing keeps no state between documents
_md = MarkdownIt()


def parse_markdown(text: str) -> List[Token]:
    """
    Parse markdown text to AST tokens.

    Example:
        >>> tokens = parse_markdown("```puml\\n:a;\\n```")
        >>> tokens[0].type
        'fence'
    """
    return _md.parse(text)


def is_markdown(path: Path) -> bool:
    return Path(path).suffix.lower() in MARKDOWN_SUFFIXES


def fence_language(token: Token) -> str:
    """
    Return the language tag of a fence token (first word of the info string).

    Example:
        >>> tokens = parse_markdown("```plantuml title=x\\n:a;\\n```")
        >>> fence_language(tokens[0])
        'plantuml'
    """
    info = token.info.strip()
    return info.split()[0].lower() if info else ""


def extract_fenced_sections(tokens: List[Token]) -> List[Section]:
    """
    Extract PlantUML fences from markdown AST.

    Fences whose body holds a @startuml line are skipped, since the delimiter
    scan already covers them.

    Args:
        tokens: Markdown AST tokens from parse_markdown()

    Returns:
        Sections in document order; starting_line is the 1-based fence line

    Example:
        >>> tokens = parse_markdown("# Flow\\n\\n```plantuml\\nstart\\n:a;\\n```\\n")
        >>> sections = extract_fenced_sections(tokens)
        >>> sections[0].starting_line, sections[0].lines
        (3, ('start', ':a;'))
    """
    sections = []

    for token in tokens:
        if token.type != "fence" or fence_language(token) not in FENCE_LANGUAGES:
            continue

        lines = tuple(line.strip() for line in token.content.splitlines())
        if any(line.startswith(START_DELIMITER) for line in lines):
            continue

        fence_line = token.map[0] if token.map else 0
        sections.append(Section(lines=lines, starting_line=fence_line + 1, source="fenced"))

    return sections


def fenced_sections(text: str) -> List[Section]:
    """Parse ``text`` and return its PlantUML fence sections."""
    return extract_fenced_sections(parse_markdown(text))
