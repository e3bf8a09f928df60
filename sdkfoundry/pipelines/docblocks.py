"""Parsing of /** ... */ documentation comments."""

from __future__ import annotations
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

_LINE_PREFIX = re.compile(r'^\s*\*(?!/)\s?')
_TAG_LINE = re.compile(r'^@(\w+)\s*(.*)$')


@dataclass
class DocBlock:
    summary: str = ""
    remarks: Optional[str] = None
    category: Optional[str] = None
    examples: List[str] = field(default_factory=list)
    requires: List[str] = field(default_factory=list)
    tags: Dict[str, List[str]] = field(default_factory=dict)


def is_doc_comment(text: str) -> bool:
    return text.startswith("/**") and not text.startswith("/**/")


def _comment_lines(text: str) -> List[str]:
    body = text.strip()
    if body.startswith("/**"):
        body = body[3:]
    if body.endswith("*/"):
        body = body[:-2]
    return [_LINE_PREFIX.sub('', line).rstrip() for line in body.split('\n')]


def parse_doc_comment(text: Optional[str]) -> DocBlock:
    """Split a doc comment into its summary and recognized tags.

    The summary is the free text before the first tag. @remarks and
    @category keep their last value, @example and @requires accumulate.
    """
    block = DocBlock()
    if not text or not is_doc_comment(text):
        return block

    summary: List[str] = []
    current_tag: Optional[str] = None
    current_lines: List[str] = []
    collected: List[tuple] = []

    for line in _comment_lines(text):
        match = _TAG_LINE.match(line.strip())
        if match:
            if current_tag is not None:
                collected.append((current_tag, current_lines))
            current_tag = match.group(1)
            current_lines = [match.group(2)] if match.group(2) else []
        elif current_tag is None:
            summary.append(line.strip())
        else:
            current_lines.append(line)
    if current_tag is not None:
        collected.append((current_tag, current_lines))

    block.summary = "\n".join(summary).strip()

    for tag, lines in collected:
        value = "\n".join(lines).strip()
        block.tags.setdefault(tag, []).append(value)
        if tag == "remarks":
            block.remarks = value
        elif tag == "category":
            block.category = value
        elif tag == "example":
            block.examples.append(value)
        elif tag == "requires":
            block.requires.extend(name.strip() for name in value.split(',') if name.strip())

    return block


def resolve_description(*candidates: Optional[str]) -> str:
    """Return the first candidate with non-blank text, or an empty string."""
    for candidate in candidates:
        if candidate and candidate.strip():
            return candidate.strip()
    return ""
