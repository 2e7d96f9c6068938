"""
Resolve a typed page label to a canvas index.

Page labels of scanned books are often compound ("100-101", "100_101",
"100 101") because one image shows a two-page spread, so a literal comparison
alone misses most spreads. Each dialect keeps its own double-page pattern:
dialect A requires at least one separator between the two numbers, dialect B
accepts none.
"""

from __future__ import annotations

from typing import Iterable
import re

from quire.document.models import Dialect


NOT_FOUND = -1

_IIIF_DOUBLE_PAGE = re.compile(r"(\d*)\D+(\d*)")
_LEGACY_DOUBLE_PAGE = re.compile(r"(\d*)\D*(\d*)")


def normalize_label(label: str | None) -> str | None:
    """
    Trim a label and strip leading zeros from purely numeric labels.

    Only decimal digits count as numeric; superscripts and circled numbers
    are kept as they are.

    Example:
        >>> normalize_label(" 007 ")
        '7'
    """
    if label is None:
        return None
    label = label.strip()
    if label.isdecimal():
        return str(int(label))
    return label


def find_literal_label(query: str, labels: Iterable[str | None]) -> int:
    """Index of the first label equal to the query once both are normalized."""
    query = normalize_label(query)
    for i, label in enumerate(labels):
        if label is not None and normalize_label(label) == query:
            return i
    return NOT_FOUND


def _search(pattern: re.Pattern[str], labels: Iterable[str | None]) -> int:
    for i, label in enumerate(labels):
        if label is not None and pattern.search(label):
            return i
    return NOT_FOUND


def find_iiif_label(query: str, labels: Iterable[str | None]) -> int:
    """
    Find a canvas index by label, dialect A rules.

    1. literal match (leading zeros ignored)
    2. double-page match: ``100-101`` matches ``^100\\D+101$``

    Returns:
        Canvas index, or -1 if nothing matches
    """
    labels = list(labels)
    query = query.strip()

    index = find_literal_label(query, labels)
    if index != NOT_FOUND:
        return index

    match = _IIIF_DOUBLE_PAGE.search(query)
    if match is None:
        return NOT_FOUND

    part1, part2 = match.group(1), match.group(2)
    if not part2:
        return NOT_FOUND

    return _search(re.compile(f"^{part1}\\D+{part2}$"), labels)


def find_legacy_label(query: str, labels: Iterable[str | None]) -> int:
    """
    Find a canvas index by label, dialect B rules.

    1. literal match (leading zeros ignored)
    2. double-page match: ``100-101`` matches ``^100\\D*101$``
    3. single number: ``7`` matches any label containing ``\\D*7\\D*``

    Returns:
        Canvas index, or -1 if nothing matches
    """
    labels = list(labels)
    query = query.strip()

    index = find_literal_label(query, labels)
    if index != NOT_FOUND:
        return index

    match = _LEGACY_DOUBLE_PAGE.match(query)
    part1, part2 = match.group(1), match.group(2)
    if not part1:
        return NOT_FOUND

    if part2:
        pattern = re.compile(f"^{part1}\\D*{part2}$")
    else:
        pattern = re.compile(f"\\D*{part1}\\D*")

    return _search(pattern, labels)


def find_label(query: str, labels: Iterable[str | None], dialect: Dialect) -> int:
    if dialect == "iiif":
        return find_iiif_label(query, labels)
    return find_legacy_label(query, labels)
