"""Extract structured signals from free-text model responses.

Every function here is total: a missing or malformed section falls back
to a documented default instead of raising.
"""

from __future__ import annotations

import re

from ..models.agent import Vote

DEFAULT_CONFIDENCE = 50
MAX_CONFIDENCE = 100
DEFAULT_REASON = "No reasoning provided"

REJECT_PATTERN = re.compile(r"REJECT", re.IGNORECASE)
DIGITS_PATTERN = re.compile(r"[0-9]+")
ISSUES_MARKER = re.compile(r"FINAL_ISSUES:", re.IGNORECASE)
QUALITY_MARKER = re.compile(r"FINAL_QUALITY", re.IGNORECASE)
ISSUE_SEPARATOR = re.compile(r"[,\n]")
REASON_PATTERN = re.compile(r"REASON:\s*(.+)", re.IGNORECASE)


def extract_vote(text: str) -> Vote:
    """REJECT if the text mentions REJECT anywhere, otherwise ACCEPT.

    Plain substring match: "REJECTED" counts as a reject vote too.
    """
    if text and REJECT_PATTERN.search(text):
        return Vote.REJECT
    return Vote.ACCEPT


def extract_confidence(text: str) -> int:
    """First run of digits in the text, capped at 100; 50 if none."""
    m = DIGITS_PATTERN.search(text or "")
    if not m:
        return DEFAULT_CONFIDENCE
    return min(MAX_CONFIDENCE, int(m.group(0)))


def extract_issues(text: str) -> list[str]:
    """Parse the FINAL_ISSUES block of a corrected assessment.

    The block runs from the marker up to FINAL_QUALITY (or end of text)
    and is split on commas and newlines. Blank and "none" entries are
    dropped.
    """
    if not text:
        return []
    start = ISSUES_MARKER.search(text)
    if not start:
        return []

    block = text[start.end():]
    end = QUALITY_MARKER.search(block)
    if end:
        block = block[:end.start()]

    issues: list[str] = []
    for part in ISSUE_SEPARATOR.split(block):
        item = part.strip()
        if item and item.lower() != "none":
            issues.append(item)
    return issues


def extract_reason(text: str) -> str:
    """The REASON: line of a vote, or a placeholder."""
    m = REASON_PATTERN.search(text or "")
    if m and m.group(1).strip():
        return m.group(1).strip()
    return DEFAULT_REASON
