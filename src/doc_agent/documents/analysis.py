"""Heuristic content analysis and in-document search."""

from __future__ import annotations

import re
from collections import Counter
from enum import Enum
from typing import Any

from doc_agent.types import SearchMatch

MIN_CONTEXT_LENGTH = 20
MAX_CONTEXT_LENGTH = 400
DEFAULT_CONTEXT_LENGTH = 50

_FRAGMENT_SPLIT = re.compile(r"[.!?]+")
_NON_WORD = re.compile(r"[^\w\s]", flags=re.ASCII)
_CAPITALIZED = re.compile(r"\b[A-Z][a-z]+\b", flags=re.ASCII)
_EMAIL = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
_PHONE = re.compile(r"\+?[1-9]?[0-9]{10,11}")
_URL = re.compile(r"https?://\S+")

STOP_WORDS = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
        "of", "with", "by", "is", "are", "was", "were", "be", "been", "have",
        "has", "had", "do", "does", "did", "will", "would", "could", "should",
    }
)


class AnalyzeType(str, Enum):
    FULL = "full"
    SUMMARY_ONLY = "summary_only"
    ENTITIES_ONLY = "entities_only"
    TOPICS_ONLY = "topics_only"


def analyze_document(content: str, analyze_type: AnalyzeType = AnalyzeType.FULL) -> dict[str, Any]:
    """Run the summary, entity and topic heuristics over `content`.

    `word_count` is always present. The remaining keys depend on
    `analyze_type`: `summary` for full/summary_only, `entities` for
    full/entities_only and `topics` for full/topics_only.
    """

    analyze_type = AnalyzeType(analyze_type)
    words = normalized_words(content)
    result: dict[str, Any] = {"word_count": len(words)}

    if analyze_type in (AnalyzeType.FULL, AnalyzeType.SUMMARY_ONLY):
        result["summary"] = summarize(content)
    if analyze_type in (AnalyzeType.FULL, AnalyzeType.ENTITIES_ONLY):
        result["entities"] = extract_entities(content)
    if analyze_type in (AnalyzeType.FULL, AnalyzeType.TOPICS_ONLY):
        result["topics"] = rank_topics(words)
    return result


def sentence_fragments(content: str) -> list[str]:
    return [part for part in _FRAGMENT_SPLIT.split(content) if len(part.strip()) > 10]


def summarize(content: str) -> str:
    """Join the first, middle and last fragments into a three-part summary."""
    fragments = sentence_fragments(content)
    if not fragments:
        return "."
    picked = [fragments[0], fragments[len(fragments) // 2], fragments[-1]]
    return ". ".join(fragment.strip() for fragment in picked) + "."


def extract_entities(content: str) -> list[str]:
    capitalized = _CAPITALIZED.findall(content)[:20]
    found = capitalized + _EMAIL.findall(content) + _PHONE.findall(content) + _URL.findall(content)
    return list(dict.fromkeys(found))


def normalized_words(content: str) -> list[str]:
    return _NON_WORD.sub("", content.lower()).split()


def rank_topics(words: list[str], limit: int = 10) -> list[str]:
    # Counter preserves first-seen order, so most_common breaks ties by it.
    frequencies = Counter(word for word in words if len(word) > 3 and word not in STOP_WORDS)
    return [word for word, _ in frequencies.most_common(limit)]


def search_document(
    content: str,
    query: str,
    context_length: int = DEFAULT_CONTEXT_LENGTH,
) -> list[SearchMatch]:
    """Find every case-insensitive literal occurrence of `query`.

    Each match carries up to `context_length` characters on either side,
    clamped to the content bounds and stripped of surrounding whitespace.
    """

    if not query:
        raise ValueError("query must not be empty")
    pattern = re.compile(re.escape(query), re.IGNORECASE)
    matches: list[SearchMatch] = []
    for match in pattern.finditer(content):
        start = max(0, match.start() - context_length)
        end = min(len(content), match.end() + context_length)
        matches.append(SearchMatch(text=content[start:end].strip(), position=match.start()))
    return matches
