"""Shared domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class DocumentTypeInfo:
    """Extension-based type label plus basic file statistics."""

    file_path: str
    type: str
    extension: str
    size_bytes: int
    last_modified: str


@dataclass(slots=True)
class ExtractedText:
    """Readable text pulled out of a document."""

    file_path: str
    extracted_text: str
    word_count: int
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class SearchMatch:
    """A context window around one search hit."""

    text: str
    position: int


@dataclass(slots=True)
class ToolTrace:
    """Trace record for an executed tool call."""

    name: str
    input_payload: dict[str, Any]
    output_preview: str
    latency_ms: float
    is_error: bool = False


@dataclass(slots=True)
class TokenUsage:
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


@dataclass(slots=True)
class AgentResult:
    """Final text of one agent session with its tool trace and usage."""

    response: str
    tool_traces: list[ToolTrace]
    usage: TokenUsage
    trace_id: str
    latency_ms: float
    steps_exhausted: bool = False
