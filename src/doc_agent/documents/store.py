"""JSON persistence for finished document analyses."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class AnalysisRecord(BaseModel):
    """Analysis summary as written to disk (camelCase keys)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    filename: str
    summary: str
    key_points: list[str] | None = None
    entities: list[str] | None = None
    topics: list[str] | None = None
    word_count: int = Field(ge=0)
    source_file: str


def save_analysis(
    record: AnalysisRecord,
    output_path: str | Path,
    *,
    now: datetime | None = None,
) -> Path:
    """Write `record` plus a `generatedAt` timestamp as indented JSON."""

    target = Path(output_path)
    payload: dict[str, Any] = record.model_dump(by_alias=True, exclude_none=True)
    payload["generatedAt"] = (now or datetime.now(timezone.utc)).isoformat()
    target.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
    return target
