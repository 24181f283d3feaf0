"""Tool registry built on Pydantic v2 models."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from time import perf_counter
from typing import Any

from langchain_core.tools import StructuredTool
from pydantic import BaseModel, ConfigDict, Field

from doc_agent.types import ToolTrace

logger = logging.getLogger(__name__)

ToolOutput = dict[str, Any]


class ToolSpec(BaseModel):
    """Declarative tool specification for registration and validation.

    `error_context` names input fields echoed back next to `error` when the
    handler raises, so the model can tell which path or file failed.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    description: str
    args_schema: type[BaseModel]
    handler: Callable[[BaseModel], ToolOutput]
    error_context: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)

    def validate_input(self, payload: dict[str, Any]) -> BaseModel:
        return self.args_schema.model_validate(payload)


class ToolRegistry:
    """Stores tool specs and exports LangChain-compatible tool objects.

    Handler exceptions never escape `execute`: they are converted into
    `{"error": ...}` results that are returned to the caller like any other
    output. Schema violations still raise `pydantic.ValidationError`.
    """

    def __init__(self) -> None:
        self._tools: dict[str, ToolSpec] = {}
        self._observer: Callable[[ToolTrace], None] | None = None

    def register(self, spec: ToolSpec) -> None:
        if spec.name in self._tools:
            raise ValueError(f"Tool already registered: {spec.name}")
        self._tools[spec.name] = spec

    def set_observer(self, observer: Callable[[ToolTrace], None] | None) -> None:
        """Set an optional callback invoked after each tool execution."""
        self._observer = observer

    def execute(self, name: str, payload: dict[str, Any]) -> ToolOutput:
        spec = self._tools.get(name)
        if spec is None:
            raise KeyError(f"Unknown tool: {name}")
        return self._execute_spec(spec, payload)

    def as_langchain_tools(self) -> list[StructuredTool]:
        tools: list[StructuredTool] = []
        for spec in self._tools.values():
            tools.append(
                StructuredTool.from_function(
                    name=spec.name,
                    description=spec.description,
                    args_schema=spec.args_schema,
                    func=self._build_function(spec),
                    handle_validation_error=True,
                )
            )
        return tools

    def names(self) -> list[str]:
        return list(self._tools)

    def _build_function(self, spec: ToolSpec) -> Callable[..., str]:
        def _callable(**kwargs: Any) -> str:
            return _to_json(self._execute_spec(spec, kwargs))

        return _callable

    def _execute_spec(self, spec: ToolSpec, payload: dict[str, Any]) -> ToolOutput:
        data = spec.validate_input(payload)
        start = perf_counter()
        try:
            output = spec.handler(data)
        except Exception as exc:
            logger.warning("Tool %s failed: %s", spec.name, exc)
            output = {"error": str(exc) or exc.__class__.__name__}
            for field_name in spec.error_context:
                output[field_name] = getattr(data, field_name, None)
        latency_ms = (perf_counter() - start) * 1000.0

        if self._observer is not None:
            self._observer(
                ToolTrace(
                    name=spec.name,
                    input_payload=data.model_dump(mode="json", by_alias=True),
                    output_preview=_to_json(output)[:320],
                    latency_ms=latency_ms,
                    is_error="error" in output,
                )
            )
        return output


def _to_json(output: ToolOutput) -> str:
    return json.dumps(output, ensure_ascii=False, default=str)
