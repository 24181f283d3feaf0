"""LangChain-based document agent with a bounded tool-calling loop."""

from __future__ import annotations

import logging
from collections.abc import Callable
from importlib import import_module
from pathlib import Path
from typing import Any

from langchain_core.prompts import ChatPromptTemplate, MessagesPlaceholder
from langgraph.errors import GraphRecursionError

_agents_module = import_module("langchain.agents")
create_agent = getattr(_agents_module, "create_agent", None)
AgentExecutor = getattr(_agents_module, "AgentExecutor", None)
create_tool_calling_agent = getattr(_agents_module, "create_tool_calling_agent", None)
_AGENT_RUNTIME = (
    "legacy"
    if callable(AgentExecutor) and callable(create_tool_calling_agent)
    else "graph"
)

from doc_agent.agent.registry import ToolRegistry
from doc_agent.agent.tools import register_document_tools
from doc_agent.config import AgentConfig
from doc_agent.documents.extractor import ExtractorRegistry
from doc_agent.obs.tracing import Timer, TraceStore, estimate_token_count
from doc_agent.types import AgentResult, TokenUsage, ToolTrace
from doc_agent.workspace import Workspace

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a Document Processing Agent. You MUST use tools to read actual file contents. "
    "You are FORBIDDEN from making assumptions about file contents based on filenames. "
    "When asked to analyze a file, you MUST first extract its text content using the "
    "extract_text_content tool, then analyze that content."
)

# Outputs AgentExecutor returns when it stops at `max_iterations`.
MAX_ITERATIONS_MESSAGES = frozenset(
    {
        "Agent stopped due to max iterations.",
        "Agent stopped due to iteration limit or time limit.",
    }
)

ExecutorFactory = Callable[[ToolRegistry], Any]


def build_prompt(prompt: str, *, file_path: str | None = None, content: str | None = None) -> str:
    """Attach the document reference or inline content to the instruction."""
    if file_path:
        return f"{prompt} (Document: {file_path})"
    if content:
        return f"{prompt}\n\nDocument content:\n{content}"
    return prompt


class DocumentAgent:
    """Runs one prompt through a tool-calling agent over a fresh workspace.

    Every `invoke` builds its own `Workspace` and `ToolRegistry`, so directory
    changes made by the model last only for that session. The loop itself
    (tool choice, feeding results back, stopping) belongs to LangChain; this
    class wires the tools in, enforces `config.max_steps` and records a trace.
    """

    def __init__(
        self,
        *,
        llm: Any,
        trace_store: TraceStore,
        config: AgentConfig | None = None,
        extractors: ExtractorRegistry | None = None,
        executor_factory: ExecutorFactory | None = None,
    ) -> None:
        self.llm = llm
        self.trace_store = trace_store
        self.config = config or AgentConfig()
        self.extractors = extractors or ExtractorRegistry()
        self._executor_factory = executor_factory
        self._runtime = "custom" if executor_factory is not None else _AGENT_RUNTIME

    def build_registry(self, workspace: Workspace) -> ToolRegistry:
        registry = ToolRegistry()
        register_document_tools(registry, workspace, extractors=self.extractors)
        return registry

    def invoke(self, prompt: str, *, base_dir: str | Path | None = None) -> AgentResult:
        """Run one full agent session and persist its trace.

        Reaching the step cap is not an error: the latest model text is
        returned with `steps_exhausted=True`.
        """

        workspace = Workspace(base_dir or self.config.base_dir)
        registry = self.build_registry(workspace)
        executor = self._build_executor(registry)

        observed_tools: list[ToolTrace] = []
        registry.set_observer(observed_tools.append)
        try:
            with Timer() as timer:
                if self._runtime == "graph":
                    state, steps_exhausted = self._run_graph(executor, prompt)
                    answer = _extract_graph_answer(state)
                    fallback_traces = _extract_graph_tool_traces(state)
                    usage = _sum_usage_metadata(state)
                else:
                    result = executor.invoke({"input": prompt, "chat_history": []})
                    answer = str(result.get("output", ""))
                    intermediate_steps = result.get("intermediate_steps", [])
                    fallback_traces = _extract_tool_traces(intermediate_steps)
                    steps_exhausted = answer in MAX_ITERATIONS_MESSAGES
                    usage = None
        finally:
            registry.set_observer(None)

        if steps_exhausted:
            logger.warning("Agent stopped after reaching the %d step limit", self.config.max_steps)
        if usage is None:
            usage = TokenUsage(
                input_tokens=estimate_token_count(SYSTEM_PROMPT) + estimate_token_count(prompt),
                output_tokens=estimate_token_count(answer),
            )
        tool_traces = observed_tools or fallback_traces

        record = self.trace_store.create_record(
            prompt=prompt,
            response=answer,
            tool_traces=tool_traces,
            usage=usage,
            latency_ms=timer.elapsed_ms,
            steps_exhausted=steps_exhausted,
        )
        return AgentResult(
            response=answer,
            tool_traces=tool_traces,
            usage=usage,
            trace_id=record.trace_id,
            latency_ms=record.latency_ms,
            steps_exhausted=steps_exhausted,
        )

    def _build_executor(self, registry: ToolRegistry) -> Any:
        if self._executor_factory is not None:
            return self._executor_factory(registry)

        tools = registry.as_langchain_tools()
        if self._runtime == "legacy":
            if not callable(create_tool_calling_agent) or not callable(AgentExecutor):
                raise RuntimeError("Legacy LangChain agent runtime is unavailable.")
            prompt = ChatPromptTemplate.from_messages(
                [
                    ("system", SYSTEM_PROMPT),
                    MessagesPlaceholder(variable_name="chat_history", optional=True),
                    ("human", "{input}"),
                    MessagesPlaceholder(variable_name="agent_scratchpad"),
                ]
            )
            agent = create_tool_calling_agent(self.llm, tools, prompt)
            return AgentExecutor(
                agent=agent,
                tools=tools,
                max_iterations=self.config.max_steps,
                return_intermediate_steps=True,
                verbose=False,
                handle_parsing_errors=True,
            )

        if not callable(create_agent):
            raise RuntimeError("LangChain create_agent is unavailable.")
        return create_agent(model=self.llm, tools=tools, system_prompt=SYSTEM_PROMPT)

    def _run_graph(self, executor: Any, prompt: str) -> tuple[dict[str, Any], bool]:
        # One step is a model node plus a tools node.
        config = {"recursion_limit": self.config.max_steps * 2}
        state: dict[str, Any] = {}
        try:
            for state in executor.stream(
                {"messages": [{"role": "user", "content": prompt}]},
                config=config,
                stream_mode="values",
            ):
                pass
        except GraphRecursionError:
            return state, True
        return state, False


def _message_text(content: Any) -> str:
    if isinstance(content, list):
        parts: list[str] = []
        for item in content:
            if isinstance(item, dict):
                if item.get("type", "text") == "text" and "text" in item:
                    parts.append(str(item["text"]))
            else:
                parts.append(str(item))
        return " ".join(parts).strip()
    return str(content)


def _message_type(message: Any) -> str:
    if isinstance(message, dict):
        return str(message.get("type") or message.get("role", "")).lower()
    return str(getattr(message, "type", "")).lower()


def _extract_graph_answer(state: Any) -> str:
    if not isinstance(state, dict):
        return str(state)
    messages = state.get("messages", [])
    if not isinstance(messages, list) or not messages:
        return str(state.get("output", ""))
    for message in reversed(messages):
        if _message_type(message) not in {"ai", "assistant"}:
            continue
        content = message.get("content", "") if isinstance(message, dict) else getattr(message, "content", "")
        text = _message_text(content)
        if text:
            return text
    return ""


def _extract_graph_tool_traces(state: Any) -> list[ToolTrace]:
    if not isinstance(state, dict):
        return []
    traces: list[ToolTrace] = []
    for message in state.get("messages", []):
        if _message_type(message) != "tool":
            continue
        content = str(getattr(message, "content", ""))
        traces.append(
            ToolTrace(
                name=str(getattr(message, "name", "unknown")),
                input_payload={"raw": "graph-runtime"},
                output_preview=content[:320],
                latency_ms=0.0,
                is_error=getattr(message, "status", "success") == "error",
            )
        )
    return traces


def _sum_usage_metadata(state: Any) -> TokenUsage | None:
    if not isinstance(state, dict):
        return None
    usage = TokenUsage()
    reported = False
    for message in state.get("messages", []):
        metadata = getattr(message, "usage_metadata", None)
        if not metadata:
            continue
        reported = True
        usage.input_tokens += int(metadata.get("input_tokens", 0))
        usage.output_tokens += int(metadata.get("output_tokens", 0))
    return usage if reported else None


def _extract_tool_traces(intermediate_steps: list[Any]) -> list[ToolTrace]:
    traces: list[ToolTrace] = []
    for step in intermediate_steps:
        if not isinstance(step, tuple) or len(step) != 2:
            continue
        action, observation = step
        tool_input = getattr(action, "tool_input", {})
        observation_text = str(observation)
        traces.append(
            ToolTrace(
                name=str(getattr(action, "tool", "unknown")),
                input_payload=tool_input if isinstance(tool_input, dict) else {"raw": str(tool_input)},
                output_preview=observation_text[:320],
                latency_ms=0.0,
                is_error='"error"' in observation_text,
            )
        )
    return traces
