"""FastAPI entrypoint for the document agent."""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any

from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from doc_agent.agent.planner import DocumentAgent, build_prompt
from doc_agent.config import ModelSettings, agent_config_from_env, create_chat_model, load_environment
from doc_agent.obs.tracing import TraceStore

logger = logging.getLogger(__name__)


class DocumentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    prompt: str | None = None
    file_path: str | None = Field(default=None, alias="filePath")
    content: str | None = None


load_environment()

app = FastAPI(title="Document Agent", version="0.1.0")

_settings = ModelSettings.from_env()
_trace_store = TraceStore()
_llm = create_chat_model(_settings)
_agent: DocumentAgent | None = (
    DocumentAgent(llm=_llm, trace_store=_trace_store, config=agent_config_from_env())
    if _llm is not None
    else None
)


def get_agent() -> DocumentAgent | None:
    return _agent


def get_trace_store() -> TraceStore:
    return _trace_store


@app.get("/health")
def health(trace_store: TraceStore = Depends(get_trace_store)) -> dict[str, Any]:
    return {
        "status": "ok",
        "llm_configured": _llm is not None,
        "model": _settings.model if _llm is not None else None,
        "trace_count": len(trace_store),
    }


@app.post("/api/document")
def process_document(
    request: DocumentRequest,
    agent: DocumentAgent | None = Depends(get_agent),
) -> JSONResponse:
    if not request.prompt:
        return JSONResponse(status_code=400, content={"error": "Prompt is required"})

    try:
        if agent is None:
            raise RuntimeError("No chat model configured; set OPENAI_API_KEY.")
        full_prompt = build_prompt(
            request.prompt,
            file_path=request.file_path,
            content=request.content,
        )
        result = agent.invoke(full_prompt)
    except Exception:
        logger.exception("Document request failed")
        return JSONResponse(
            status_code=500,
            content={"error": "An error occurred processing the document"},
        )

    return JSONResponse(content={"response": result.response})


@app.get("/traces/{trace_id}")
def trace_detail(
    trace_id: str,
    trace_store: TraceStore = Depends(get_trace_store),
) -> dict[str, Any]:
    try:
        record = trace_store.get(trace_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return asdict(record)


@app.get("/metrics")
def metrics(trace_store: TraceStore = Depends(get_trace_store)) -> dict[str, Any]:
    return trace_store.summary()
