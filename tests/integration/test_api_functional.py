import pytest
from fastapi.testclient import TestClient

from doc_agent.api.main import app, get_agent, get_trace_store
from doc_agent.obs.tracing import TraceStore
from doc_agent.types import AgentResult, TokenUsage


class _StubAgent:
    def __init__(self, trace_store: TraceStore, *, fail: bool = False) -> None:
        self.trace_store = trace_store
        self.fail = fail
        self.prompts: list[str] = []

    def invoke(self, prompt: str) -> AgentResult:
        self.prompts.append(prompt)
        if self.fail:
            raise ConnectionError("provider unavailable")
        usage = TokenUsage(input_tokens=12, output_tokens=4)
        record = self.trace_store.create_record(
            prompt=prompt,
            response="The report covers encryption.",
            tool_traces=[],
            usage=usage,
            latency_ms=1.5,
        )
        return AgentResult(
            response=record.response,
            tool_traces=[],
            usage=usage,
            trace_id=record.trace_id,
            latency_ms=record.latency_ms,
        )


@pytest.fixture
def trace_store():
    store = TraceStore()
    app.dependency_overrides[get_trace_store] = lambda: store
    yield store
    app.dependency_overrides.clear()


def test_missing_prompt_is_rejected(trace_store) -> None:
    stub = _StubAgent(trace_store)
    app.dependency_overrides[get_agent] = lambda: stub
    client = TestClient(app)

    for body in ({}, {"prompt": ""}, {"filePath": "a.txt"}):
        response = client.post("/api/document", json=body)
        assert response.status_code == 400
        assert response.json() == {"error": "Prompt is required"}
    assert stub.prompts == []


def test_document_request_returns_agent_text(trace_store) -> None:
    stub = _StubAgent(trace_store)
    app.dependency_overrides[get_agent] = lambda: stub
    client = TestClient(app)

    response = client.post(
        "/api/document",
        json={"prompt": "Summarize this", "filePath": "reports/q3.pdf"},
    )

    assert response.status_code == 200
    assert response.json() == {"response": "The report covers encryption."}
    assert stub.prompts == ["Summarize this (Document: reports/q3.pdf)"]


def test_inline_content_is_appended(trace_store) -> None:
    stub = _StubAgent(trace_store)
    app.dependency_overrides[get_agent] = lambda: stub
    client = TestClient(app)

    client.post("/api/document", json={"prompt": "Find names", "content": "Alice met Bob."})

    assert stub.prompts == ["Find names\n\nDocument content:\nAlice met Bob."]


def test_agent_failure_is_generic_500(trace_store, caplog) -> None:
    app.dependency_overrides[get_agent] = lambda: _StubAgent(trace_store, fail=True)
    client = TestClient(app)

    response = client.post("/api/document", json={"prompt": "Summarize"})

    assert response.status_code == 500
    assert response.json() == {"error": "An error occurred processing the document"}
    assert "provider unavailable" in caplog.text


def test_unconfigured_model_is_generic_500(trace_store) -> None:
    app.dependency_overrides[get_agent] = lambda: None
    client = TestClient(app)

    response = client.post("/api/document", json={"prompt": "Summarize"})

    assert response.status_code == 500
    assert response.json() == {"error": "An error occurred processing the document"}


def test_trace_and_metrics_endpoints(trace_store) -> None:
    app.dependency_overrides[get_agent] = lambda: _StubAgent(trace_store)
    client = TestClient(app)

    client.post("/api/document", json={"prompt": "Summarize"})
    (record,) = trace_store.list_recent()

    trace_resp = client.get(f"/traces/{record.trace_id}")
    assert trace_resp.status_code == 200
    assert trace_resp.json()["response"] == "The report covers encryption."

    assert client.get("/traces/unknown").status_code == 404

    metrics = client.get("/metrics").json()
    assert metrics["total_requests"] == 1
    assert metrics["total_input_tokens"] == 12

    health = client.get("/health").json()
    assert health["status"] == "ok"
    assert health["trace_count"] == 1
