import json

import pytest
from pydantic import BaseModel, Field, ValidationError

from doc_agent.agent.registry import ToolRegistry, ToolSpec


class EchoInput(BaseModel):
    value: int = Field(ge=1)


def test_tool_registry_validation() -> None:
    registry = ToolRegistry()

    def _handler(data: EchoInput) -> dict[str, int]:
        return {"value": data.value}

    registry.register(
        ToolSpec(
            name="echo",
            description="echo positive int",
            args_schema=EchoInput,
            handler=_handler,
        )
    )

    assert registry.execute("echo", {"value": 3}) == {"value": 3}

    with pytest.raises(ValidationError):
        registry.execute("echo", {"value": 0})


def test_duplicate_tool_registration_rejected() -> None:
    registry = ToolRegistry()

    def _handler(data: EchoInput) -> dict[str, int]:
        return {"value": data.value}

    spec = ToolSpec(
        name="echo",
        description="echo positive int",
        args_schema=EchoInput,
        handler=_handler,
    )

    registry.register(spec)
    with pytest.raises(ValueError):
        registry.register(spec)


def test_unknown_tool_raises() -> None:
    with pytest.raises(KeyError):
        ToolRegistry().execute("missing", {})


def test_handler_exception_becomes_error_result() -> None:
    registry = ToolRegistry()

    def _handler(data: EchoInput) -> dict[str, int]:
        raise OSError(f"cannot handle {data.value}")

    registry.register(
        ToolSpec(
            name="boom",
            description="always fails",
            args_schema=EchoInput,
            handler=_handler,
            error_context=["value"],
        )
    )

    assert registry.execute("boom", {"value": 2}) == {"error": "cannot handle 2", "value": 2}


def test_langchain_tools_return_json_text() -> None:
    registry = ToolRegistry()

    def _handler(data: EchoInput) -> dict[str, int]:
        return {"doubled": data.value * 2}

    registry.register(
        ToolSpec(
            name="double",
            description="double a positive int",
            args_schema=EchoInput,
            handler=_handler,
        )
    )

    (tool,) = registry.as_langchain_tools()

    assert tool.name == "double"
    assert json.loads(tool.invoke({"value": 4})) == {"doubled": 8}
