"""Configuration models for the document agent."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, Field


class AgentConfig(BaseModel):
    """Configures agent execution bounds and the default workspace root."""

    max_steps: int = Field(default=15, ge=1)
    base_dir: Path = Field(default_factory=Path.cwd)


class ModelSettings(BaseModel):
    """Hosted chat model settings resolved from the environment."""

    api_key: str | None = None
    model: str = "gpt-4o-mini"
    base_url: str | None = None
    temperature: float = Field(default=0.0, ge=0.0, le=2.0)

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    @classmethod
    def from_env(cls) -> "ModelSettings":
        return cls(
            api_key=os.getenv("OPENAI_API_KEY") or None,
            model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
            base_url=os.getenv("OPENAI_BASE_URL") or None,
            temperature=float(os.getenv("OPENAI_TEMPERATURE", "0")),
        )


def load_environment() -> None:
    """Load `.env` and `.env.local` without overriding variables already set."""
    load_dotenv()
    load_dotenv(".env.local")


def agent_config_from_env() -> AgentConfig:
    base_dir = os.getenv("DOC_AGENT_BASE_DIR")
    if base_dir:
        return AgentConfig(base_dir=Path(base_dir).expanduser().resolve())
    return AgentConfig()


def create_chat_model(settings: ModelSettings) -> Any:
    """Build the hosted chat model, or None when no credential is set."""
    if not settings.configured:
        return None

    from langchain_openai import ChatOpenAI

    return ChatOpenAI(
        model=settings.model,
        temperature=settings.temperature,
        api_key=settings.api_key,
        base_url=settings.base_url,
    )
