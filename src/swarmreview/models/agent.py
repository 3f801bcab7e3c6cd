"""Agent data models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Vote(str, Enum):
    ACCEPT = "ACCEPT"
    REJECT = "REJECT"


class AgentConfig(BaseModel):
    agent_index: int = Field(ge=0)
    model: str

    @property
    def short_model(self) -> str:
        """Last path segment of the model identifier."""
        return self.model.rsplit("/", 1)[-1] or self.model


class AgentVerdict(BaseModel):
    """One agent's final, immutable judgment."""

    model_config = ConfigDict(frozen=True)

    agent_id: int
    model: str
    vote: Vote
    confidence: int = Field(ge=0, le=100)
    issues: tuple[str, ...] = ()
    reason: str = ""
