"""Review request/result data models."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from .agent import AgentVerdict


class Verdict(str, Enum):
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class ReviewRequest(BaseModel):
    code: str
    task: str
    language: Optional[str] = None

    @field_validator("code", "task")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("must not be empty")
        return value


class AgentReport(BaseModel):
    """Per-agent row of the review output, unaggregated."""

    model_config = ConfigDict(frozen=True)

    agent: str
    model: str
    vote: str
    confidence: str
    issues: tuple[str, ...] = ()


class ReviewResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    verdict: Verdict
    score: float
    threshold: float
    summary: str
    agents: tuple[AgentReport, ...] = ()
    verdicts: tuple[AgentVerdict, ...] = ()
    approvals: int = 0
    rejections: int = 0

    def to_response(self) -> dict:
        """Serialize to the public review response shape."""
        return {
            "verdict": self.verdict.value,
            "score": format_percent(self.score, places=1),
            "threshold": format_percent(self.threshold),
            "summary": self.summary,
            "agents": [a.model_dump(mode="json") for a in self.agents],
        }


class QuickReviewResult(BaseModel):
    approved: bool
    reason: str = ""


def format_percent(fraction: float, places: Optional[int] = None) -> str:
    """Render 0.6 as '60%', or with ``places`` decimals as '60.0%'."""
    value = fraction * 100
    if places is None:
        return f"{value:g}%"
    return f"{value:.{places}f}%"
