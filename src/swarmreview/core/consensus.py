"""Weighted-consensus aggregation and report generation."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..models.agent import AgentVerdict, Vote
from ..models.review import AgentReport, ReviewResult, Verdict, format_percent

CONSENSUS_THRESHOLD = 0.6
NO_SIGNAL_SCORE = 0.5
MAX_SUMMARY_ISSUES = 3
NO_ISSUES_SUMMARY = "No significant issues found"


def calculate_score(verdicts: list[AgentVerdict]) -> float:
    """Confidence-weighted approval ratio.

    A swarm that carries no confidence at all scores 0.5, just under the
    threshold.
    """
    approval_weight = sum(v.confidence for v in verdicts if v.vote == Vote.ACCEPT)
    total_weight = sum(v.confidence for v in verdicts)
    if total_weight <= 0:
        return NO_SIGNAL_SCORE
    return approval_weight / total_weight


def calculate_verdict(score: float, threshold: float = CONSENSUS_THRESHOLD) -> Verdict:
    return Verdict.APPROVED if score >= threshold else Verdict.REJECTED


def collect_issues(verdicts: list[AgentVerdict]) -> list[str]:
    """Union of all agents' issues in first-seen order."""
    seen: set[str] = set()
    result: list[str] = []
    for verdict in verdicts:
        for issue in verdict.issues:
            if issue not in seen:
                seen.add(issue)
                result.append(issue)
    return result


def summarize_issues(issues: list[str]) -> str:
    if not issues:
        return NO_ISSUES_SUMMARY
    shown = ", ".join(issues[:MAX_SUMMARY_ISSUES])
    more = "..." if len(issues) > MAX_SUMMARY_ISSUES else ""
    return f"Issues: {shown}{more}"


def build_agent_report(verdict: AgentVerdict) -> AgentReport:
    return AgentReport(
        agent=f"#{verdict.agent_id}",
        model=verdict.model,
        vote=verdict.vote.value,
        confidence=f"{verdict.confidence}%",
        issues=verdict.issues,
    )


def aggregate(verdicts: list[AgentVerdict]) -> ReviewResult:
    """Reduce a swarm's verdicts to one ReviewResult."""
    score = calculate_score(verdicts)
    approvals = sum(1 for v in verdicts if v.vote == Vote.ACCEPT)

    return ReviewResult(
        verdict=calculate_verdict(score),
        score=score,
        threshold=CONSENSUS_THRESHOLD,
        summary=summarize_issues(collect_issues(verdicts)),
        agents=tuple(build_agent_report(v) for v in verdicts),
        verdicts=tuple(verdicts),
        approvals=approvals,
        rejections=len(verdicts) - approvals,
    )


def generate_consensus_report(
    result: ReviewResult,
    task: str = "",
    duration_seconds: Optional[float] = None,
    provider: str = "",
) -> str:
    """Render a markdown report for one review."""
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    verdict_label = {"APPROVED": "PASS", "REJECTED": "FAIL"}

    lines: list[str] = []
    lines.append("# Swarm Consensus Report")
    lines.append("")
    if task:
        lines.append(f"**Task:** {task}")
    lines.append(f"**Date:** {timestamp}")
    lines.append(
        f"**Verdict:** {verdict_label.get(result.verdict.value, '?')} ({result.verdict.value})"
    )
    lines.append(
        f"**Weighted Score:** {format_percent(result.score, places=1)} "
        f"(threshold {format_percent(result.threshold)})"
    )
    lines.append(f"**Simple Vote:** {result.approvals} ACCEPT vs {result.rejections} REJECT")
    if provider:
        lines.append(f"**Provider:** {provider}")
    if duration_seconds is not None:
        lines.append(f"**Duration:** {round(duration_seconds, 1)}s")
    lines.append("")

    lines.append("## Summary")
    lines.append("")
    lines.append(result.summary)
    lines.append("")

    lines.append("## Agent Votes")
    lines.append("")
    lines.append("| Agent | Model | Vote | Confidence | Issues | Reason |")
    lines.append("|-------|-------|------|------------|--------|--------|")
    for verdict, report in zip(result.verdicts, result.agents):
        issues = "; ".join(report.issues) or "-"
        reason = verdict.reason or "-"
        lines.append(
            f"| {report.agent} | {report.model} | {report.vote} | "
            f"{report.confidence} | {issues} | {reason} |"
        )
    lines.append("")
    lines.append("---")
    lines.append(f"*Generated by Swarm Review at {timestamp}*")

    return "\n".join(lines)
