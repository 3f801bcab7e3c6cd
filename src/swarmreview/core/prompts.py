"""Phase prompts and sampling settings for the agent protocol.

Generate runs hot for diverse first opinions, Correct runs cold to
self-critique, Vote is deterministic.
"""

from __future__ import annotations

from typing import Optional

PHASE_SETTINGS: dict[str, dict] = {
    "generate": {"temperature": 0.8, "max_tokens": 300},
    "correct": {"temperature": 0.1, "max_tokens": 300},
    "vote": {"temperature": 0.0, "max_tokens": 100},
    "quick": {"temperature": 0.1, "max_tokens": 50},
}

# Generate-phase seed is offset by agent id so agents sharing a model diverge.
SEED_BASE = 1000


def build_generate_prompt(
    agent_id: int,
    task: str,
    code: str,
    language: Optional[str] = None,
) -> str:
    target = f"code.{language}" if language else "code"
    return (
        f"You are Agent #{agent_id} reviewing code.\n"
        f"Task: {task}\n"
        f"Target: {target}\n"
        "\n"
        "Code:\n"
        "```\n"
        f"{code}\n"
        "```\n"
        "\n"
        "Analyze for: correctness, error handling, edge cases, code quality.\n"
        "Format:\n"
        'ISSUES: [list problems or "None"]\n'
        "QUALITY: [1-10]\n"
        "NOTES: [observations]"
    )


def build_correct_prompt(agent_id: int, initial_assessment: str) -> str:
    return (
        f"You are Agent #{agent_id}. Review and CORRECT your assessment:\n"
        f"{initial_assessment}\n"
        "\n"
        "Self-critique:\n"
        "1. Did I miss edge cases?\n"
        "2. Was I too harsh/lenient?\n"
        "3. Did I consider the task requirements fully?\n"
        "4. Are scores justified?\n"
        "\n"
        'CORRECTIONS: [changes or "None needed"]\n'
        "FINAL_ISSUES: [updated comma-separated list]\n"
        "FINAL_QUALITY: [1-10]"
    )


def build_vote_prompt(agent_id: int, corrected_assessment: str, task: str) -> str:
    return (
        f"You are Agent #{agent_id}. Cast your FINAL VOTE based on:\n"
        f"{corrected_assessment}\n"
        "\n"
        f"Task: {task}\n"
        "\n"
        "You must respond in EXACTLY this format:\n"
        "VOTE: ACCEPT or REJECT\n"
        "CONFIDENCE: [0-100]%\n"
        "REASON: [one sentence]"
    )


def build_quick_prompt(task: str, code: str) -> str:
    return (
        "Does this output correctly complete the task?\n"
        f"Task: {task}\n"
        f"Output: {code}\n"
        "\n"
        "Answer YES or NO with a brief reason."
    )
