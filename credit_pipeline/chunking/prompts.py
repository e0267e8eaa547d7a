"""Prompt templates for chunk analysis and merging. Treated as opaque text by the pipeline."""
from __future__ import annotations

from credit_pipeline.llm.types import LLMMessage

SYSTEM_PROMPT = (
    "You are an expert credit analyst. Return ONLY valid JSON without markdown, "
    "code fences or commentary. If the report does not state a credit score, "
    "set overview.score to null. Do not invent data."
)

ANALYSIS_INSTRUCTIONS = """Analyze the credit report text below and answer with one JSON object of this shape:
{
  "overview": {"score": <number or null>, "summary": "...", "positiveFactors": ["..."], "negativeFactors": ["..."]},
  "disputes": {"items": [{"bureau": "...", "accountName": "...", "accountNumber": "...", "issueType": "...", "recommendedAction": "..."}]},
  "creditHacks": {"recommendations": [{"title": "...", "description": "...", "impact": "high|medium|low", "timeframe": "...", "steps": ["..."]}]},
  "creditCards": {"recommendations": [{"name": "...", "issuer": "...", "annualFee": "...", "apr": "...", "rewards": "...", "approvalLikelihood": "high|medium|low", "bestFor": "..."}]},
  "sideHustles": {"recommendations": [{"title": "...", "description": "...", "potentialEarnings": "...", "startupCost": "...", "difficulty": "easy|medium|hard", "timeCommitment": "...", "skills": ["..."]}]}
}"""


def analysis_messages(text: str, *, index: int = 0, count: int = 1) -> list[LLMMessage]:
    """Messages for analyzing one chunk (or the whole document when count == 1)."""
    if count <= 1:
        body = f"{ANALYSIS_INSTRUCTIONS}\n\nText to analyze:\n{text}"
    else:
        body = (
            f"{ANALYSIS_INSTRUCTIONS}\n\n"
            f"This is chunk {index + 1} of {count} from a larger report. "
            "Extract what this chunk contains; other chunks are analyzed separately.\n\n"
            f"Text to analyze (chunk {index + 1}/{count}):\n{text}"
        )
    return [
        LLMMessage(role="system", content=SYSTEM_PROMPT),
        LLMMessage(role="user", content=body),
    ]


def merge_messages(partials: list[str]) -> list[LLMMessage]:
    """Messages asking the model to consolidate chunk analyses into one result."""
    labeled = "\n\n".join(
        f"--- CHUNK {i + 1} ANALYSIS ---\n{partial}" for i, partial in enumerate(partials)
    )
    body = (
        f"A credit report was analyzed in {len(partials)} separate chunks. "
        "Merge the analyses below into a single JSON object with the same shape, "
        "removing duplicated findings and keeping the most specific values.\n\n"
        f"{labeled}"
    )
    return [
        LLMMessage(role="system", content=SYSTEM_PROMPT),
        LLMMessage(role="user", content=body),
    ]
