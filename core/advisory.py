"""Remediation advice for detected dependency conflicts."""

import logging
import re

from .errors import LLMProviderError
from .models import AdvisoryResult, ConflictKind, ConflictRecord
from .providers import LLMClient

logger = logging.getLogger(__name__)

MAX_SAMPLED_PROBLEMS = 5
ADVICE_MAX_TOKENS = 250

_STEP_BOUNDARY = re.compile(r"\n\s*\d+\.[ \t]*")

PROMPT_TEMPLATE = """
You are an expert dependency manager for JavaScript/Node.js applications.
Please analyze these dependency conflicts and provide specific advice on how to fix them.

Conflict type: {kind}

Conflict messages:
{problems}

Please provide:
1. A concise explanation of what's causing these conflicts (1-2 sentences)
2. A step-by-step resolution strategy (max 3 steps)
3. A specific code example of how to fix the most critical issue (if applicable)

Keep your response very concise and practical - only provide what would be immediately useful to a developer.
"""

STATIC_ADVICE: dict[ConflictKind, tuple[str, ...]] = {
    ConflictKind.NPM_DEPENDENCY_CONFLICT: (
        "These conflicts may cause unexpected behavior or build failures.",
        "Consider running `{manager} install` to resolve the conflicts.",
    ),
    ConflictKind.INVALID_DEPENDENCIES: (
        "Some dependencies could not be resolved at their specified versions.",
        "Check your package.json for incompatible version ranges.",
    ),
    ConflictKind.PEER_DEPENDENCY_CONFLICT: (
        "Peer dependency requirements could not be satisfied.",
        "You may need to install compatible versions of related packages.",
    ),
    ConflictKind.VERSION_CONFLICT: (
        "Multiple versions of the same package are specified in different dependency sections.",
        "Align the versions to avoid potential runtime issues.",
    ),
    ConflictKind.DUPLICATE_PACKAGES: (
        "Duplicate packages were detected in node_modules.",
        "You might want to run `{manager} {dedupe}` to optimize your dependencies.",
    ),
}

GENERIC_ADVICE = ("Consider resolving these conflicts before committing.",)


def sample_problems(problems: list[str], limit: int = MAX_SAMPLED_PROBLEMS) -> list[str]:
    """Keep the first problems verbatim and summarize the overflow."""
    if len(problems) <= limit:
        return list(problems)
    return list(problems[:limit]) + [f"...and {len(problems) - limit} more similar issues"]


def build_prompt(record: ConflictRecord) -> str:
    return PROMPT_TEMPLATE.format(
        kind=record.kind.value,
        problems="\n".join(sample_problems(list(record.problems))),
    )


def parse_advice(text: str) -> AdvisoryResult:
    """Split a model response into the explanation and numbered steps.

    Everything before the first numbered item is the explanation.
    """
    sections = _STEP_BOUNDARY.split(text)
    steps = tuple(section.strip() for section in sections[1:] if section.strip())
    return AdvisoryResult(explanation=sections[0].strip(), steps=steps)


def static_advice(kind: ConflictKind, manager: str = "npm") -> list[str]:
    """Generic advice for a conflict kind, with the manager's commands filled in."""
    dedupe = "deduplicate" if manager == "yarn" else "dedupe"
    lines = STATIC_ADVICE.get(kind, GENERIC_ADVICE)
    return [line.format(manager=manager, dedupe=dedupe) for line in lines]


class AdvisoryGenerator:
    """Asks a language model to explain a conflict and suggest fixes."""

    def __init__(self, client: LLMClient | None, max_tokens: int = ADVICE_MAX_TOKENS):
        self.client = client
        self.max_tokens = max_tokens

    @property
    def enabled(self) -> bool:
        return self.client is not None

    async def advise(self, record: ConflictRecord) -> AdvisoryResult | None:
        """Analyze a conflict record.

        Args:
            record: Conflict reported by the cascade

        Returns:
            The parsed analysis, or None when no client is configured or
            the model call failed
        """
        if self.client is None:
            return None

        logger.info("Analyzing dependency conflicts...")
        try:
            text = await self.client.generate(build_prompt(record), self.max_tokens)
        except LLMProviderError as e:
            logger.warning("Error analyzing conflicts with LLM: %s", e)
            return None

        return parse_advice(text)
