"""AI drafting aid: turn a few keywords into a formal description and cause.

One Messages API round trip with a single forced tool, so the reply is
constrained to exactly two string fields.
"""

import logging
from dataclasses import dataclass

from anthropic import AsyncAnthropic

from firereport.core.anthropic import get_client, get_model
from firereport.report.errors import GenerationError

logger = logging.getLogger(__name__)

MAX_RESPONSE_TOKENS = 1024

TOOL_NAME = "record_incident_narrative"

NARRATIVE_TOOL = {
    "name": TOOL_NAME,
    "description": "Record the drafted narrative for an official fire incident report.",
    "input_schema": {
        "type": "object",
        "properties": {
            "description": {
                "type": "string",
                "description": "A formal 2-3 sentence description of the incident.",
            },
            "cause": {
                "type": "string",
                "description": "A formal 1-2 sentence probable cause based on the keywords.",
            },
        },
        "required": ["description", "cause"],
    },
}


def build_prompt(keywords: str) -> str:
    """Build the user prompt for a keyword list."""
    return (
        "Based on these keywords, generate a professional fire incident description "
        f'and a probable cause for an official report: "{keywords}"'
    )


@dataclass(frozen=True)
class NarrativeResult:
    """Generated narrative text."""

    description: str
    cause: str


class NarrativeAid:
    """Client for the narrative drafting call.

    The Anthropic client is injected so tests (and the controller) never
    reach for ambient globals; it defaults to the shared client.
    """

    def __init__(self, client: AsyncAnthropic | None = None, model: str | None = None) -> None:
        self._client = client
        self.model = model or get_model()

    @property
    def client(self) -> AsyncAnthropic:
        if self._client is None:
            self._client = get_client()
        return self._client

    async def generate(self, keywords: str) -> NarrativeResult:
        """Generate a description and probable cause from keywords.

        Raises:
            ValueError: If keywords is empty
            GenerationError: If the call fails or the reply is unusable
        """
        keywords = keywords.strip()
        if not keywords:
            raise ValueError("Keywords are required")

        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=MAX_RESPONSE_TOKENS,
                messages=[{"role": "user", "content": build_prompt(keywords)}],
                tools=[NARRATIVE_TOOL],
                tool_choice={"type": "tool", "name": TOOL_NAME},
            )
        except Exception as exc:
            logger.error("AI generation failed: %s: %s", type(exc).__name__, exc)
            raise GenerationError() from exc

        return _parse_response(response)


def _parse_response(response) -> NarrativeResult:
    """Pull the two narrative fields out of the tool-use block."""
    payload = None
    for block in getattr(response, "content", None) or []:
        if getattr(block, "type", None) == "tool_use" and block.name == TOOL_NAME:
            payload = block.input
            break

    if not isinstance(payload, dict):
        logger.error("AI generation failed: reply had no %s tool call", TOOL_NAME)
        raise GenerationError()

    description = payload.get("description")
    cause = payload.get("cause")
    if not isinstance(description, str) or not isinstance(cause, str):
        logger.error("AI generation failed: reply fields missing or not text")
        raise GenerationError()
    if not description.strip() or not cause.strip():
        logger.error("AI generation failed: reply was empty")
        raise GenerationError()

    logger.info("Generated narrative (%d + %d chars)", len(description), len(cause))
    return NarrativeResult(description=description.strip(), cause=cause.strip())
