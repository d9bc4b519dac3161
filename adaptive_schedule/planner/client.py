"""
Planner clients.

A planner is anything with `generate(prompt) -> str`. Its output is untrusted
and always goes through the candidate parser and the rules before commit.
Transport and model errors are not caught, wrapped, or retried here.
"""

import logging
from typing import Protocol

import anthropic

from adaptive_schedule import config
from adaptive_schedule.errors import PlannerConfigError

logger = logging.getLogger(__name__)


class Planner(Protocol):
    def generate(self, prompt: str) -> str: ...


class AnthropicPlanner:
    """Planner backed by the Anthropic messages API."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
        client: anthropic.Anthropic | None = None,
    ):
        self.model = model or config.PLANNER_MODEL
        self.max_tokens = max_tokens or config.PLANNER_MAX_TOKENS

        if client is None:
            api_key = api_key or config.ANTHROPIC_API_KEY
            if not api_key:
                raise PlannerConfigError("ANTHROPIC_API_KEY is not set")
            client = anthropic.Anthropic(api_key=api_key)
        self.client = client

    def generate(self, prompt: str) -> str:
        logger.info(f"Requesting adaptive schedule from {self.model} (prompt_length={len(prompt)})")
        response = self.client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            messages=[{"role": "user", "content": prompt}],
        )
        text = "".join(block.text for block in response.content if block.type == "text")
        logger.debug(f"Planner returned {len(text)} characters")
        return text
