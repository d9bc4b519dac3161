"""
Planner integration: prompt construction and LLM clients.
"""

from .client import AnthropicPlanner, Planner
from .prompt import RESPONSE_CONTRACT, build_prompt

__all__ = [
    "AnthropicPlanner",
    "Planner",
    "RESPONSE_CONTRACT",
    "build_prompt",
]
