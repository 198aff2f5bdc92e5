"""
Mock generation provider that answers without a model runtime.
Used for testing, development and offline demos.
"""

import re
from typing import Dict, List, Optional

from .base import IGenerationProvider
from ..core.deadline import Deadline, check_deadline
from ..core.errors import GenerationError

QUESTION_MARKER = "- User Question:"
FIELD_PATTERN = re.compile(r"-\s*(Found Product Name|Found Product Description|Found Product Price):\s*(.*)")


class MockGenerator(IGenerationProvider):
    """
    Deterministic stand-in for a chat model.
    Reads the grounding facts out of the last user message and echoes them back.
    """

    def __init__(self, model_name: str = "mock-model"):
        self.model_name = model_name

    def generate(self, messages: List[Dict[str, str]], deadline: Optional[Deadline] = None) -> str:
        check_deadline(deadline, GenerationError, "generation")

        user_messages = [m for m in messages if m.get("role") == "user"]
        if not user_messages:
            raise GenerationError("No user message to answer")

        # Product facts precede the question; anything after the marker is user text
        facts, _, rest = user_messages[-1]["content"].partition(QUESTION_MARKER)
        fields = dict(FIELD_PATTERN.findall(facts))
        question = rest.split("\n", 1)[0].strip()

        name = fields.get("Found Product Name")
        if name:
            price = fields.get("Found Product Price", "").strip()
            description = fields.get("Found Product Description", "").strip()
            return f"Great pick! The {name.strip()} costs ${price}: {description}."

        return f"I don't know that. No product in our catalog matches \"{question}\"."
