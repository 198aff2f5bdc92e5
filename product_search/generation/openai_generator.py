"""
OpenAI chat-completion provider for hosted deployments.
"""

from typing import Dict, List, Optional

import openai

from .base import IGenerationProvider
from ..core.deadline import Deadline, check_deadline, timeout_for
from ..core.errors import GenerationError


class OpenAIGenerator(IGenerationProvider):
    """Chat completions from an OpenAI-compatible endpoint."""

    def __init__(self, model_name: str = "gpt-4o-mini", api_key: Optional[str] = None,
                 base_url: Optional[str] = None, temperature: float = 0.7, timeout: float = 60.0):
        self.model_name = model_name
        self.temperature = temperature
        self.timeout = timeout
        self.client = openai.OpenAI(api_key=api_key, base_url=base_url, timeout=timeout)

    def generate(self, messages: List[Dict[str, str]], deadline: Optional[Deadline] = None) -> str:
        check_deadline(deadline, GenerationError, "generation")
        try:
            response = self.client.with_options(timeout=timeout_for(deadline, self.timeout)).chat.completions.create(
                model=self.model_name,
                messages=messages,
                temperature=self.temperature,
            )
        except openai.OpenAIError as e:
            raise GenerationError(f"OpenAI chat request failed: {e}", cause=e)

        if not response.choices:
            raise GenerationError(f"OpenAI model {self.model_name} returned no choices")

        content = (response.choices[0].message.content or "").strip()
        if not content:
            raise GenerationError(f"OpenAI model {self.model_name} returned an empty response")
        return content
