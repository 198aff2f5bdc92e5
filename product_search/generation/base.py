"""
Generation port interface.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from ..core.deadline import Deadline


class IGenerationProvider(ABC):
    """Abstract interface for chat-completion providers."""

    model_name: str

    @abstractmethod
    def generate(self, messages: List[Dict[str, str]], deadline: Optional[Deadline] = None) -> str:
        """
        Generate a reply for a role-tagged message sequence.

        Args:
            messages: Dicts with 'role' ("system" | "user" | "assistant") and 'content'
            deadline: Optional per-query deadline

        Returns:
            Generated text. Raises GenerationError on transport/model failure
            or when the model returns no content.
        """
        pass
