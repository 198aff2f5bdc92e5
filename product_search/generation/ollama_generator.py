"""
Ollama-based generation provider for locally hosted chat models.
"""

import ollama
from datetime import datetime
from typing import Dict, List, Optional

from .base import IGenerationProvider
from ..core.deadline import Deadline, check_deadline, timeout_for
from ..core.errors import GenerationError
from ..util.logging import logger


class OllamaGenerator(IGenerationProvider):
    """
    Generation provider that calls a local Ollama model.
    A client is built per call so the query deadline becomes the HTTP timeout.
    """

    def __init__(self, model_name: str = "llama3.2", host: str = "http://localhost:11434",
                 temperature: float = 0.7, top_p: float = 0.9, timeout: float = 60.0):
        self.model_name = model_name
        self.host = host
        self.temperature = temperature
        self.top_p = top_p
        self.timeout = timeout

    def generate(self, messages: List[Dict[str, str]], deadline: Optional[Deadline] = None) -> str:
        check_deadline(deadline, GenerationError, "generation")

        start_time = datetime.now()
        try:
            client = ollama.Client(host=self.host, timeout=timeout_for(deadline, self.timeout))
            response = client.chat(
                model=self.model_name,
                messages=messages,
                options={
                    'temperature': self.temperature,
                    'top_p': self.top_p
                }
            )
        except ollama.ResponseError as e:
            raise GenerationError(f"Ollama model error: {e}", cause=e)
        except Exception as e:
            raise GenerationError(f"Ollama chat request failed: {e}", cause=e)

        processing_time = int((datetime.now() - start_time).total_seconds() * 1000)

        response_content = (response['message']['content'] or '').strip()
        if not response_content:
            raise GenerationError(f"Ollama model {self.model_name} returned an empty response")

        logger.log_operation("generation.ollama", "success", {
            'model': self.model_name,
            'processing_time_ms': processing_time,
            'response_length': len(response_content)
        })
        return response_content


def check_ollama_health(host: str = "http://localhost:11434") -> bool:
    """Check Ollama service connectivity."""
    try:
        ollama.Client(host=host, timeout=5.0).list()
        return True
    except Exception:
        return False
