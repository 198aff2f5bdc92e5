"""
Chat generation providers: role-tagged messages in, generated text out.
"""

from .base import IGenerationProvider
from .mock_generator import MockGenerator

__all__ = ['IGenerationProvider', 'MockGenerator']
