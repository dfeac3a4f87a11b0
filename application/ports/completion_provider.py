"""
Text Completion Provider Interface (Port).

Defines the abstract interface for calling a language model. Concrete
implementations (vendor SDKs, a hosted relay) live outside this service;
tests use tests.fakes.FakeCompletionProvider.
"""

from typing import Protocol


class CompletionProvider(Protocol):
    """Abstract interface for a single-turn text completion."""

    def complete(self, system_prompt: str, user_text: str) -> str:
        """
        Complete a prompt and return the raw model text.

        Args:
            system_prompt: Instructions for the model
            user_text: The user's input

        Returns:
            Raw model output, which may or may not contain JSON

        Raises:
            ProviderError: On authentication, quota, rate-limit or network failures
        """
        ...
