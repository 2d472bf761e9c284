"""Abstract interface for text-generation backends."""

from __future__ import annotations

from abc import ABC, abstractmethod


class GenerationProvider(ABC):
    """Provider interface for report generation."""

    name: str = "base"

    @abstractmethod
    async def complete(
        self,
        system: str,
        messages: list[dict[str, str]],
        max_tokens: int,
    ) -> str:
        """Return generated text for role-tagged messages.

        Args:
            system: System instructions
            messages: ``{"role": ..., "content": ...}`` messages, oldest first
            max_tokens: Output token budget

        Raises:
            ProviderError: On non-success status, transport error or empty output
        """
        raise NotImplementedError
