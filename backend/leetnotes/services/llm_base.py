"""
LeetNotes Backend — Abstract LLM Service Interface
====================================================

What:  Contract for text-generation providers used by NoteService.
How:   Concrete providers (GeminiService) implement generate_text() and
       is_configured(); tests substitute a mock with the same methods.
"""

from abc import ABC, abstractmethod


class LLMService(ABC):
    """
    Abstract interface for prompt → text generation.

    Contract:
        - generate_text() returns the model's text answer, never None
        - provider-specific failures are translated into LLMServiceError
          (upstream failure, 502) or LLMResponseError (unusable answer, 500)
        - a missing API key is reported as ConfigurationError
    """

    @abstractmethod
    async def generate_text(self, prompt: str) -> str:
        """
        Send a prompt and return the generated text.

        Raises:
            ConfigurationError: Provider credentials are not configured.
            LLMServiceError: Transport failure, non-success status, or the
                answer was blocked by safety filters.
            LLMResponseError: The answer has no usable text.
            CircuitBreakerOpenError: Too many recent consecutive failures.
        """
        ...

    @abstractmethod
    def is_configured(self) -> bool:
        """True when credentials are present; does not contact the provider."""
        ...
