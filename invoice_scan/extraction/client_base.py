from abc import ABC, abstractmethod


class BaseVisionClient(ABC):
    """Contract for provider-specific vision AI clients."""

    @abstractmethod
    def create_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        image_bytes: bytes,
        mime_type: str,
    ) -> str:
        """Send the prompt and image, return the provider response as plain text.

        Raises:
            ExtractionTimeoutError: if the provider does not answer in time.
            ExtractionUpstreamError: on any other provider failure.
        """
