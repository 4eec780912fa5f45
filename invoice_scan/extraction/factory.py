from typing import ClassVar

from invoice_scan.config.settings import Settings
from invoice_scan.extraction.base import BaseExtractor
from invoice_scan.extraction.client_base import BaseVisionClient
from invoice_scan.extraction.example_client_adapter import ExampleVisionClientAdapter
from invoice_scan.extraction.extractor import InvoiceExtractor
from invoice_scan.extraction.openai_client_adapter import OpenAIVisionClientAdapter


class ExtractionClientFactory:
    """Creates the configured invoice extractor."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "gemini": "https://generativelanguage.googleapis.com/v1beta/openai/",
        "openrouter": "https://openrouter.ai/api/v1",
        "groq": "https://api.groq.com/openai/v1",
        "ollama": "http://localhost:11434/v1",
    }

    DEFAULT_MODELS: ClassVar[dict[str, str]] = {
        "example": "example",
        "openai": "gpt-4o-mini",
        "gemini": "gemini-2.5-flash",
        "openrouter": "google/gemini-2.5-flash",
        "groq": "meta-llama/llama-4-scout-17b-16e-instruct",
        "ollama": "llama3.2-vision",
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseExtractor:
        """Create a configured extractor from application settings."""
        provider = settings.extraction_provider.lower()
        return InvoiceExtractor(
            client=cls._create_client(provider, settings),
            model=cls._resolve_model_name(provider, settings),
            temperature=settings.extraction_temperature,
            max_image_bytes=settings.max_upload_size_bytes,
        )

    @classmethod
    def _create_client(cls, provider: str, settings: Settings) -> BaseVisionClient:
        if provider == "example":
            return ExampleVisionClientAdapter()
        return OpenAIVisionClientAdapter(
            api_key=settings.extraction_api_key,
            timeout_seconds=settings.extraction_timeout_seconds,
            base_url=cls._resolve_base_url(provider, settings),
            max_retries=settings.extraction_max_retries,
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        if provider == "openai":
            return None
        if provider == "openai_compatible":
            url = settings.extraction_base_url.strip()
            if not url:
                raise ValueError(
                    "extraction_base_url is required for "
                    "extraction_provider=openai_compatible"
                )
            return url
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return default_base_url
        supported = [
            "example",
            "openai",
            "openai_compatible",
            *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS),
        ]
        raise ValueError(
            f"Unknown extraction provider '{provider}'. Choose from: {supported}"
        )

    @classmethod
    def _resolve_model_name(cls, provider: str, settings: Settings) -> str:
        model = settings.extraction_model_name.strip()
        if model:
            return model
        default_model = cls.DEFAULT_MODELS.get(provider)
        if default_model is None:
            raise ValueError(
                f"extraction_model_name is required for extraction_provider={provider}"
            )
        return default_model
