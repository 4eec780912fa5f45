"""AI-powered invoice image extractor."""

import json
from pathlib import Path

from invoice_scan.extraction.base import BaseExtractor
from invoice_scan.extraction.client_base import BaseVisionClient
from invoice_scan.extraction.exceptions import ExtractionInputError, ExtractionResponseError
from invoice_scan.extraction.models import ExtractedData
from invoice_scan.extraction.prompt_loader import load_prompt_template
from invoice_scan.extraction.validator import validate_and_build
from invoice_scan.logging.logger import Log

DEFAULT_MAX_IMAGE_BYTES = 10 * 1024 * 1024
DEFAULT_MIME_TYPE = "image/jpeg"


class InvoiceExtractor(BaseExtractor):
    """Extracts structured invoice fields from an image using a vision AI provider."""

    def __init__(
        self,
        *,
        client: BaseVisionClient,
        model: str,
        temperature: float = 0.0,
        max_image_bytes: int = DEFAULT_MAX_IMAGE_BYTES,
        prompt_template_path: Path | None = None,
        system_prompt: str = "",
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = max(0.0, min(0.2, temperature))
        self._max_image_bytes = max_image_bytes
        self._system_prompt = system_prompt
        self._prompt = load_prompt_template(prompt_template_path)

    def extract(self, image_bytes: bytes, mime_type: str) -> ExtractedData:
        mime_type = self._check_input(image_bytes, mime_type)

        raw_response = self._client.create_completion(
            model=self._model,
            temperature=self._temperature,
            system_prompt=self._system_prompt,
            user_prompt=self._prompt,
            image_bytes=image_bytes,
            mime_type=mime_type,
        )
        Log.debug(f"AI raw response:\n{raw_response}")

        result = validate_and_build(self._parse_json(raw_response))
        Log.info(
            "Extraction complete",
            fields=len(result.key_value_pairs),
            table_rows=len(result.table.rows) if result.table else 0,
            model=self._model,
        )
        return result

    def _check_input(self, image_bytes: bytes, mime_type: str) -> str:
        if not image_bytes:
            raise ExtractionInputError("Empty image data")
        if len(image_bytes) > self._max_image_bytes:
            raise ExtractionInputError(
                f"Image too large (max {self._max_image_bytes // (1024 * 1024)}MB)"
            )
        mime_type = mime_type or DEFAULT_MIME_TYPE
        if not mime_type.startswith("image/"):
            raise ExtractionInputError(f"Invalid image type: {mime_type}")
        return mime_type

    @staticmethod
    def _parse_json(raw: str) -> dict[str, object]:
        cleaned = raw.strip()
        if cleaned.startswith("```"):
            lines = cleaned.splitlines()
            if lines and lines[0].startswith("```"):
                lines = lines[1:]
            if lines and lines[-1].strip() == "```":
                lines = lines[:-1]
            cleaned = "\n".join(lines)

        try:
            parsed = json.loads(cleaned)
        except json.JSONDecodeError as exc:
            raise ExtractionResponseError(f"Invalid JSON response: {exc}") from exc

        if not isinstance(parsed, dict):
            raise ExtractionResponseError("JSON response must be an object")
        return parsed
