import base64

import httpx
import openai

from invoice_scan.extraction.client_base import BaseVisionClient
from invoice_scan.extraction.exceptions import (
    ExtractionResponseError,
    ExtractionTimeoutError,
    ExtractionUpstreamError,
)


class OpenAIVisionClientAdapter(BaseVisionClient):
    """Vision client adapter built on the OpenAI-compatible chat API."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
        max_retries: int = 0,
    ) -> None:
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
            max_retries=max_retries,
        )

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
        messages: list[dict[str, object]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append(
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": user_prompt},
                    {
                        "type": "image_url",
                        "image_url": {"url": _data_url(image_bytes, mime_type)},
                    },
                ],
            }
        )

        try:
            response = self._client.chat.completions.create(
                model=model,
                temperature=temperature,
                response_format={"type": "json_object"},
                messages=messages,  # type: ignore[arg-type]
            )
        except (openai.APITimeoutError, httpx.TimeoutException) as exc:
            raise ExtractionTimeoutError(f"AI provider timeout: {exc}") from exc
        except (openai.APIConnectionError, httpx.ConnectError) as exc:
            raise ExtractionUpstreamError(f"AI provider network error: {exc}") from exc
        except openai.APIError as exc:
            raise ExtractionUpstreamError(f"AI provider API error: {exc}") from exc

        if not response.choices:
            raise ExtractionResponseError("AI returned no choices")
        content = response.choices[0].message.content
        if not content:
            raise ExtractionResponseError("AI returned empty response")
        return content


def _data_url(image_bytes: bytes, mime_type: str) -> str:
    encoded = base64.b64encode(image_bytes).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"
