from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Sequence

import httpx

from wingman.errors import BackendUnreachable, EmptyResponse
from wingman.types import Attachment
from wingman.utils import setup_logging

logger = setup_logging("wingman.gemini")


@dataclass
class GeminiBackend:
    """Thin async wrapper around google-genai for the gateway."""

    client: "object"  # genai.Client
    model: str
    temperature: float = 0.7
    top_p: float = 0.9

    name = "gemini"

    def supports(self, attachments: Sequence[Attachment]) -> bool:
        return all(a.kind in ("image", "audio") for a in attachments)

    def build_contents(self, prompt: str, attachments: Sequence[Attachment] = ()) -> List[Any]:
        # Local import so Ollama-only setups don't choke at import-time.
        from google.genai import types

        contents: List[Any] = [prompt]
        for attachment in attachments:
            contents.append(types.Part.from_bytes(data=attachment.data, mime_type=attachment.mime_type))
        return contents

    async def generate(self, prompt: str, attachments: Sequence[Attachment] = ()) -> str:
        from google.genai import errors, types

        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=self.build_contents(prompt, attachments),
                config=types.GenerateContentConfig(
                    temperature=self.temperature,
                    top_p=self.top_p,
                ),
            )
        except errors.APIError as e:
            logger.error(f"Gemini API error: {e}")
            raise BackendUnreachable(f"Gemini API error {e.code}: {e.message or e}", backend=self.name) from e
        except (httpx.HTTPError, OSError) as e:
            logger.error(f"Error calling Gemini: {e}")
            raise BackendUnreachable(f"Failed to reach Gemini: {e}", backend=self.name) from e

        text = (response.text or "")
        if not text.strip():
            raise EmptyResponse(f"Gemini model {self.model!r} returned an empty response", backend=self.name)
        return text


def create_gemini_backend(api_key: str, *, model: str, temperature: float = 0.7, top_p: float = 0.9) -> GeminiBackend:
    from google import genai

    return GeminiBackend(client=genai.Client(api_key=api_key), model=model, temperature=temperature, top_p=top_p)
