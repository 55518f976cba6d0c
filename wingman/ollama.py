from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import httpx

from wingman.errors import BackendUnreachable, EmptyResponse, UnsupportedOperation
from wingman.types import DEFAULT_OLLAMA_URL, Attachment
from wingman.utils import setup_logging, to_base64

logger = setup_logging("wingman.ollama")


class OllamaBackend:
    """Minimal async Ollama client using the local HTTP API.

    Uses POST /api/generate (non-streaming) and GET /api/tags for the
    installed-model list. Images travel in the ``images`` field; audio is
    not accepted by the generate endpoint.
    """

    name = "ollama"

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        temperature: float = 0.7,
        top_p: float = 0.9,
        timeout_seconds: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or DEFAULT_OLLAMA_URL).rstrip("/")
        self.model = model
        self.temperature = temperature
        self.top_p = top_p
        # None disables the httpx default; callers impose their own deadline.
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport)

    def supports(self, attachments: Sequence[Attachment]) -> bool:
        return all(a.kind == "image" for a in attachments)

    def build_payload(self, prompt: str, attachments: Sequence[Attachment] = (), *, model: Optional[str] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": model or self.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": self.temperature,
                "top_p": self.top_p,
            },
        }
        if attachments:
            payload["images"] = [to_base64(a.data) for a in attachments]
        return payload

    async def generate(
        self,
        prompt: str,
        attachments: Sequence[Attachment] = (),
        *,
        model: Optional[str] = None,
    ) -> str:
        if not self.supports(attachments):
            kinds = sorted({a.kind for a in attachments if a.kind != "image"})
            raise UnsupportedOperation(
                f"{', '.join(kinds)} attachments are not supported by the local backend",
                backend=self.name,
            )

        url = f"{self.base_url}/api/generate"
        payload = self.build_payload(prompt, attachments, model=model)

        async with self._client() as client:
            try:
                r = await client.post(url, json=payload)
                r.raise_for_status()
                data = r.json()
            except httpx.HTTPStatusError as e:
                logger.error(f"Ollama API error: {e.response.status_code} {e.response.text}")
                raise BackendUnreachable(
                    f"Ollama API error {e.response.status_code} from {self.base_url}: {e.response.text}",
                    backend=self.name,
                ) from e
            except (httpx.HTTPError, ValueError) as e:
                logger.error(f"Error calling Ollama: {e}")
                raise BackendUnreachable(
                    f"Ollama request failed: {e}. Make sure Ollama is running on {self.base_url}",
                    backend=self.name,
                ) from e

        text = data.get("response") if isinstance(data, dict) else None
        if not isinstance(text, str) or not text.strip():
            logger.error(f"Ollama returned no usable text: {data!r}")
            raise EmptyResponse(f"Ollama model {payload['model']!r} returned an empty response", backend=self.name)
        return text

    async def list_models(self) -> List[str]:
        """Names of installed models; empty when the server cannot be reached."""
        try:
            async with self._client() as client:
                r = await client.get(f"{self.base_url}/api/tags")
                r.raise_for_status()
                data = r.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error fetching Ollama models from {self.base_url}: {e}")
            return []

        models = data.get("models") if isinstance(data, dict) else None
        if not isinstance(models, list):
            logger.error(f"Unexpected /api/tags payload from {self.base_url}: {data!r}")
            return []

        return [m["name"] for m in models if isinstance(m, dict) and isinstance(m.get("name"), str) and m["name"]]

    async def is_available(self) -> bool:
        try:
            async with self._client() as client:
                r = await client.get(f"{self.base_url}/api/tags")
            return r.is_success
        except httpx.HTTPError:
            return False
