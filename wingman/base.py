from __future__ import annotations

from typing import Protocol, Sequence

from wingman.types import Attachment


class GenerationBackend(Protocol):
    name: str
    model: str

    def supports(self, attachments: Sequence[Attachment]) -> bool:
        ...

    async def generate(self, prompt: str, attachments: Sequence[Attachment] = ()) -> str:
        ...
