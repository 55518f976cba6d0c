from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

# Opaque key/value data supplied by the capture layer.
ProblemInfo = Mapping[str, Any]

DEFAULT_OLLAMA_URL = "http://localhost:11434"
DEFAULT_OLLAMA_MODEL = "gemma:latest"
DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"


class ProviderMode(str, enum.Enum):
    CLOUD = "cloud"
    LOCAL = "local"


@dataclass(frozen=True)
class Attachment:
    data: bytes
    mime_type: str

    @property
    def kind(self) -> str:
        """Top-level mime type, e.g. ``image`` or ``audio``."""
        return self.mime_type.split("/", 1)[0].lower()


@dataclass(frozen=True)
class GenerationRequest:
    prompt: str
    attachments: List[Attachment] = field(default_factory=list)

    @property
    def modality(self) -> Optional[str]:
        kinds = {a.kind for a in self.attachments}
        if not kinds:
            return None
        if len(kinds) > 1:
            return "mixed"
        return kinds.pop()


@dataclass(frozen=True)
class GenerationResult:
    text: str
    timestamp: int

    def to_dict(self) -> Dict[str, Union[str, int]]:
        return {"text": self.text, "timestamp": self.timestamp}


@dataclass(frozen=True)
class ConnectionStatus:
    ok: bool
    error: Optional[str] = None


@dataclass
class ProviderConfig:
    mode: ProviderMode = ProviderMode.CLOUD
    api_key: Optional[str] = None
    local_model: str = DEFAULT_OLLAMA_MODEL
    local_endpoint: str = DEFAULT_OLLAMA_URL
    cloud_model: str = DEFAULT_GEMINI_MODEL
    temperature: float = 0.7
    top_p: float = 0.9
    system_prompt: Optional[str] = None
