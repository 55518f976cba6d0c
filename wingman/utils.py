import base64
import json
import logging
from pathlib import Path
from typing import Any, Mapping, Union

from wingman.types import Attachment

Source = Union[str, Path, bytes, bytearray]

_AUDIO_MIME_TYPES = {
    ".mp3": "audio/mp3",
    ".wav": "audio/wav",
    ".ogg": "audio/ogg",
    ".m4a": "audio/mp4",
    ".webm": "audio/webm",
    ".flac": "audio/flac",
}


def setup_logging(name: str = "wingman") -> logging.Logger:
    """Configure and return a logger instance."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger


def load_attachment(source: Source, mime_type: str) -> Attachment:
    """
    Build an attachment from a file path or raw bytes.

    Args:
        source: Path to the file, or its contents
        mime_type: Mime type sent to the backend

    Returns:
        Attachment holding the raw bytes
    """
    if isinstance(source, (bytes, bytearray)):
        return Attachment(data=bytes(source), mime_type=mime_type)
    return Attachment(data=Path(source).read_bytes(), mime_type=mime_type)


def guess_audio_mime_type(path: Union[str, Path], default: str = "audio/mp3") -> str:
    return _AUDIO_MIME_TYPES.get(Path(path).suffix.lower(), default)


def to_base64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def serialize_problem(problem_info: Mapping[str, Any]) -> str:
    """Deterministic JSON rendering of a problem description for prompts."""
    return json.dumps(problem_info, indent=2, sort_keys=True, ensure_ascii=False, default=str)
