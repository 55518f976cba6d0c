from __future__ import annotations

from typing import Optional


class GatewayError(RuntimeError):
    """Base error; ``backend`` names the provider that was active."""

    def __init__(self, message: str, *, backend: Optional[str] = None) -> None:
        if backend and not message.lower().startswith(backend.lower()):
            message = f"{backend.capitalize()}: {message}"
        super().__init__(message)
        self.backend = backend


class ConfigurationError(GatewayError):
    pass


class BackendUnreachable(GatewayError):
    pass


class EmptyResponse(GatewayError):
    pass


class UnsupportedOperation(GatewayError):
    pass
