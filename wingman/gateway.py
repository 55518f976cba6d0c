"""
Provider gateway: one "generate an answer" surface over Gemini and Ollama.

The gateway owns the provider mode. Generation calls read the active
backend and model when they are issued, so a switch while a call is in
flight only affects calls issued after it. Beyond that, interleaving
switches with in-flight calls is not coordinated.

Attachment files are read with a blocking ``Path.read_bytes`` on the event
loop. Screenshots and short clips are small enough that this stays brief.
"""
from __future__ import annotations

import base64
import binascii
import time
from dataclasses import replace
from typing import List, Optional, Sequence

from wingman import prompts
from wingman.base import GenerationBackend
from wingman.errors import BackendUnreachable, ConfigurationError, GatewayError, UnsupportedOperation
from wingman.gemini import create_gemini_backend
from wingman.ollama import OllamaBackend
from wingman.types import (
    ConnectionStatus,
    GenerationRequest,
    GenerationResult,
    ProblemInfo,
    ProviderConfig,
    ProviderMode,
)
from wingman.utils import Source, guess_audio_mime_type, load_attachment, setup_logging

logger = setup_logging("wingman.gateway")

IMAGE_MIME_TYPE = "image/png"
DEFAULT_AUDIO_MIME_TYPE = "audio/mp3"


class ProviderGateway:
    """Selects between the cloud and local backends and builds their requests."""

    def __init__(
        self,
        config: ProviderConfig,
        *,
        cloud_backend: Optional[GenerationBackend] = None,
        local_backend: Optional[OllamaBackend] = None,
    ):
        """
        Validate the configuration and build the backends.

        No network traffic happens here; use ``initialize`` to also run the
        local model auto-selection.

        Args:
            config: Provider settings; copied, later switches do not mutate it
            cloud_backend: Pre-built cloud backend (defaults to a Gemini client built from ``config.api_key``)
            local_backend: Pre-built Ollama backend (defaults to one built from ``config``)
        """
        self._config = replace(config)
        mode = ProviderMode(config.mode)

        if mode is ProviderMode.LOCAL:
            if not (config.local_endpoint or "").strip():
                raise ConfigurationError("Local mode requires an endpoint URL", backend="ollama")
            if not (config.local_model or "").strip() and local_backend is None:
                raise ConfigurationError("Local mode requires a model name", backend="ollama")
        elif not (config.api_key or "").strip() and cloud_backend is None:
            raise ConfigurationError("Either provide a Gemini API key or enable Ollama mode")

        self._cloud: Optional[GenerationBackend] = cloud_backend
        if self._cloud is None and (config.api_key or "").strip():
            self._cloud = create_gemini_backend(
                config.api_key,
                model=config.cloud_model,
                temperature=config.temperature,
                top_p=config.top_p,
            )

        self._local = local_backend or OllamaBackend(
            base_url=config.local_endpoint,
            model=config.local_model,
            temperature=config.temperature,
            top_p=config.top_p,
        )
        self._mode = mode
        self._fallback_armed = False
        self._last_timestamp = 0

        if mode is ProviderMode.LOCAL:
            logger.info(f"Using Ollama with model: {self._local.model} at {self._local.base_url}")
        else:
            logger.info(f"Using Google Gemini ({self._cloud.model})")

    @classmethod
    async def initialize(
        cls,
        config: ProviderConfig,
        *,
        cloud_backend: Optional[GenerationBackend] = None,
        local_backend: Optional[OllamaBackend] = None,
    ) -> "ProviderGateway":
        """Construct a gateway and, in local mode, reconcile the configured model with the server."""
        gateway = cls(config, cloud_backend=cloud_backend, local_backend=local_backend)
        if gateway.mode is ProviderMode.LOCAL:
            await gateway._reconcile_local_model()
        return gateway

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def mode(self) -> ProviderMode:
        return self._mode

    @property
    def is_using_local(self) -> bool:
        return self._mode is ProviderMode.LOCAL

    @property
    def current_provider(self) -> str:
        return "ollama" if self.is_using_local else "gemini"

    @property
    def current_model(self) -> Optional[str]:
        if self.is_using_local:
            return self._local.model
        return self._cloud.model if self._cloud is not None else self._config.cloud_model

    @property
    def local_endpoint(self) -> str:
        return self._local.base_url

    async def _reconcile_local_model(self) -> Optional[str]:
        """Keep the configured model if installed, otherwise adopt the first installed one."""
        self._fallback_armed = True
        models = await self._local.list_models()
        if not models:
            logger.warning(f"No Ollama models found at {self._local.base_url}")
            return self._local.model

        if self._local.model not in models:
            logger.info(f"Model {self._local.model!r} is not installed; auto-selected {models[0]!r}")
            self._local.model = models[0]
        return self._local.model

    async def switch_to_local(self, model_name: Optional[str] = None, endpoint: Optional[str] = None) -> Optional[str]:
        """
        Make the local backend active.

        Args:
            model_name: Model to use as given; when omitted the first installed model is adopted
            endpoint: New Ollama base URL

        Returns:
            The selected model name, or None when the server reports no installed models
        """
        if endpoint:
            self._local.base_url = endpoint.rstrip("/")

        if model_name:
            self._local.model = model_name
            self._fallback_armed = False
        else:
            models = await self._local.list_models()
            if models:
                self._local.model = models[0]
                logger.info(f"Auto-selected first available model: {models[0]}")
            else:
                self._local.model = None
                logger.warning(f"No Ollama models installed at {self._local.base_url}")
            self._fallback_armed = True

        self._mode = ProviderMode.LOCAL
        logger.info(f"Switched to Ollama: {self._local.model} at {self._local.base_url}")
        return self._local.model

    async def switch_to_cloud(self, credential: Optional[str] = None) -> None:
        """Make Gemini active, optionally with a new API key."""
        if credential:
            self._cloud = create_gemini_backend(
                credential,
                model=self._config.cloud_model,
                temperature=self._config.temperature,
                top_p=self._config.top_p,
            )
            self._config.api_key = credential

        if self._cloud is None:
            raise ConfigurationError("No Gemini API key provided and no existing cloud backend", backend="gemini")

        self._mode = ProviderMode.CLOUD
        logger.info("Switched to Gemini")

    # ------------------------------------------------------------------
    # Generation primitives
    # ------------------------------------------------------------------

    def _timestamp(self) -> int:
        # Epoch millis, never earlier than a previously returned result.
        self._last_timestamp = max(int(time.time() * 1000), self._last_timestamp)
        return self._last_timestamp

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        modality = request.modality
        if modality == "mixed":
            raise UnsupportedOperation(
                "A request may carry images or a single audio clip, not both",
                backend=self.current_provider,
            )
        if modality == "audio" and len(request.attachments) > 1:
            raise UnsupportedOperation("Only one audio clip can be sent per request", backend=self.current_provider)

        if self._mode is ProviderMode.LOCAL:
            text = await self._generate_local(request)
        else:
            backend = self._cloud
            if not backend.supports(request.attachments):
                raise UnsupportedOperation(f"{modality} attachments are not supported", backend=backend.name)
            text = await backend.generate(request.prompt, request.attachments)

        return GenerationResult(text=text, timestamp=self._timestamp())

    async def _generate_local(self, request: GenerationRequest) -> str:
        backend = self._local
        model = backend.model
        if not model:
            raise ConfigurationError(
                f"No local model selected; no models are installed at {backend.base_url}",
                backend=backend.name,
            )
        if not backend.supports(request.attachments):
            raise UnsupportedOperation(
                f"{request.modality} attachments are not supported by the local backend",
                backend=backend.name,
            )

        armed, self._fallback_armed = self._fallback_armed, False
        try:
            return await backend.generate(request.prompt, request.attachments, model=model)
        except BackendUnreachable as e:
            if not armed:
                raise
            alternatives = [m for m in await backend.list_models() if m != model]
            if not alternatives:
                raise
            substitute = alternatives[0]
            logger.warning(f"Model {model!r} failed ({e}); falling back to {substitute!r}")
            if backend.model == model:
                backend.model = substitute
            return await backend.generate(request.prompt, request.attachments, model=substitute)

    async def generate_from_text(self, prompt: str) -> GenerationResult:
        return await self.generate(GenerationRequest(prompt=prompt))

    async def generate_from_images(self, prompt: str, images: Sequence[Source]) -> GenerationResult:
        attachments = [load_attachment(image, IMAGE_MIME_TYPE) for image in images]
        return await self.generate(GenerationRequest(prompt=prompt, attachments=attachments))

    async def generate_from_audio(
        self,
        prompt: str,
        audio: Source,
        mime_type: str = DEFAULT_AUDIO_MIME_TYPE,
    ) -> GenerationResult:
        attachment = load_attachment(audio, mime_type)
        return await self.generate(GenerationRequest(prompt=prompt, attachments=[attachment]))

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    async def list_local_models(self) -> List[str]:
        return await self._local.list_models()

    async def test_connection(self) -> ConnectionStatus:
        """Round-trip a "Hello" prompt against the active backend; never raises."""
        try:
            if self.is_using_local:
                backend = self._local
                if not await backend.is_available():
                    return ConnectionStatus(ok=False, error=f"Ollama not available at {backend.base_url}")
                if not backend.model:
                    return ConnectionStatus(ok=False, error=f"No Ollama model installed at {backend.base_url}")
                await backend.generate("Hello", model=backend.model)
            else:
                if self._cloud is None:
                    return ConnectionStatus(ok=False, error="No Gemini model configured")
                await self._cloud.generate("Hello")
        except Exception as e:
            return ConnectionStatus(ok=False, error=str(e) or type(e).__name__)
        return ConnectionStatus(ok=True)

    # ------------------------------------------------------------------
    # Interview tasks
    # ------------------------------------------------------------------

    async def extract_problem_from_images(self, image_paths: Sequence[Source]) -> GenerationResult:
        """Describe the question shown in screenshots and answer it."""
        prompt = prompts.extract_problem_prompt(self._config.system_prompt)
        try:
            return await self.generate_from_images(prompt, image_paths)
        except GatewayError as e:
            logger.error(f"Error extracting problem from images: {e}")
            raise

    async def generate_solution(self, problem_info: ProblemInfo) -> GenerationResult:
        prompt = prompts.solution_prompt(problem_info, self._config.system_prompt)
        logger.info(f"Calling {self.current_provider} for spoken solution...")
        try:
            result = await self.generate_from_text(prompt)
        except GatewayError as e:
            logger.error(f"Error in generate_solution: {e}")
            raise
        logger.info(f"{self.current_provider} returned spoken result.")
        return result

    async def debug_solution_with_images(
        self,
        problem_info: ProblemInfo,
        current_answer: str,
        image_paths: Sequence[Source],
    ) -> GenerationResult:
        prompt = prompts.debug_prompt(problem_info, current_answer, self._config.system_prompt)
        try:
            return await self.generate_from_images(prompt, image_paths)
        except GatewayError as e:
            logger.error(f"Error debugging solution with images: {e}")
            raise

    async def analyze_audio_file(self, audio_path: Source) -> GenerationResult:
        if isinstance(audio_path, (bytes, bytearray)):
            mime_type = DEFAULT_AUDIO_MIME_TYPE
        else:
            mime_type = guess_audio_mime_type(audio_path, DEFAULT_AUDIO_MIME_TYPE)
        prompt = prompts.audio_file_prompt(self._config.system_prompt)
        try:
            return await self.generate_from_audio(prompt, audio_path, mime_type)
        except GatewayError as e:
            logger.error(f"Error analyzing audio file: {e}")
            raise

    async def analyze_audio_from_base64(self, data: str, mime_type: str) -> GenerationResult:
        """Answer a spoken question delivered as a base64 string."""
        try:
            audio = base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError(f"Audio payload is not valid base64: {e}") from e
        prompt = prompts.audio_clip_prompt(self._config.system_prompt)
        try:
            return await self.generate_from_audio(prompt, audio, mime_type)
        except GatewayError as e:
            logger.error(f"Error analyzing audio from base64: {e}")
            raise

    async def analyze_image_file(self, image_path: Source) -> GenerationResult:
        prompt = prompts.image_file_prompt(self._config.system_prompt)
        try:
            return await self.generate_from_images(prompt, [image_path])
        except GatewayError as e:
            logger.error(f"Error analyzing image file: {e}")
            raise

    async def chat(self, message: str) -> str:
        """Send ``message`` as-is, without the persona preamble."""
        result = await self.generate_from_text(message)
        return result.text
