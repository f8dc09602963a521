from __future__ import annotations

import asyncio
from typing import Callable, Optional, Protocol

import httpx
import logging
import openai
from openai import AsyncOpenAI

from salesbot.config import Settings
from salesbot.errors import ConfigurationError, GenerationUnavailable

logger = logging.getLogger(__name__)


class GenerationPort(Protocol):
    """A text-generation backend: one prompt in, the full completion out."""

    async def generate(self, prompt: str, max_new_tokens: int, temperature: float, top_p: float) -> str:
        ...


def check_sampling(max_new_tokens: int, temperature: float, top_p: float) -> None:
    if max_new_tokens < 1:
        raise ConfigurationError(f"max_new_tokens must be >= 1, got {max_new_tokens}")
    if not 0.0 <= temperature <= 2.0:
        raise ConfigurationError(f"temperature must be in [0, 2], got {temperature}")
    if not 0.0 < top_p <= 1.0:
        raise ConfigurationError(f"top_p must be in (0, 1], got {top_p}")


class UnloadedEngine:
    """Placeholder backend used before a model is available."""

    def __init__(self, reason: str = "Model not loaded.") -> None:
        self.reason = reason

    async def generate(self, prompt: str, max_new_tokens: int, temperature: float, top_p: float) -> str:
        raise GenerationUnavailable(self.reason)


class ThreadedEngine:
    """Runs a blocking generate function on a worker thread.

    Suits in-process runtimes (onnxruntime-genai, llama-cpp-python,
    transformers) whose token loop would otherwise block the event loop.
    """

    def __init__(self, generate_fn: Callable[[str, int, float, float], str]) -> None:
        self._generate_fn = generate_fn

    async def generate(self, prompt: str, max_new_tokens: int, temperature: float, top_p: float) -> str:
        check_sampling(max_new_tokens, temperature, top_p)
        return await asyncio.to_thread(self._generate_fn, prompt, max_new_tokens, temperature, top_p)


class OpenAICompatibleEngine:
    """Local OpenAI-compatible server (llama.cpp, vLLM, LM Studio).

    Uses the plain completions endpoint so the already templated prompt is
    sent as-is.
    """

    def __init__(
        self,
        model: str,
        base_url: str,
        api_key: str = "not-needed",
        timeout: float = 120.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.model = model
        self.base_url = base_url
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=0,
            http_client=http_client,
        )

    async def generate(self, prompt: str, max_new_tokens: int, temperature: float, top_p: float) -> str:
        check_sampling(max_new_tokens, temperature, top_p)
        try:
            response = await self._client.completions.create(
                model=self.model,
                prompt=prompt,
                max_tokens=max_new_tokens,
                temperature=temperature,
                top_p=top_p,
            )
        except openai.APIConnectionError as exc:
            raise GenerationUnavailable(f"Generation backend at {self.base_url} is unreachable") from exc
        except openai.NotFoundError as exc:
            raise GenerationUnavailable(f"Model {self.model!r} is not loaded on {self.base_url}") from exc

        if not response.choices:
            logger.info("generation.no_choices model=%s", self.model)
            return ""
        return response.choices[0].text or ""


class OllamaEngine:
    """Ollama ``/api/generate`` in raw mode, so Ollama applies no template of its own."""

    def __init__(
        self,
        model: str,
        base_url: str = "http://localhost:11434",
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.model = model
        self.base_url = base_url
        self.timeout = timeout
        self._transport = transport

    async def generate(self, prompt: str, max_new_tokens: int, temperature: float, top_p: float) -> str:
        check_sampling(max_new_tokens, temperature, top_p)
        url = f"{self.base_url.rstrip('/')}/api/generate"
        payload = {
            "model": self.model,
            "prompt": prompt,
            "raw": True,
            "stream": False,
            "options": {
                "num_predict": max_new_tokens,
                "temperature": temperature,
                "top_p": top_p,
            },
        }
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout, connect=5.0), transport=self._transport
            ) as client:
                resp = await client.post(url, json=payload)
        except httpx.ConnectError as exc:
            raise GenerationUnavailable(f"Generation backend at {self.base_url} is unreachable") from exc

        if resp.status_code == 404:
            raise GenerationUnavailable(f"Model {self.model!r} is not loaded on {self.base_url}")
        resp.raise_for_status()
        data = resp.json()
        return (data or {}).get("response") or ""


def build_engine(settings: Settings) -> GenerationPort:
    if settings.backend == "openai":
        engine: GenerationPort = OpenAICompatibleEngine(
            model=settings.model,
            base_url=settings.openai_base_url,
            api_key=settings.openai_api_key,
            timeout=settings.request_timeout,
        )
    elif settings.backend == "ollama":
        engine = OllamaEngine(
            model=settings.model,
            base_url=settings.ollama_base_url,
            timeout=settings.request_timeout,
        )
    else:
        engine = UnloadedEngine()
    logger.info("generation.engine backend=%s model=%s", settings.backend, settings.model)
    return engine
