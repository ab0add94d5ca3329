"""Ollama HTTP 클라이언트.

Async client for the Ollama ``/api/generate`` endpoint (non-streaming).
"""

import logging
from typing import Any

import httpx

from app.config import settings
from app.utils.exceptions import LLMServiceError

logger = logging.getLogger(__name__)


class OllamaClient:
    """Ollama generate API 래퍼.

    Thin wrapper around ``POST {OLLAMA_URL}`` with ``stream: false``.
    Transport failures, non-2xx responses and empty completions are raised
    as LLMServiceError (502). No retry.

    Attributes:
        url: generate 엔드포인트 URL (Full /api/generate URL)
        model: 모델 이름 (Model name sent with every request)
        timeout: 요청 타임아웃(초) (Request timeout in seconds)
    """

    def __init__(
        self,
        url: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url: str = url or settings.OLLAMA_URL
        self.model: str = model or settings.MODEL_NAME
        self.timeout: float = timeout or settings.OLLAMA_TIMEOUT_SECONDS
        self._transport = transport

    async def generate(self, prompt: str, options: dict[str, Any] | None = None) -> str:
        """프롬프트를 전송하고 모델 출력 텍스트를 반환합니다.

        Send a prompt and return the raw ``response`` text of the completion.

        Args:
            prompt: 전체 프롬프트 문자열 (Complete prompt)
            options: Ollama 샘플링 옵션 (Optional sampling options, e.g. temperature)

        Returns:
            str: 모델 원본 출력 (Raw model output)

        Raises:
            LLMServiceError: 연결 실패, 오류 응답, 빈 출력 (Transport error, error status, empty output)
        """
        payload: dict[str, Any] = {"model": self.model, "prompt": prompt, "stream": False}
        if options:
            payload["options"] = options

        logger.info("Ollama request started (model=%s, prompt_chars=%d)", self.model, len(prompt))
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.url, json=payload)
                response.raise_for_status()
                data: dict[str, Any] = response.json()
        except httpx.HTTPStatusError as exc:
            logger.error("Ollama returned HTTP %s", exc.response.status_code)
            raise LLMServiceError(f"Ollama request failed with status {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            logger.error("Ollama request failed: %s", exc)
            raise LLMServiceError(f"Ollama request failed: {type(exc).__name__}") from exc
        except ValueError as exc:
            raise LLMServiceError("Ollama returned a non-JSON body") from exc

        raw_output: str = data.get("response") or ""
        logger.info("Ollama request finished (response_chars=%d)", len(raw_output))
        logger.debug("Raw Ollama response: %s", raw_output)
        if not raw_output.strip():
            raise LLMServiceError("Ollama returned an empty response")
        return raw_output


# 싱글턴 인스턴스 — Singleton instance
ollama_client: OllamaClient = OllamaClient()
