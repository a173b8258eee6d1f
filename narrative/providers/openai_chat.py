"""
OpenAI Chat Provider
====================

Narrative generation through the OpenAI chat completions API, requesting
a JSON object response.

Client retries are disabled: the gateway makes exactly one attempt and
reports failures to the caller.
"""

from __future__ import annotations
import logging
import time
from typing import Optional

import openai
from openai import AsyncOpenAI

from profile_engine.config import NarrativeConfig

from .base import (
    InvocationParams,
    NarrativeProvider,
    ProviderErrorCode,
    ProviderResponse,
)

logger = logging.getLogger(__name__)


class OpenAIChatProvider(NarrativeProvider):
    """Chat-completions backed provider."""

    def __init__(
        self,
        config: NarrativeConfig,
        client: Optional[AsyncOpenAI] = None
    ):
        self._model = config.model
        self._client = client or AsyncOpenAI(
            api_key=config.api_key,
            timeout=config.timeout_seconds,
            max_retries=0,
        )

    @property
    def provider_id(self) -> str:
        return "openai"

    async def aclose(self) -> None:
        await self._client.close()

    async def complete(
        self,
        prompt: str,
        params: InvocationParams
    ) -> ProviderResponse:
        start = time.time()
        kwargs = {
            "model": self._model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": params.temperature,
            "max_tokens": params.max_tokens,
            "timeout": params.timeout_seconds,
        }
        if params.json_response:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            completion = await self._client.chat.completions.create(**kwargs)
        except openai.APITimeoutError as e:
            return self._failure(ProviderErrorCode.TIMEOUT, str(e), start)
        except openai.RateLimitError as e:
            return self._failure(ProviderErrorCode.RATE_LIMITED, str(e), start)
        except openai.APIConnectionError as e:
            return self._failure(ProviderErrorCode.NETWORK_ERROR, str(e), start)
        except openai.APIStatusError as e:
            return self._failure(
                ProviderErrorCode.API_ERROR, f"HTTP {e.status_code}: {e.message}", start
            )
        except openai.OpenAIError as e:
            return self._failure(ProviderErrorCode.API_ERROR, str(e), start)

        if not completion.choices:
            return self._failure(ProviderErrorCode.INVALID_RESPONSE, "No choices returned", start)

        choice = completion.choices[0]
        if choice.finish_reason == "content_filter":
            return self._failure(
                ProviderErrorCode.CONTENT_FILTERED, "Completion blocked by content filter", start
            )

        content = choice.message.content
        if not content:
            return self._failure(ProviderErrorCode.INVALID_RESPONSE, "Empty completion", start)

        return ProviderResponse(
            success=True,
            content=content,
            provider_id=self.provider_id,
            model_id=completion.model or self._model,
            latency_ms=(time.time() - start) * 1000,
        )

    def _failure(self, code: ProviderErrorCode, message: str, start: float) -> ProviderResponse:
        logger.warning("OpenAI completion failed (%s): %s", code.value, message)
        return ProviderResponse(
            success=False,
            error_code=code,
            error_message=message,
            provider_id=self.provider_id,
            model_id=self._model,
            latency_ms=(time.time() - start) * 1000,
        )
