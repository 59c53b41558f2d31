# src/study_planner/llm/client.py

from __future__ import annotations

import logging
import time
from typing import Any, Dict, Iterable, List, Optional

import httpx
import openai
from openai import OpenAI

from ..core.ports import ChatMessage

logger = logging.getLogger(__name__)

# Models that answered 404 are skipped for this long.
BAD_MODEL_COOLDOWN_SECONDS = 3600.0


def friendly_llm_error_message(err: Exception) -> str:
    msg = str(err).strip() or "LLM error."
    if "API key is not set" in msg:
        return "LLM is not configured (missing API key). Set STUDYPLAN_OPENROUTER_API_KEY in .env."
    if "model list is empty" in msg:
        return "LLM is not configured (no models). Set STUDYPLAN_LLM_MODELS in .env."
    return msg


def _is_retryable(exc: Exception) -> bool:
    return isinstance(
        exc,
        (openai.RateLimitError, openai.APIConnectionError, openai.APITimeoutError, httpx.TimeoutException),
    )


class OpenRouterLLMClient:
    """
    Streaming chat client for an OpenAI-compatible endpoint (OpenRouter by default).

    Behavior:
    - Tries settings.llm_models in order.
    - A model that produces no content token within llm_first_token_timeout is abandoned.
    - 404 (model not available) -> model is parked for an hour, try next.
    - Rate limit / network issues -> try next.
    - Auth issues -> fail fast.

    Construction raises RuntimeError when no API key is configured; the
    bootstrap then falls back to the canned responder.
    """

    def __init__(self, settings: Any) -> None:
        api_key = getattr(settings, "openrouter_api_key", None)
        base_url = str(getattr(settings, "openrouter_base_url", "") or "").strip()
        if not api_key or not str(api_key).strip():
            raise RuntimeError("LLM API key is not set.")
        if not base_url:
            raise RuntimeError("LLM base URL is not set.")

        self._models: List[str] = [m.strip() for m in getattr(settings, "llm_models", []) or [] if m.strip()]
        self._headers: Dict[str, str] = dict(getattr(settings, "extra_headers", {}) or {})
        self._first_token_timeout = float(getattr(settings, "llm_first_token_timeout", 20.0))
        self._timeout = httpx.Timeout(
            connect=float(getattr(settings, "llm_connect_timeout", 5.0)),
            read=float(getattr(settings, "llm_read_timeout", 25.0)),
            write=10.0,
            pool=float(getattr(settings, "llm_connect_timeout", 5.0)),
        )
        self._bad_models: dict[str, float] = {}  # model -> retry_at (monotonic)

        # No automatic retries: falling through to the next model is faster.
        self._client = OpenAI(base_url=base_url, api_key=str(api_key), timeout=self._timeout, max_retries=0)

    def stream_chat(self, messages: list[ChatMessage], system_prompt: str) -> Iterable[str]:
        if not self._models:
            raise RuntimeError("LLM model list is empty.")

        full_messages: list[Any] = [{"role": "system", "content": system_prompt}, *messages]
        last_error: Optional[Exception] = None
        now = time.monotonic()

        for model in self._models:
            retry_at = self._bad_models.get(model)
            if retry_at is not None and retry_at > now:
                continue

            logger.info("LLM: trying model=%s", model)
            t0 = time.monotonic()
            deadline = t0 + self._first_token_timeout
            used_any = False
            stream = None

            try:
                stream = self._client.chat.completions.create(
                    model=model,
                    stream=True,
                    extra_headers=self._headers or None,
                    messages=full_messages,
                    timeout=self._timeout,
                )
                for chunk in stream:
                    if not used_any and time.monotonic() > deadline:
                        last_error = TimeoutError(f"First token timeout on model: {model}")
                        logger.info("LLM: first token timeout on model=%s -> trying next", model)
                        break

                    content = chunk.choices[0].delta.content if chunk.choices else None
                    if content:
                        if not used_any:
                            logger.info("LLM: first token from model=%s (%.2fs)", model, time.monotonic() - t0)
                        used_any = True
                        yield content

                if used_any:
                    return
                if last_error is None:
                    last_error = RuntimeError(f"Model returned no content: {model}")

            except (openai.AuthenticationError, openai.PermissionDeniedError) as e:
                raise RuntimeError(
                    "LLM authentication failed. Check STUDYPLAN_OPENROUTER_API_KEY."
                ) from e
            except openai.NotFoundError as e:
                last_error = e
                self._bad_models[model] = time.monotonic() + BAD_MODEL_COOLDOWN_SECONDS
                logger.info("LLM: model not available (404): %s", model)
            except openai.OpenAIError as e:
                last_error = e
                if _is_retryable(e):
                    logger.info("LLM: rate-limit/network error on model=%s, trying next", model)
                else:
                    logger.info("LLM: error on model=%s (%s), trying next", model, e.__class__.__name__)
            finally:
                if stream is not None:
                    stream.close()

        if last_error is not None and _is_retryable(last_error):
            raise RuntimeError("LLM is rate-limited or unreachable. Try again later.") from last_error
        raise RuntimeError("All LLM models failed.") from last_error
