"""
Model cascade: sequential calls to remote text-generation endpoints.

Endpoints are tried strictly in priority order. The first one that returns
usable text wins; every failure (HTTP error, timeout, unexpected payload shape,
text too short) is logged and the next endpoint is tried. The client never
raises to its caller, it returns ``None`` when the cascade is exhausted.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import httpx

from medassist.core.config import DEFAULT_SAFETY_DISCLAIMER

logger = logging.getLogger(__name__)

RequestBuilder = Callable[[str], dict[str, Any]]
ResponseExtractor = Callable[[Any], str | None]

# Characters a model tends to emit before the actual answer
_LEADING_NOISE = " \t\r\n.,;:!?-_*>|\"'"


class EndpointFailure(RuntimeError):
    pass


class ExtractionFailure(EndpointFailure):
    pass


@dataclass(frozen=True, slots=True)
class ModelEndpoint:
    identifier: str
    request_builder: RequestBuilder
    response_extractor: ResponseExtractor


def sampling_request(**parameters: Any) -> RequestBuilder:
    """Request builder with fixed sampling parameters and wait-for-model enabled."""

    def build(message: str) -> dict[str, Any]:
        return {
            "inputs": message,
            "parameters": {"do_sample": True, **parameters},
            "options": {"wait_for_model": True},
        }

    return build


def extract_generated_text(payload: Any) -> str | None:
    """
    Pull the generated text out of an inference response.

    Accepts ``[{"generated_text": ...}, ...]`` or ``[{"text": ...}, ...]``
    (first element only) and ``{"generated_text": ...}``.
    """
    if isinstance(payload, list):
        if not payload or not isinstance(payload[0], dict):
            return None
        first = payload[0]
        text = first.get("generated_text") or first.get("text")
    elif isinstance(payload, dict):
        text = payload.get("generated_text")
    else:
        return None

    if isinstance(text, str) and text.strip():
        return text
    return None


DEFAULT_MODEL_ENDPOINTS: tuple[ModelEndpoint, ...] = (
    ModelEndpoint(
        identifier="microsoft/DialoGPT-medium",
        request_builder=sampling_request(max_length=100, temperature=0.7),
        response_extractor=extract_generated_text,
    ),
    ModelEndpoint(
        identifier="facebook/blenderbot-400M-distill",
        request_builder=sampling_request(max_length=120, temperature=0.7),
        response_extractor=extract_generated_text,
    ),
    ModelEndpoint(
        identifier="google/flan-t5-base",
        request_builder=sampling_request(max_new_tokens=150, temperature=0.5),
        response_extractor=extract_generated_text,
    ),
)


def select_endpoints(
    identifiers: list[str],
    available: tuple[ModelEndpoint, ...] = DEFAULT_MODEL_ENDPOINTS,
) -> tuple[ModelEndpoint, ...]:
    """Restrict and reorder ``available`` by identifier; empty keeps all of them."""
    if not identifiers:
        return available

    by_identifier = {endpoint.identifier: endpoint for endpoint in available}
    selected: list[ModelEndpoint] = []
    for identifier in identifiers:
        endpoint = by_identifier.get(identifier)
        if endpoint is None:
            logger.warning("ModelCascade: unknown endpoint %r ignored", identifier)
            continue
        selected.append(endpoint)
    return tuple(selected)


def clean_generated_text(text: str, message: str) -> str:
    cleaned = text.strip()
    echo = message.strip()
    if echo and cleaned.startswith(echo):
        cleaned = cleaned[len(echo):]
    return cleaned.lstrip(_LEADING_NOISE).strip()


class ModelCascadeClient:
    """Tries each endpoint in order until one produces a usable reply."""

    def __init__(
        self,
        endpoints: tuple[ModelEndpoint, ...],
        *,
        base_url: str,
        api_token: str = "",
        endpoint_timeout_seconds: float = 8.0,
        deadline_seconds: float = 20.0,
        min_reply_chars: int = 10,
        safety_disclaimer: str = DEFAULT_SAFETY_DISCLAIMER,
        http_client: httpx.Client | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._endpoints = endpoints
        self._base_url = base_url.rstrip("/")
        self._api_token = api_token
        self._endpoint_timeout = endpoint_timeout_seconds
        self._deadline = deadline_seconds
        self._min_reply_chars = min_reply_chars
        self._disclaimer = safety_disclaimer
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client()
        self._clock = clock

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def try_cascade(self, message: str) -> str | None:
        started = self._clock()
        for position, endpoint in enumerate(self._endpoints):
            now = self._clock()
            remaining = self._deadline - (now - started)
            if remaining <= 0:
                logger.warning(
                    "ModelCascade: deadline of %.1fs exhausted, abandoning %d endpoint(s)",
                    self._deadline,
                    len(self._endpoints) - position,
                )
                return None

            budget = min(self._endpoint_timeout, remaining)
            try:
                text = self._call_endpoint(endpoint, message, budget, expires_at=now + budget)
            except EndpointFailure as exc:
                logger.warning("ModelCascade: %s failed: %s", endpoint.identifier, exc)
                continue
            except Exception:
                logger.exception("ModelCascade: %s raised unexpectedly", endpoint.identifier)
                continue

            logger.info(
                "ModelCascade: %s produced a reply (%d chars)",
                endpoint.identifier,
                len(text),
            )
            return f"{text}{self._disclaimer}"

        logger.info("ModelCascade: all %d endpoint(s) exhausted", len(self._endpoints))
        return None

    def _call_endpoint(
        self,
        endpoint: ModelEndpoint,
        message: str,
        timeout: float,
        expires_at: float,
    ) -> str:
        headers = {"Content-Type": "application/json"}
        if self._api_token:
            headers["Authorization"] = f"Bearer {self._api_token}"

        # httpx timeouts bound each read, not the whole body, so a trickling
        # endpoint is cut off by checking the wall clock between chunks
        chunks: list[bytes] = []
        try:
            with self._client.stream(
                "POST",
                f"{self._base_url}/{endpoint.identifier}",
                json=endpoint.request_builder(message),
                headers=headers,
                timeout=timeout,
            ) as response:
                response.raise_for_status()
                for chunk in response.iter_bytes():
                    chunks.append(chunk)
                    if self._clock() >= expires_at:
                        raise EndpointFailure(f"no complete response within {timeout:.1f}s")
        except httpx.HTTPStatusError as exc:
            raise EndpointFailure(f"status {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise EndpointFailure(f"request failed: {exc!r}") from exc

        try:
            payload = json.loads(b"".join(chunks))
        except ValueError as exc:
            raise EndpointFailure("response body is not valid JSON") from exc

        raw_text = endpoint.response_extractor(payload)
        if raw_text is None:
            raise ExtractionFailure("no generated text in response")

        cleaned = clean_generated_text(raw_text, message)
        if len(cleaned) <= self._min_reply_chars:
            raise ExtractionFailure(f"reply too short after cleaning ({len(cleaned)} chars)")
        return cleaned
