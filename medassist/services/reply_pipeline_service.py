from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

import httpx

from medassist.core.config import DEFAULT_SAFETY_DISCLAIMER, Settings, settings
from medassist.schemas.chat import ChatReply, ChatRequest
from medassist.services.contextual_fallback_service import (
    CONTEXTUAL_RULES,
    ContextualRule,
    resolve_contextual_fallback,
)
from medassist.services.knowledge_service import KNOWLEDGE_RULES, KnowledgeRule, match_knowledge
from medassist.services.model_cascade_service import (
    DEFAULT_MODEL_ENDPOINTS,
    ModelCascadeClient,
    ModelEndpoint,
    select_endpoints,
)

logger = logging.getLogger(__name__)


class InvalidRequestError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class PipelineConfig:
    """Read-only rule sets and cascade parameters, built once per process."""

    knowledge_rules: tuple[KnowledgeRule, ...] = KNOWLEDGE_RULES
    contextual_rules: tuple[ContextualRule, ...] = CONTEXTUAL_RULES
    model_endpoints: tuple[ModelEndpoint, ...] = DEFAULT_MODEL_ENDPOINTS
    inference_base_url: str = "https://api-inference.huggingface.co/models"
    inference_api_token: str = ""
    endpoint_timeout_seconds: float = 8.0
    deadline_seconds: float = 20.0
    min_reply_chars: int = 10
    safety_disclaimer: str = DEFAULT_SAFETY_DISCLAIMER

    @classmethod
    def from_settings(cls, app_settings: Settings) -> PipelineConfig:
        endpoints = (
            select_endpoints(app_settings.model_endpoints)
            if app_settings.cascade_enabled
            else ()
        )
        return cls(
            model_endpoints=endpoints,
            inference_base_url=app_settings.inference_base_url,
            inference_api_token=app_settings.inference_api_token,
            endpoint_timeout_seconds=app_settings.cascade_endpoint_timeout_seconds,
            deadline_seconds=app_settings.cascade_deadline_seconds,
            min_reply_chars=app_settings.min_reply_chars,
            safety_disclaimer=app_settings.safety_disclaimer,
        )


class ReplyPipeline:
    """
    Resolves a chat message through three stages in strict priority order:
    knowledge base, model cascade, contextual fallback.

    Exactly one stage produces the reply. Nothing is kept between calls.
    """

    def __init__(
        self,
        config: PipelineConfig,
        http_client: httpx.Client | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config
        self._cascade = ModelCascadeClient(
            config.model_endpoints,
            base_url=config.inference_base_url,
            api_token=config.inference_api_token,
            endpoint_timeout_seconds=config.endpoint_timeout_seconds,
            deadline_seconds=config.deadline_seconds,
            min_reply_chars=config.min_reply_chars,
            safety_disclaimer=config.safety_disclaimer,
            http_client=http_client,
            clock=clock,
        )

    @property
    def endpoint_identifiers(self) -> tuple[str, ...]:
        return tuple(endpoint.identifier for endpoint in self._config.model_endpoints)

    def close(self) -> None:
        self._cascade.close()

    def resolve(self, request: ChatRequest) -> ChatReply:
        message = (request.message or "").strip()
        if not message:
            raise InvalidRequestError("Message is required")

        reply = match_knowledge(message, self._config.knowledge_rules)
        if reply is not None:
            logger.info("ReplyPipeline: resolved by knowledge base")
            return ChatReply(reply=reply)

        reply = self._try_cascade(message)
        if reply is not None:
            logger.info("ReplyPipeline: resolved by model cascade")
            return ChatReply(reply=reply)

        logger.info("ReplyPipeline: resolved by contextual fallback")
        return ChatReply(reply=resolve_contextual_fallback(message, self._config.contextual_rules))

    def _try_cascade(self, message: str) -> str | None:
        if not self._config.model_endpoints:
            return None
        try:
            return self._cascade.try_cascade(message)
        except Exception:
            logger.exception("ReplyPipeline: model cascade failed unexpectedly")
            return None


def build_reply_pipeline(app_settings: Settings = settings) -> ReplyPipeline:
    return ReplyPipeline(PipelineConfig.from_settings(app_settings))
