from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from medassist.api.deps import get_reply_pipeline
from medassist.core.config import settings
from medassist.schemas.chat import ChatReply, ChatRequest
from medassist.services.reply_pipeline_service import ReplyPipeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": settings.cors_allow_origin,
    "Access-Control-Allow-Headers": settings.cors_allow_headers,
}

HARD_FALLBACK_REPLY = (
    "Hello! I'm your AI assistant. I can help you with questions about your "
    "medications or general health advice. How can I assist you today?"
)


def _reply_response(reply: str) -> JSONResponse:
    return JSONResponse(
        content=ChatReply(reply=reply).model_dump(),
        status_code=200,
        headers=CORS_HEADERS,
    )


def hard_fallback_response() -> JSONResponse:
    return _reply_response(HARD_FALLBACK_REPLY)


def unsupported_method_response(method: str) -> JSONResponse:
    logger.warning("Chat: unsupported method %s, returning hard fallback reply", method)
    return hard_fallback_response()


@router.options("")
def chat_preflight():
    return Response(status_code=204, headers=CORS_HEADERS)


@router.post("")
async def chat(request: Request, pipeline: ReplyPipeline | None = Depends(get_reply_pipeline)):
    if pipeline is None:
        logger.error("Chat: reply pipeline not initialised, returning hard fallback reply")
        return hard_fallback_response()

    try:
        payload = await request.json()
        chat_request = ChatRequest.model_validate(payload)
        result = await run_in_threadpool(pipeline.resolve, chat_request)
        return _reply_response(result.reply)
    except ValueError as exc:
        # Covers malformed JSON, schema validation and blank messages
        logger.warning("Chat: invalid request (%s), returning hard fallback reply", exc)
    except Exception:
        logger.exception("Chat: request failed, returning hard fallback reply")
    return hard_fallback_response()
