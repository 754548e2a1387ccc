from fastapi import APIRouter, Depends

from medassist.api.deps import get_reply_pipeline
from medassist.core.config import settings
from medassist.services.reply_pipeline_service import ReplyPipeline

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
def pipeline_health(pipeline: ReplyPipeline | None = Depends(get_reply_pipeline)):
    if pipeline is None:
        return {
            "status": "starting",
            "service": settings.app_name,
            "cascade_enabled": False,
            "model_endpoints": [],
        }

    identifiers = list(pipeline.endpoint_identifiers)
    return {
        "status": "ok",
        "service": settings.app_name,
        "cascade_enabled": bool(identifiers),
        "model_endpoints": identifiers,
    }
