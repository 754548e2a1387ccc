from fastapi import Request

from medassist.services.reply_pipeline_service import ReplyPipeline


def get_reply_pipeline(request: Request) -> ReplyPipeline | None:
    # Built and closed by the application lifespan; None until startup has run
    return getattr(request.app.state, "reply_pipeline", None)
