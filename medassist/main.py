from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from starlette.exceptions import HTTPException as StarletteHTTPException

from medassist.api import chat, health
from medassist.core.config import settings
from medassist.core.logging import configure_logging
from medassist.services.reply_pipeline_service import build_reply_pipeline

configure_logging()

CHAT_PATH = f"{settings.api_prefix}{chat.router.prefix}"


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.reply_pipeline = build_reply_pipeline(settings)
    yield
    app.state.reply_pipeline.close()


app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    lifespan=lifespan,
)

app.include_router(health.router, prefix=settings.api_prefix)
app.include_router(chat.router, prefix=settings.api_prefix)


@app.exception_handler(StarletteHTTPException)
async def chat_method_fallback(request: Request, exc: StarletteHTTPException):
    # Methods other than POST/OPTIONS on /chat still get a reply, never a 405
    if exc.status_code == 405 and request.url.path == CHAT_PATH:
        return chat.unsupported_method_response(request.method)
    return await http_exception_handler(request, exc)


@app.get("/", tags=["root"])
def root():
    return {"message": f"{settings.app_name} is running"}
