from collections.abc import Callable

import httpx

from medassist.services.reply_pipeline_service import PipelineConfig, ReplyPipeline

TEST_BASE_URL = "https://inference.test/models"
TEST_DISCLAIMER = " (Ask your healthcare provider.)"


class RecordingTransport(httpx.MockTransport):
    """Mock transport that remembers every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: list[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)

    @property
    def called_models(self) -> list[str]:
        prefix = httpx.URL(TEST_BASE_URL).path + "/"
        return [request.url.path.removeprefix(prefix) for request in self.requests]


def failing_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(503, json={"error": "Model is currently loading"})


def make_pipeline(transport: httpx.MockTransport, **config_overrides) -> ReplyPipeline:
    config = PipelineConfig(
        inference_base_url=TEST_BASE_URL,
        safety_disclaimer=TEST_DISCLAIMER,
        **config_overrides,
    )
    return ReplyPipeline(config, http_client=httpx.Client(transport=transport))
