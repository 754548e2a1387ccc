import pytest

from tests.support import RecordingTransport, failing_handler


@pytest.fixture
def failing_transport() -> RecordingTransport:
    return RecordingTransport(failing_handler)
