"""Pytest configuration for e2e tests."""

import logging
import socket
import threading
import time
import urllib.request
from collections.abc import Generator

import pytest
from werkzeug.serving import make_server

from fontlocal.utils.env import get_cache_dir
from fontlocal.utils.logging import setup_logging
from tests.e2e.mock_servers.app import create_app

# Setup logging for e2e tests
cache_dir = get_cache_dir()
cache_dir.mkdir(parents=True, exist_ok=True)
log_file = cache_dir / "e2e-tests.log"
setup_logging(log_file, extra_handlers=[logging.StreamHandler()])
logger = logging.getLogger(__name__)
logger.info("E2E tests starting, logs at: %s", log_file)

HOST = "127.0.0.1"


def get_free_port() -> int:
    """Get a free port by binding to port 0 and reading the assigned port."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind((HOST, 0))
        s.listen(1)
        return s.getsockname()[1]


class MockServerThread(threading.Thread):
    """Thread that runs the mock Flask server."""

    def __init__(self, app, host: str, port: int) -> None:
        super().__init__(daemon=True)
        self.app = app
        self.server = make_server(host, port, app, threaded=True)
        self.host = host
        self.port = port

    def run(self):
        self.server.serve_forever()

    def shutdown(self):
        self.server.shutdown()

    @property
    def base_url(self) -> str:
        """Root URL of the server."""
        return f"http://{self.host}:{self.port}"

    def stylesheet_url(self, family: str) -> str:
        """URL of the stylesheet declaring ``family``."""
        return f"{self.base_url}/css2?family={family.replace(' ', '+')}"

    @property
    def hits(self) -> list[str]:
        """Paths requested since the last reset."""
        return self.app.config["HITS"]

    def reset(self) -> None:
        """Forget recorded requests and simulated failures."""
        self.app.config["HITS"].clear()
        self.app.config["USER_AGENTS"].clear()
        self.app.config["MISSING_FAMILIES"].clear()
        self.app.config["MISSING_FONTS"].clear()


@pytest.fixture(scope="session")
def mock_server() -> Generator[MockServerThread, None, None]:
    """Start the mock font host for e2e testing.

    The server runs in a background thread and is shared across all tests
    (session scope). Uses automatic port selection to avoid conflicts.
    """
    port = get_free_port()
    app = create_app(base_url=f"http://{HOST}:{port}")

    server_thread = MockServerThread(app, HOST, port)
    server_thread.start()

    # Wait for server to be ready
    for _ in range(50):  # 5 second timeout
        try:
            urllib.request.urlopen(f"http://{HOST}:{port}/health", timeout=1)
            break
        except OSError:
            time.sleep(0.1)

    yield server_thread

    server_thread.shutdown()


@pytest.fixture
def font_host(mock_server: MockServerThread) -> MockServerThread:
    """Mock font host with a clean request log."""
    mock_server.reset()
    return mock_server
