"""Fixtures for unit tests."""

from typing import Any, Generator

import pytest
import structlog
from structlog.testing import capture_logs


@pytest.fixture(autouse=True)
def configure_structlog() -> Generator[None, None, None]:
    """Route structlog through the standard library without caching loggers between tests."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()


@pytest.fixture
def log_events() -> Generator[list[dict[str, Any]], None, None]:
    """Capture the structlog events emitted during a test."""
    with capture_logs() as events:
        yield events
