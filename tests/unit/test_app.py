"""Bootstrap and logging tests."""

import logging

import pytest
import structlog

from screenflow.app import bootstrap, shutdown
from screenflow.clients import CompletionClient
from screenflow.core import LogContext, configure_logging
from screenflow.handlers import ScreensHandler


@pytest.mark.unit
def test_configure_logging_sets_level():
    configure_logging("WARNING")
    assert logging.getLogger().level == logging.WARNING
    configure_logging("DEBUG")
    assert logging.getLogger().level == logging.DEBUG


@pytest.mark.unit
def test_log_context_binds_and_unbinds():
    with LogContext(request_id="req_1", parent_id="doc-1"):
        bound = structlog.contextvars.get_contextvars()
        assert bound["request_id"] == "req_1"
        assert bound["parent_id"] == "doc-1"
    assert "request_id" not in structlog.contextvars.get_contextvars()


@pytest.mark.integration
@pytest.mark.asyncio
async def test_bootstrap_and_shutdown(settings):
    container = bootstrap(settings)

    handler = container.get(ScreensHandler)
    assert handler.summary_max_chars == settings.summary_max_chars

    client = container.get(CompletionClient)
    await shutdown(container)
    assert client._client.is_closed
