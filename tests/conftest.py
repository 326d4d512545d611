"""Shared fixtures: a scriptable fake host and a career log wired to it."""

from __future__ import annotations

import logging

import pytest

from careerlog.logging_utils import ROOT_LOGGER
from tests._host_helpers import FakeHost, make_log


@pytest.fixture
def host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def career_log(host):
    return make_log(host)


@pytest.fixture(autouse=True)
def _reset_careerlog_logger():
    """CLI runs leave a console handler and a level on the CareerLog logger."""
    yield
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in [h for h in logger.handlers if getattr(h, "careerlog_console", False)]:
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
