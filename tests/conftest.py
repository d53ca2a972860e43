"""
Pytest Configuration and Fixtures for the ethapi project.

Provides in-memory transports so the Api can be exercised without a node
or an MQTT broker.
"""

import logging
import sys

import pytest

from ethapi.models import ApiConfig
from tests.helpers.fakes import FakeTransport, RecordingPushTransport


@pytest.fixture(scope="session", autouse=True)
def setup_test_logging():
    """
    Configures the Python logging framework globally for all tests,
    the way an application embedding the Api would.
    """
    formatter = logging.Formatter(fmt="%(levelname)-8s %(message)s - %(funcName)s:%(lineno)d ")
    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(formatter)
    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG)
    logger.addHandler(handler)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def push_transport():
    return RecordingPushTransport()


@pytest.fixture
def fast_config():
    """No middleware probe and short intervals, so tests stay quick and the call log clean."""
    return ApiConfig(poll_interval=0.01, subscription_interval=0.01, inject_middleware=False)
