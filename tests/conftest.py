"""Conftest for all pytest configuration - fixtures shared by the test suite."""

import logging

import pytest

from eventlite import EventDispatcher
from eventlite.dispatcher import set_default_dispatcher
from eventlite.plugins.manager import _initialize_plugin_system
from eventlite.settings import EventliteSettings
from eventlite.settings import set_global_settings


@pytest.fixture(autouse=True)
def reset_global_state():
    """Each test starts with default settings, no global plugins and no default dispatcher."""
    set_global_settings(EventliteSettings())
    _initialize_plugin_system()
    set_default_dispatcher(None)
    yield
    set_global_settings(EventliteSettings())
    _initialize_plugin_system()
    set_default_dispatcher(None)


@pytest.fixture
def dispatcher() -> EventDispatcher:
    return EventDispatcher()


@pytest.fixture
def debug_logs(caplog):
    """caplog capturing eventlite records down to DEBUG."""
    caplog.set_level(logging.DEBUG, logger="eventlite")
    return caplog
