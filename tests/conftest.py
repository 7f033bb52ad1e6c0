"""Shared fixtures for opsctl tests."""

import asyncio

import pytest

from opsctl.cli.app import build_registry
from opsctl.cli.dispatcher import Dispatcher
from opsctl.config import Settings
from opsctl.context import create_context
from opsctl.shutdown import SignalSource
from opsctl.ui import BufferUi


async def settle(rounds: int = 10):
    """Let background listener tasks run until they park again."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def ui():
    return BufferUi()


@pytest.fixture
def signal_source():
    """Signal source driven by notify() instead of real OS signals."""
    return SignalSource()


@pytest.fixture
def context(ui, signal_source):
    return create_context(Settings(), ui=ui, source=signal_source)


@pytest.fixture
def registry(context):
    return build_registry(context)


@pytest.fixture
def dispatcher(registry, ui):
    return Dispatcher(registry, ui)
