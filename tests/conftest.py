"""
测试配置

回合引擎测试共用的 fixture。每个引擎都有独立的事件总线，
每个测试结束后重置进程级单例。
"""

import random
from decimal import Decimal

import pytest

from tarot.application import config_service as config_service_module
from tarot.application.presentation import ImmediatePresentation
from tarot.core.events import EventBus, set_event_bus
from tarot.core.persistence import InMemoryStore

from tests.common.helpers import DeferredPresentation, example_table, make_engine


@pytest.fixture
def table():
    """倍率表 {0: 40, 1: 30, 2: 20, 5: 10}"""
    return example_table()


@pytest.fixture
def rng():
    return random.Random(20240601)


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def deferred():
    return DeferredPresentation()


@pytest.fixture
def immediate():
    return ImmediatePresentation()


@pytest.fixture
def engine(immediate):
    """立即完成表现层、下注额 1、余额 100 的引擎"""
    return make_engine(presentation=immediate)


@pytest.fixture
def money():
    """精确小数的简写"""
    return lambda value: Decimal(str(value))


@pytest.fixture(autouse=True)
def reset_singletons():
    yield
    set_event_bus(None)
    config_service_module._config_service_instance = None


def pytest_configure(config):
    config.addinivalue_line("markers", "property_test: property based tests")
    config.addinivalue_line("markers", "integration: integration tests")
    config.addinivalue_line("markers", "slow: long running tests")
