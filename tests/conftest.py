#tests\conftest.py

"""Pytest configuration and fixtures."""

import pytest

from nodeconfig_engine.core.events import RecordingEventEmitter
from nodeconfig_engine.core.factory import SlaveFactory
from nodeconfig_engine.core.models import (
    AlwaysRetention,
    CommandLauncher,
    NodeMode,
)
from nodeconfig_engine.infrastructure.memory.registry import InMemoryNodeRegistry
from nodeconfig_engine.infrastructure.sql.database import (
    create_db_engine,
    drop_db,
    get_session_factory,
    init_db,
)
from nodeconfig_engine.infrastructure.sql.registry import SqlNodeRegistry
from nodeconfig_engine.node_manager.service import NodeManagerService
from nodeconfig_engine.node_manager.session import SessionContext


# ============================================
# NODES
# ============================================

@pytest.fixture
def make_slave():
    """Build a valid managed slave, overriding any attribute."""

    def _make(name, **overrides):
        values = dict(
            name=name,
            description="",
            remote_fs=f"/var/lib/build/{name}",
            num_executors=1,
            mode=NodeMode.NORMAL,
            label_string="",
            launcher=CommandLauncher(command=""),
            retention_strategy=AlwaysRetention(),
            node_properties=(),
        )
        values.update(overrides)
        return SlaveFactory.create(**values)

    return _make


# ============================================
# REGISTRIES
# ============================================

@pytest.fixture
def registry():
    return InMemoryNodeRegistry()


@pytest.fixture
def sql_engine():
    """Fresh in-memory SQLite database per test."""
    engine = create_db_engine("sqlite:///:memory:", echo=False)
    init_db(engine)

    yield engine

    drop_db(engine)
    engine.dispose()


@pytest.fixture
def sql_registry(sql_engine):
    return SqlNodeRegistry(get_session_factory(sql_engine))


@pytest.fixture(params=["memory", "sql"])
def any_registry(request):
    """Both registry backends, for contract tests."""
    if request.param == "memory":
        return InMemoryNodeRegistry()
    return request.getfixturevalue("sql_registry")


# ============================================
# SERVICE
# ============================================

@pytest.fixture
def events():
    return RecordingEventEmitter()


@pytest.fixture
def service(registry, events):
    return NodeManagerService(registry=registry, event_emitters=events)


@pytest.fixture
def context():
    return SessionContext()
