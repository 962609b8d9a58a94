#nodeconfig_engine\container.py

"""Dependency injection container - wires the registry and services together."""

import logging
from typing import Optional

from nodeconfig_engine.config import EngineSettings, settings as default_settings
from nodeconfig_engine.core.events import MultiEventEmitter, RecordingEventEmitter
from nodeconfig_engine.core.repository import NodeRegistry
from nodeconfig_engine.infrastructure.memory.registry import InMemoryNodeRegistry
from nodeconfig_engine.node_manager.service import NodeManagerService


# ============================================
# LOGGING
# ============================================

def configure_logging(settings: Optional[EngineSettings] = None) -> None:
    settings = settings or default_settings
    logging.basicConfig(
        level=settings.log_level.upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


# ============================================
# REGISTRY
# ============================================

def build_registry(settings: Optional[EngineSettings] = None) -> NodeRegistry:
    """Node registry for the configured backend."""
    settings = settings or default_settings

    if settings.registry_backend == "sql":
        from nodeconfig_engine.infrastructure.sql.database import (
            create_db_engine,
            get_session_factory,
            init_db,
        )
        from nodeconfig_engine.infrastructure.sql.registry import SqlNodeRegistry

        engine = create_db_engine(settings.database_url, settings.echo_sql)
        init_db(engine)
        return SqlNodeRegistry(get_session_factory(engine))

    return InMemoryNodeRegistry()


# ============================================
# SERVICES
# ============================================

def build_service(
    settings: Optional[EngineSettings] = None,
    registry: Optional[NodeRegistry] = None,
) -> NodeManagerService:
    """Node manager service with an event log."""
    emitters = MultiEventEmitter([
        RecordingEventEmitter()
    ])
    return NodeManagerService(
        registry=registry or build_registry(settings),
        event_emitters=emitters,
    )
