#nodeconfig_engine\infrastructure\sql\registry.py

"""SQL-backed node registry."""

import logging
from typing import Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from nodeconfig_engine.core.errors import NodeNotFoundError, RegistryWriteError
from nodeconfig_engine.core.models import Node
from nodeconfig_engine.core.repository import ComputerState, NodeRegistry
from nodeconfig_engine.core.serialization import node_from_dict, node_to_dict
from nodeconfig_engine.infrastructure.sql.models import NodeORM

logger = logging.getLogger(__name__)


def node_to_orm(node: Node, position: int) -> NodeORM:
    """Convert node domain model to ORM."""
    payload = node_to_dict(node)
    return NodeORM(
        name=node.name,
        position=position,
        kind=payload["kind"],
        payload=payload,
        connected=False,
        temporarily_offline=False,
        offline_reason=None,
    )


def orm_to_node(orm: NodeORM) -> Node:
    """Convert ORM to node domain model."""
    return node_from_dict(orm.payload)


def orm_to_state(orm: NodeORM) -> ComputerState:
    return ComputerState(
        connected=orm.connected,
        temporarily_offline=orm.temporarily_offline,
        offline_reason=orm.offline_reason,
    )


class SqlNodeRegistry(NodeRegistry):
    """Node registry persisted through SQLAlchemy, one session per operation."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def _get_session(self):
        return self._session_factory()

    def list_nodes(self) -> List[Node]:
        session = self._get_session()
        try:
            rows = session.query(NodeORM).order_by(NodeORM.position).all()
            return [orm_to_node(row) for row in rows]
        finally:
            session.close()

    def get(self, name: str) -> Optional[Node]:
        session = self._get_session()
        try:
            orm = session.get(NodeORM, name)
            if not orm:
                return None
            return orm_to_node(orm)
        finally:
            session.close()

    def add(self, node: Node) -> None:
        session = self._get_session()
        try:
            orm = session.get(NodeORM, node.name)
            if orm:
                payload = node_to_dict(node)
                orm.kind = payload["kind"]
                orm.payload = payload
            else:
                last = session.query(func.max(NodeORM.position)).scalar()
                session.add(node_to_orm(node, 0 if last is None else last + 1))
            session.commit()
            logger.debug(f"Registered node {node.name}")
        except SQLAlchemyError as e:
            session.rollback()
            raise RegistryWriteError(f"Failed to register node {node.name}: {e}") from e
        finally:
            session.close()

    def remove(self, node: Node) -> None:
        session = self._get_session()
        try:
            orm = session.get(NodeORM, node.name)
            if not orm:
                raise NodeNotFoundError(f"Node {node.name} is not registered")
            session.delete(orm)
            session.commit()
            logger.debug(f"Removed node {node.name}")
        except SQLAlchemyError as e:
            session.rollback()
            raise RegistryWriteError(f"Failed to remove node {node.name}: {e}") from e
        finally:
            session.close()

    def replace_all(self, nodes: Iterable[Node]) -> None:
        """Rewrite the node table in one transaction; computer state survives by name."""
        nodes = list(nodes)
        names = [node.name for node in nodes]
        if len(set(names)) != len(names):
            raise RegistryWriteError("Node list holds duplicate names")

        session = self._get_session()
        try:
            existing = {row.name: row for row in session.query(NodeORM).all()}

            for name, row in existing.items():
                if name not in names:
                    session.delete(row)

            for position, node in enumerate(nodes):
                row = existing.get(node.name)
                if row is None:
                    session.add(node_to_orm(node, position))
                    continue
                payload = node_to_dict(node)
                row.position = position
                row.kind = payload["kind"]
                row.payload = payload

            session.commit()
            logger.debug(f"Saved node list: {' '.join(names)}")
        except SQLAlchemyError as e:
            session.rollback()
            raise RegistryWriteError(f"Failed to save node list: {e}") from e
        finally:
            session.close()

    # -------------------------
    # COMPUTER CONTROL
    # -------------------------

    def computer_state(self, name: str) -> Optional[ComputerState]:
        session = self._get_session()
        try:
            orm = session.get(NodeORM, name)
            if not orm:
                return None
            return orm_to_state(orm)
        finally:
            session.close()

    def set_temporarily_offline(self, name: str, offline: bool, reason: Optional[str] = None) -> None:
        def update(orm: NodeORM):
            orm.temporarily_offline = offline
            orm.offline_reason = reason if offline else None

        self._update_state(name, update)

    def connect(self, name: str) -> None:
        def update(orm: NodeORM):
            orm.connected = True

        self._update_state(name, update)

    def disconnect(self, name: str, reason: Optional[str] = None) -> None:
        def update(orm: NodeORM):
            orm.connected = False
            orm.offline_reason = reason

        self._update_state(name, update)

    def _update_state(self, name: str, update) -> None:
        session = self._get_session()
        try:
            orm = session.get(NodeORM, name)
            if not orm:
                raise NodeNotFoundError(f"Node {name} is not registered")
            update(orm)
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise RegistryWriteError(f"Failed to update computer {name}: {e}") from e
        finally:
            session.close()
