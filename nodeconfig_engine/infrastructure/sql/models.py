#nodeconfig_engine\infrastructure\sql\models.py
"""SQLAlchemy ORM models for the node registry."""

from sqlalchemy import Boolean, Column, Index, Integer, JSON, String, Text

from nodeconfig_engine.infrastructure.sql.database import Base


class NodeORM(Base):
    """
    Registered node table.

    The node's configuration is stored as a JSON payload; position keeps
    the master's node order. Computer state lives in the same row.
    """

    __tablename__ = "nodes"

    name = Column(String(255), primary_key=True)
    position = Column(Integer, nullable=False)
    kind = Column(String(50), nullable=False)
    payload = Column(JSON, nullable=False)

    # Computer state
    connected = Column(Boolean, nullable=False, default=False)
    temporarily_offline = Column(Boolean, nullable=False, default=False)
    offline_reason = Column(Text, nullable=True)

    __table_args__ = (
        Index('ix_nodes_position', 'position'),
    )
