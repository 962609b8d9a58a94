# nodeconfig_engine/core/repository.py

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, List, Optional

from nodeconfig_engine.core.models import Node


@dataclass
class ComputerState:
    """Runtime state of the computer behind a node."""
    connected: bool = False
    temporarily_offline: bool = False
    offline_reason: Optional[str] = None


class NodeRegistry(ABC):
    """
    The master's node list.
    """

    @abstractmethod
    def list_nodes(self) -> List[Node]:
        """
        All registered nodes, in registration order.
        """
        raise NotImplementedError

    @abstractmethod
    def get(self, name: str) -> Optional[Node]:
        """
        Fetch node by name.
        Returns None if not found.
        """
        raise NotImplementedError

    @abstractmethod
    def add(self, node: Node) -> None:
        """
        Register a node, replacing any node with the same name.
        """
        raise NotImplementedError

    @abstractmethod
    def remove(self, node: Node) -> None:
        """
        Unregister a node.
        Must fail with NodeNotFoundError if it is not registered.
        """
        raise NotImplementedError

    @abstractmethod
    def replace_all(self, nodes: Iterable[Node]) -> None:
        """
        Replace the whole node list in one write.
        Readers must never observe a partial replacement.
        Fails with RegistryWriteError.
        """
        raise NotImplementedError

    # -------------------------
    # COMPUTER CONTROL
    # -------------------------

    @abstractmethod
    def computer_state(self, name: str) -> Optional[ComputerState]:
        """
        Runtime state of the node's computer, None if the node has none.
        """
        raise NotImplementedError

    @abstractmethod
    def set_temporarily_offline(self, name: str, offline: bool, reason: Optional[str] = None) -> None:
        raise NotImplementedError

    @abstractmethod
    def connect(self, name: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def disconnect(self, name: str, reason: Optional[str] = None) -> None:
        raise NotImplementedError
