# nodeconfig_engine/infrastructure/memory/registry.py

from threading import Lock
from typing import Dict, Iterable, List, Optional

from nodeconfig_engine.core.errors import NodeNotFoundError, RegistryWriteError
from nodeconfig_engine.core.models import Node
from nodeconfig_engine.core.repository import ComputerState, NodeRegistry


class InMemoryNodeRegistry(NodeRegistry):
    def __init__(self, nodes: Iterable[Node] = ()):
        self._nodes: Dict[str, Node] = {}
        self._computers: Dict[str, ComputerState] = {}
        self._lock = Lock()
        for node in nodes:
            self.add(node)

    def list_nodes(self) -> List[Node]:
        with self._lock:
            return list(self._nodes.values())

    def get(self, name: str) -> Optional[Node]:
        return self._nodes.get(name)

    def add(self, node: Node) -> None:
        with self._lock:
            self._nodes[node.name] = node
            self._computers.setdefault(node.name, ComputerState())

    def remove(self, node: Node) -> None:
        with self._lock:
            if node.name not in self._nodes:
                raise NodeNotFoundError(f"Node {node.name} is not registered")
            del self._nodes[node.name]
            self._computers.pop(node.name, None)

    def replace_all(self, nodes: Iterable[Node]) -> None:
        nodes = list(nodes)
        names = [node.name for node in nodes]
        if len(set(names)) != len(names):
            raise RegistryWriteError("Node list holds duplicate names")

        with self._lock:
            self._nodes = {node.name: node for node in nodes}
            self._computers = {
                name: self._computers.get(name) or ComputerState()
                for name in names
            }

    # -------------------------
    # COMPUTER CONTROL
    # -------------------------

    def computer_state(self, name: str) -> Optional[ComputerState]:
        return self._computers.get(name)

    def set_temporarily_offline(self, name: str, offline: bool, reason: Optional[str] = None) -> None:
        with self._lock:
            state = self._require_computer(name)
            state.temporarily_offline = offline
            state.offline_reason = reason if offline else None

    def connect(self, name: str) -> None:
        with self._lock:
            self._require_computer(name).connected = True

    def disconnect(self, name: str, reason: Optional[str] = None) -> None:
        with self._lock:
            state = self._require_computer(name)
            state.connected = False
            state.offline_reason = reason

    def _require_computer(self, name: str) -> ComputerState:
        state = self._computers.get(name)
        if state is None:
            raise NodeNotFoundError(f"Node {name} is not registered")
        return state
