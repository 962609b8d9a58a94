#nodeconfig_engine\core\models.py
"""Node, launcher, retention strategy and node property models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Dict, Optional, Tuple, Type, Union


# ============================================
# ENUMS
# ============================================

class NodeMode(Enum):
    """How a node accepts builds."""
    NORMAL = "NORMAL"
    EXCLUSIVE = "EXCLUSIVE"


# ============================================
# LAUNCHERS
# ============================================

@dataclass(frozen=True)
class CommandLauncher:
    """Starts the agent by running a command on the master."""
    command: str = ""


@dataclass(frozen=True)
class ManagedServiceLauncher:
    """Starts the agent as a managed service with credentials."""
    user_name: str = ""
    password: str = ""


@dataclass(frozen=True)
class NetworkListenerLauncher:
    """The agent connects to the master itself."""
    tunnel: Optional[str] = None
    vm_args: Optional[str] = None


Launcher = Union[CommandLauncher, ManagedServiceLauncher, NetworkListenerLauncher]


# ============================================
# RETENTION STRATEGIES
# ============================================

@dataclass(frozen=True)
class AlwaysRetention:
    """Keep the node online as much as possible."""


@dataclass(frozen=True)
class DemandRetention:
    """Take online when in demand, offline when idle (delays in minutes)."""
    in_demand_delay: int = 0
    idle_delay: int = 1


@dataclass(frozen=True)
class ScheduledRetention:
    """Take online on a cron-like schedule."""
    start_time_spec: str = ""
    up_time_mins: int = 1
    keep_up_when_active: bool = True


RetentionStrategy = Union[AlwaysRetention, DemandRetention, ScheduledRetention]


# ============================================
# NODE PROPERTIES
# ============================================

@dataclass(frozen=True)
class NodeProperty:
    """Kind-tagged attachment on a node. Compared by kind and content."""
    kind: ClassVar[str] = ""
    display_name: ClassVar[str] = ""


@dataclass(frozen=True)
class EnvironmentVariablesProperty(NodeProperty):
    """Environment variables exported to builds on the node."""
    kind: ClassVar[str] = "environment-variables"
    display_name: ClassVar[str] = "Environment variables"

    variables: Tuple[Tuple[str, str], ...] = ()

    @classmethod
    def of(cls, **variables: str) -> "EnvironmentVariablesProperty":
        return cls(variables=tuple(variables.items()))


@dataclass(frozen=True)
class ToolLocationProperty(NodeProperty):
    """Per-node installation directories of tools."""
    kind: ClassVar[str] = "tool-locations"
    display_name: ClassVar[str] = "Tool Locations"

    locations: Tuple[Tuple[str, str], ...] = ()


PROPERTY_KINDS: Dict[str, Type[NodeProperty]] = {
    EnvironmentVariablesProperty.kind: EnvironmentVariablesProperty,
    ToolLocationProperty.kind: ToolLocationProperty,
}


def property_display_name(kind: str) -> str:
    """Readable name for a property kind, empty when unknown."""
    property_class = PROPERTY_KINDS.get(kind)
    if property_class is None:
        return ""
    return property_class.display_name


# ============================================
# NODES
# ============================================

@dataclass(frozen=True)
class Node:
    """Any node registered on the master. Only its name is identity."""
    name: str
    description: str = ""
    num_executors: int = 1
    mode: NodeMode = NodeMode.NORMAL
    label_string: str = ""


@dataclass(frozen=True)
class ManagedSlave(Node):
    """Node with the full configurable attribute set."""
    remote_fs: str = ""
    launcher: Launcher = field(default_factory=CommandLauncher)
    retention_strategy: RetentionStrategy = field(default_factory=AlwaysRetention)
    node_properties: Tuple[NodeProperty, ...] = ()
