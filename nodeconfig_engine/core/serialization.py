#nodeconfig_engine\core\serialization.py

"""Plain-dict codec for nodes (used by the SQL registry)."""

from typing import Any, Dict

from nodeconfig_engine.core.errors import ValidationError
from nodeconfig_engine.core.models import (
    PROPERTY_KINDS,
    AlwaysRetention,
    CommandLauncher,
    DemandRetention,
    EnvironmentVariablesProperty,
    Launcher,
    ManagedServiceLauncher,
    ManagedSlave,
    NetworkListenerLauncher,
    Node,
    NodeMode,
    NodeProperty,
    RetentionStrategy,
    ScheduledRetention,
    ToolLocationProperty,
)

NODE_KIND = "node"
SLAVE_KIND = "managed-slave"


# ============================================
# LAUNCHER
# ============================================

def launcher_to_dict(launcher: Launcher) -> Dict[str, Any]:
    if isinstance(launcher, CommandLauncher):
        return {"kind": "command", "command": launcher.command}
    if isinstance(launcher, ManagedServiceLauncher):
        return {
            "kind": "managed-service",
            "user_name": launcher.user_name,
            "password": launcher.password,
        }
    if isinstance(launcher, NetworkListenerLauncher):
        return {"kind": "network-listener", "tunnel": launcher.tunnel, "vm_args": launcher.vm_args}
    raise ValidationError(f"Unknown launcher: {launcher!r}")


def launcher_from_dict(data: Dict[str, Any]) -> Launcher:
    kind = data.get("kind")
    if kind == "command":
        return CommandLauncher(command=data.get("command") or "")
    if kind == "managed-service":
        return ManagedServiceLauncher(
            user_name=data.get("user_name") or "",
            password=data.get("password") or "",
        )
    if kind == "network-listener":
        return NetworkListenerLauncher(tunnel=data.get("tunnel"), vm_args=data.get("vm_args"))
    raise ValidationError(f"Unknown launcher kind: {kind!r}")


# ============================================
# RETENTION STRATEGY
# ============================================

def retention_to_dict(strategy: RetentionStrategy) -> Dict[str, Any]:
    if isinstance(strategy, AlwaysRetention):
        return {"kind": "always"}
    if isinstance(strategy, DemandRetention):
        return {
            "kind": "demand",
            "in_demand_delay": strategy.in_demand_delay,
            "idle_delay": strategy.idle_delay,
        }
    if isinstance(strategy, ScheduledRetention):
        return {
            "kind": "scheduled",
            "start_time_spec": strategy.start_time_spec,
            "up_time_mins": strategy.up_time_mins,
            "keep_up_when_active": strategy.keep_up_when_active,
        }
    raise ValidationError(f"Unknown retention strategy: {strategy!r}")


def retention_from_dict(data: Dict[str, Any]) -> RetentionStrategy:
    kind = data.get("kind")
    if kind == "always":
        return AlwaysRetention()
    if kind == "demand":
        return DemandRetention(
            in_demand_delay=int(data.get("in_demand_delay", 0)),
            idle_delay=int(data.get("idle_delay", 1)),
        )
    if kind == "scheduled":
        return ScheduledRetention(
            start_time_spec=data.get("start_time_spec") or "",
            up_time_mins=int(data.get("up_time_mins", 1)),
            keep_up_when_active=bool(data.get("keep_up_when_active", True)),
        )
    raise ValidationError(f"Unknown retention strategy kind: {kind!r}")


# ============================================
# NODE PROPERTIES
# ============================================

def property_to_dict(node_property: NodeProperty) -> Dict[str, Any]:
    if isinstance(node_property, EnvironmentVariablesProperty):
        return {"kind": node_property.kind, "variables": [list(p) for p in node_property.variables]}
    if isinstance(node_property, ToolLocationProperty):
        return {"kind": node_property.kind, "locations": [list(p) for p in node_property.locations]}
    raise ValidationError(f"Unknown node property: {node_property!r}")


def property_from_dict(data: Dict[str, Any]) -> NodeProperty:
    kind = data.get("kind")
    if kind not in PROPERTY_KINDS:
        raise ValidationError(f"Unknown node property kind: {kind!r}")

    if kind == EnvironmentVariablesProperty.kind:
        return EnvironmentVariablesProperty(
            variables=tuple((k, v) for k, v in data.get("variables", []))
        )
    return ToolLocationProperty(
        locations=tuple((k, v) for k, v in data.get("locations", []))
    )


# ============================================
# NODE
# ============================================

def node_to_dict(node: Node) -> Dict[str, Any]:
    data = {
        "kind": NODE_KIND,
        "name": node.name,
        "description": node.description,
        "num_executors": node.num_executors,
        "mode": node.mode.value,
        "label_string": node.label_string,
    }
    if isinstance(node, ManagedSlave):
        data.update(
            kind=SLAVE_KIND,
            remote_fs=node.remote_fs,
            launcher=launcher_to_dict(node.launcher),
            retention_strategy=retention_to_dict(node.retention_strategy),
            node_properties=[property_to_dict(p) for p in node.node_properties],
        )
    return data


def node_from_dict(data: Dict[str, Any]) -> Node:
    common = dict(
        name=data["name"],
        description=data.get("description") or "",
        num_executors=int(data.get("num_executors", 1)),
        mode=NodeMode(data.get("mode", NodeMode.NORMAL.value)),
        label_string=data.get("label_string") or "",
    )
    if data.get("kind") != SLAVE_KIND:
        return Node(**common)

    return ManagedSlave(
        **common,
        remote_fs=data.get("remote_fs") or "",
        launcher=launcher_from_dict(data.get("launcher") or {"kind": "command"}),
        retention_strategy=retention_from_dict(data.get("retention_strategy") or {"kind": "always"}),
        node_properties=tuple(property_from_dict(p) for p in data.get("node_properties", [])),
    )
