#nodeconfig_engine\node_manager\node_list.py

"""List of selected nodes: common settings and bulk changes."""

import logging
import threading
from typing import Dict, Iterable, List, Optional

from nodeconfig_engine.core import messages
from nodeconfig_engine.core.environment import (
    from_variables,
    slave_from_variables,
    to_variables,
)
from nodeconfig_engine.core.errors import (
    ApplyError,
    EmptyCollectionError,
    RegistryWriteError,
    TypeMismatchError,
    ValidationError,
)
from nodeconfig_engine.core.factory import SlaveFactory, build_scheduled_retention
from nodeconfig_engine.core.models import (
    AlwaysRetention,
    CommandLauncher,
    DemandRetention,
    Launcher,
    ManagedServiceLauncher,
    ManagedSlave,
    NetworkListenerLauncher,
    Node,
    NodeMode,
    NodeProperty,
    RetentionStrategy,
    ScheduledRetention,
)
from nodeconfig_engine.core.repository import NodeRegistry
from nodeconfig_engine.core.setting import Setting, get_setting_string

logger = logging.getLogger(__name__)

# One reconciliation at a time per process
reconciliation_lock = threading.RLock()

# Fallbacks when a numeric common value is missing or unparsable
DEFAULT_IN_DEMAND_DELAY = 0
DEFAULT_IDLE_DELAY = 1
DEFAULT_UPTIME_MINS = 1
DEFAULT_KEEP_UP_WHEN_ACTIVE = "true"


def _parse_int(value: Optional[str], default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _parse_bool(value: str) -> bool:
    return value is not None and value.lower() == "true"


def _pick(new_value, old_value):
    return old_value if new_value is None else new_value


# ============================================
# LABELS & PROPERTIES
# ============================================

def add_labels(labels_to_add: Optional[str], old_labels: str) -> str:
    """Append the labels not already present, each label once."""
    if labels_to_add is None:
        return old_labels

    labels = (old_labels or "").split()
    for label in labels_to_add.split():
        if label not in labels:
            labels.append(label)
    return " ".join(labels)


def remove_labels(labels_to_remove: Optional[str], old_labels: str) -> str:
    if labels_to_remove is None:
        return old_labels

    unwanted = set(labels_to_remove.split())
    return " ".join(label for label in (old_labels or "").split() if label not in unwanted)


def merge_properties(
    new_properties: Optional[Iterable[NodeProperty]],
    old_properties: Optional[Iterable[NodeProperty]],
    remove_kinds: Optional[Iterable[str]],
) -> List[NodeProperty]:
    """
    Merge node properties with the precedence old, remove, new.

    Remove only affects current properties; a new property replaces any
    property of the same type and goes to the end of the list.
    """
    merged = list(old_properties or [])

    if remove_kinds:
        kinds = set(remove_kinds)
        merged = [p for p in merged if p.kind not in kinds]

    for new_property in new_properties or []:
        merged = [p for p in merged if type(p) is not type(new_property)]
        merged.append(new_property)

    return merged


class NodeList:
    """Ordered list of nodes. Membership is by node name."""

    def __init__(self, nodes: Optional[Iterable[Node]] = None):
        self._nodes: List[Node] = list(nodes or [])

    # -------------------------
    # LIST BEHAVIOUR
    # -------------------------

    def __iter__(self):
        return iter(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def __getitem__(self, index):
        return self._nodes[index]

    def __contains__(self, item) -> bool:
        name = item.name if isinstance(item, Node) else item
        return name in self.names()

    def __eq__(self, other) -> bool:
        if isinstance(other, NodeList):
            return self._nodes == other._nodes
        if isinstance(other, list):
            return self._nodes == other
        return NotImplemented

    def __str__(self) -> str:
        return " ".join(self.names())

    def __repr__(self) -> str:
        return f"<NodeList({self})>"

    def append(self, node: Node) -> None:
        self._nodes.append(node)

    def names(self) -> List[str]:
        return [node.name for node in self._nodes]

    def slaves(self) -> List[ManagedSlave]:
        """The managed slaves, in order."""
        return [node for node in self._nodes if isinstance(node, ManagedSlave)]

    def is_empty(self) -> bool:
        """True when the list holds no managed slaves, whatever else it holds."""
        return not self.slaves()

    def first_slave(self) -> Optional[ManagedSlave]:
        slaves = self.slaves()
        return slaves[0] if slaves else None

    def sort_by_name(self) -> "NodeList":
        self._nodes.sort(key=lambda node: node.name)
        return self

    def to_dicts(self) -> List[Dict[str, object]]:
        """Search result representation of the managed slaves."""
        return [
            {
                "name": slave.name,
                "labels": slave.label_string,
                "executors": slave.num_executors,
                "remoteFS": slave.remote_fs,
                "description": slave.description,
            }
            for slave in self.slaves()
        ]

    def slaves_still_exist(self, registry: NodeRegistry) -> bool:
        return all(registry.get(node.name) is not None for node in self._nodes)

    def has_labels(self, labels: Optional[str]) -> bool:
        """Check that every label exists on at least one node in this list."""
        if labels is None:
            return True

        for label in labels.split():
            if not any(label in node.label_string.split() for node in self._nodes):
                return False
        return True

    # -------------------------
    # COMMON SETTINGS
    # -------------------------

    def _require_first_slave(self) -> ManagedSlave:
        first = self.first_slave()
        if first is None:
            raise EmptyCollectionError(messages.EMPTY_NODE_LIST)
        return first

    def get_common(self, setting: Setting) -> Optional[str]:
        """
        Common value of a setting for all slaves, None if there is none.

        Values equal as they are win over values equal only after the
        slave's own name is replaced with $NAME.
        """
        first = self._require_first_slave()

        first_value = get_setting_string(setting, first)
        first_variables = to_variables(first.name, first_value)

        exact_same = True
        variables_same = True

        for slave in self.slaves():
            value = get_setting_string(setting, slave)

            if value != first_value:
                exact_same = False
            if to_variables(slave.name, value) != first_variables:
                variables_same = False
            if not exact_same and not variables_same:
                return None

        if exact_same:
            return first_value
        return first_variables

    def get_common_by_name(self, setting_name: str) -> Optional[str]:
        return self.get_common(Setting[setting_name])

    def get_common_mode(self) -> Optional[NodeMode]:
        first_mode = self._require_first_slave().mode
        for slave in self.slaves():
            if slave.mode != first_mode:
                return None
        return first_mode

    def get_common_launcher(self) -> Optional[Launcher]:
        """
        Common launcher, None if the launcher types differ.

        With equal types each field holds its common value, or is empty
        when the slaves disagree on it.
        """
        first_launcher = self._require_first_slave().launcher

        for slave in self.slaves():
            if type(slave.launcher) is not type(first_launcher):
                return None

        if isinstance(first_launcher, ManagedServiceLauncher):
            return ManagedServiceLauncher(
                user_name=self.get_common(Setting.USERNAME) or "",
                password=self.get_common(Setting.PASSWORD) or "",
            )
        if isinstance(first_launcher, CommandLauncher):
            return CommandLauncher(command=self.get_common(Setting.LAUNCH_COMMAND) or "")
        if isinstance(first_launcher, NetworkListenerLauncher):
            return NetworkListenerLauncher(
                tunnel=self.get_common(Setting.TUNNEL) or "",
                vm_args=self.get_common(Setting.VM_ARGS) or "",
            )
        return first_launcher

    def get_common_retention_strategy(self) -> Optional[RetentionStrategy]:
        """Common retention strategy, None if the strategy types differ."""
        first_strategy = self._require_first_slave().retention_strategy

        for slave in self.slaves():
            if type(slave.retention_strategy) is not type(first_strategy):
                return None

        if isinstance(first_strategy, DemandRetention):
            return DemandRetention(
                in_demand_delay=_parse_int(
                    self.get_common(Setting.IN_DEMAND_DELAY), DEFAULT_IN_DEMAND_DELAY
                ),
                idle_delay=_parse_int(self.get_common(Setting.IDLE_DELAY), DEFAULT_IDLE_DELAY),
            )

        if isinstance(first_strategy, ScheduledRetention):
            up_time_mins = _parse_int(self.get_common(Setting.UPTIME_MINS), DEFAULT_UPTIME_MINS)
            start_time_spec = self.get_common(Setting.START_TIME_SPEC) or ""
            keep_up_when_active = self.get_common(Setting.KEEP_UP_WHEN_ACTIVE)
            if keep_up_when_active is None:
                keep_up_when_active = DEFAULT_KEEP_UP_WHEN_ACTIVE

            keep_up_when_active = _parse_bool(keep_up_when_active)
            try:
                return build_scheduled_retention(start_time_spec, up_time_mins, keep_up_when_active)
            except ValidationError:
                # A schedule common only in $NAME form is not a valid schedule
                return build_scheduled_retention("", up_time_mins, keep_up_when_active)

        return first_strategy

    def get_common_properties(self) -> List[NodeProperty]:
        """Properties present with identical content on every slave."""
        first = self._require_first_slave()
        slaves = self.slaves()
        return [
            node_property for node_property in first.node_properties
            if all(node_property in slave.node_properties for slave in slaves)
        ]

    def launcher_description(self) -> str:
        """Explains which launcher settings differ, empty when none do."""
        if self.get_common_launcher() is None:
            return messages.DIFFERENT_LAUNCH_METHODS

        launcher = self.first_slave().launcher
        if isinstance(launcher, ManagedServiceLauncher):
            user_name = self.get_common(Setting.USERNAME)
            password = self.get_common(Setting.PASSWORD)
            if user_name is None and password is None:
                return messages.DIFFERENT_USERNAME_PASSWORD
            if user_name is None:
                return messages.DIFFERENT_USERNAME
            if password is None:
                return messages.DIFFERENT_PASSWORD
            return ""

        if isinstance(launcher, CommandLauncher):
            if self.get_common(Setting.LAUNCH_COMMAND) is None:
                return messages.DIFFERENT_LAUNCH_COMMAND
            return ""

        if isinstance(launcher, NetworkListenerLauncher):
            vm_args = self.get_common(Setting.VM_ARGS)
            tunnel = self.get_common(Setting.TUNNEL)
            if vm_args is None and tunnel is None:
                return messages.DIFFERENT_VM_ARG_TUNNEL
            if vm_args is None:
                return messages.DIFFERENT_VM_ARG
            if tunnel is None:
                return messages.DIFFERENT_TUNNEL
            return ""

        return messages.UNABLE_TO_COMPARE_LAUNCH_METHODS

    def retention_description(self) -> str:
        """Explains which retention settings differ, empty when none do."""
        if self.get_common_retention_strategy() is None:
            return messages.DIFFERENT_RETENTION_STRATEGIES

        strategy = self.first_slave().retention_strategy
        if isinstance(strategy, DemandRetention):
            in_demand_delay = self.get_common(Setting.IN_DEMAND_DELAY)
            idle_delay = self.get_common(Setting.IDLE_DELAY)
            if in_demand_delay is None and idle_delay is None:
                return messages.DIFFERENT_IN_DEMAND_DELAY_IDLE_DELAY
            if in_demand_delay is None:
                return messages.DIFFERENT_IN_DEMAND_DELAY
            if idle_delay is None:
                return messages.DIFFERENT_IDLE_DELAY
            return ""

        if isinstance(strategy, ScheduledRetention):
            start = self.get_common(Setting.START_TIME_SPEC) is None
            uptime = self.get_common(Setting.UPTIME_MINS) is None
            keep_up = self.get_common(Setting.KEEP_UP_WHEN_ACTIVE) is None
            if start and uptime and keep_up:
                return messages.DIFFERENT_STARTUP_SCHEDULE_UPTIME_KEEP_UP
            if start and uptime:
                return messages.DIFFERENT_STARTUP_SCHEDULE_UPTIME
            if uptime and keep_up:
                return messages.DIFFERENT_UPTIME_KEEP_UP
            if start and keep_up:
                return messages.DIFFERENT_STARTUP_SCHEDULE_KEEP_UP
            if start:
                return messages.DIFFERENT_STARTUP_SCHEDULE
            if uptime:
                return messages.DIFFERENT_UPTIME
            if keep_up:
                return messages.DIFFERENT_KEEP_UP
            return ""

        if isinstance(strategy, AlwaysRetention):
            return ""
        return messages.UNABLE_TO_COMPARE_RETENTION_STRATEGIES

    # -------------------------
    # BULK CHANGE
    # -------------------------

    def complementary_nodes(self, registry: NodeRegistry) -> List[Node]:
        """Registered nodes that are not in this list."""
        names = set(self.names())
        return [
            node for node in registry.list_nodes()
            if node is not None and node.name not in names
        ]

    def change_settings(self, patch, registry: NodeRegistry) -> "NodeList":
        """
        Apply a settings patch to every slave in this list and save the
        master's node list in one write.

        Nodes that are not managed slaves pass through untouched. A slave
        that cannot be rebuilt keeps its registered configuration and is
        reported in the ApplyError raised after the write.
        """
        with reconciliation_lock:
            complementary = self.complementary_nodes(registry)
            changed: List[Node] = []
            failures: Dict[str, str] = {}

            for node in self._nodes:
                if not isinstance(node, ManagedSlave):
                    changed.append(node)
                    continue

                try:
                    changed.append(self._changed_slave(node, patch))
                except (ValidationError, TypeMismatchError) as e:
                    logger.warning(f"Failed to edit slave {node.name} cause: {e}")
                    failures[node.name] = f"{messages.failed_to_edit_slave(node.name)} {e}"

                    registered = registry.get(node.name)
                    if registered is not None:
                        changed.append(registered)

            try:
                registry.replace_all(complementary + changed)
            except RegistryWriteError as e:
                logger.warning(f"Failed to edit node list: {e}")
                raise ApplyError(messages.FAILED_TO_EDIT_NODE_LIST, failures=failures) from e

            result = NodeList(changed)

        if failures:
            raise ApplyError(
                messages.failed_to_edit_slaves(failures.keys()),
                failures=failures,
                applied=result,
            )
        return result

    @staticmethod
    def _changed_slave(slave: ManagedSlave, patch) -> ManagedSlave:
        labels = _pick(patch.set_labels, slave.label_string)
        labels = add_labels(from_variables(slave.name, patch.add_labels), labels)
        labels = remove_labels(from_variables(slave.name, patch.remove_labels), labels)

        properties = merge_properties(
            patch.add_or_change_properties,
            slave.node_properties,
            patch.remove_properties,
        )

        changed = SlaveFactory.create(
            name=slave.name,
            description=_pick(patch.description, slave.description),
            remote_fs=_pick(patch.remote_fs, slave.remote_fs),
            num_executors=_pick(patch.num_executors, slave.num_executors),
            mode=_pick(patch.mode, slave.mode),
            label_string=labels,
            launcher=_pick(patch.launcher, slave.launcher),
            retention_strategy=_pick(patch.retention_strategy, slave.retention_strategy),
            node_properties=properties,
        )
        return slave_from_variables(changed)
