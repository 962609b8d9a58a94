#nodeconfig_engine\core\setting.py
"""Comparable string settings of a slave."""

from enum import Enum
from typing import Callable, Dict

from nodeconfig_engine.core import messages
from nodeconfig_engine.core.errors import TypeMismatchError
from nodeconfig_engine.core.models import (
    CommandLauncher,
    DemandRetention,
    ManagedServiceLauncher,
    ManagedSlave,
    NetworkListenerLauncher,
    ScheduledRetention,
)


class Setting(Enum):
    """Available setting types."""
    LABELS = "LABELS"
    DESCRIPTION = "DESCRIPTION"
    NUM_EXECUTORS = "NUM_EXECUTORS"
    REMOTE_FS = "REMOTE_FS"
    LAUNCH_COMMAND = "LAUNCH_COMMAND"
    PASSWORD = "PASSWORD"
    USERNAME = "USERNAME"
    TUNNEL = "TUNNEL"
    VM_ARGS = "VM_ARGS"
    IDLE_DELAY = "IDLE_DELAY"
    IN_DEMAND_DELAY = "IN_DEMAND_DELAY"
    KEEP_UP_WHEN_ACTIVE = "KEEP_UP_WHEN_ACTIVE"
    START_TIME_SPEC = "START_TIME_SPEC"
    UPTIME_MINS = "UPTIME_MINS"


def _fix_null(value) -> str:
    return "" if value is None else value


def _bool_string(value: bool) -> str:
    return "true" if value else "false"


def _launcher(slave: ManagedSlave, setting: Setting, expected):
    launcher = slave.launcher
    if not isinstance(launcher, expected):
        raise TypeMismatchError(
            messages.setting_type_mismatch(setting.value, slave.name, type(launcher).__name__)
        )
    return launcher


def _retention(slave: ManagedSlave, setting: Setting, expected):
    strategy = slave.retention_strategy
    if not isinstance(strategy, expected):
        raise TypeMismatchError(
            messages.setting_type_mismatch(setting.value, slave.name, type(strategy).__name__)
        )
    return strategy


_ACCESSORS: Dict[Setting, Callable[[ManagedSlave], str]] = {
    Setting.LABELS: lambda s: s.label_string,
    Setting.DESCRIPTION: lambda s: s.description,
    Setting.NUM_EXECUTORS: lambda s: str(s.num_executors),
    Setting.REMOTE_FS: lambda s: s.remote_fs,
    Setting.LAUNCH_COMMAND:
        lambda s: _launcher(s, Setting.LAUNCH_COMMAND, CommandLauncher).command,
    Setting.PASSWORD:
        lambda s: _launcher(s, Setting.PASSWORD, ManagedServiceLauncher).password,
    Setting.USERNAME:
        lambda s: _launcher(s, Setting.USERNAME, ManagedServiceLauncher).user_name,
    Setting.TUNNEL:
        lambda s: _fix_null(_launcher(s, Setting.TUNNEL, NetworkListenerLauncher).tunnel),
    Setting.VM_ARGS:
        lambda s: _fix_null(_launcher(s, Setting.VM_ARGS, NetworkListenerLauncher).vm_args),
    Setting.IDLE_DELAY:
        lambda s: str(_retention(s, Setting.IDLE_DELAY, DemandRetention).idle_delay),
    Setting.IN_DEMAND_DELAY:
        lambda s: str(_retention(s, Setting.IN_DEMAND_DELAY, DemandRetention).in_demand_delay),
    Setting.KEEP_UP_WHEN_ACTIVE:
        lambda s: _bool_string(
            _retention(s, Setting.KEEP_UP_WHEN_ACTIVE, ScheduledRetention).keep_up_when_active
        ),
    Setting.START_TIME_SPEC:
        lambda s: _retention(s, Setting.START_TIME_SPEC, ScheduledRetention).start_time_spec,
    Setting.UPTIME_MINS:
        lambda s: str(_retention(s, Setting.UPTIME_MINS, ScheduledRetention).up_time_mins),
}


def get_setting_string(setting: Setting, slave: ManagedSlave) -> str:
    """Read one setting off a slave as a string."""
    return _ACCESSORS[setting](slave)
