#nodeconfig_engine\core\factory.py
from typing import Iterable, Optional, Union

from nodeconfig_engine.core import messages
from nodeconfig_engine.core.errors import ValidationError
from nodeconfig_engine.core.models import (
    DemandRetention,
    Launcher,
    ManagedSlave,
    NodeMode,
    NodeProperty,
    RetentionStrategy,
    ScheduledRetention,
)
from nodeconfig_engine.core.validation import (
    check_good_name,
    check_non_negative,
    check_start_time_spec,
    parse_num_executors,
)


def _fix_null(value: Optional[str]) -> str:
    return "" if value is None else value


def _to_mode(mode: Union[NodeMode, str, None]) -> NodeMode:
    if mode is None:
        return NodeMode.NORMAL
    if isinstance(mode, NodeMode):
        return mode
    try:
        return NodeMode(str(mode).upper())
    except ValueError:
        raise ValidationError(messages.UNDEFINED_MODE)


class SlaveFactory:
    """Builds slaves the way the master does, rejecting invalid combinations."""

    @staticmethod
    def create(
        *,
        name: str,
        description: Optional[str] = "",
        remote_fs: Optional[str] = "",
        num_executors: Union[int, str] = 1,
        mode: Union[NodeMode, str, None] = NodeMode.NORMAL,
        label_string: Optional[str] = "",
        launcher: Launcher,
        retention_strategy: RetentionStrategy,
        node_properties: Iterable[NodeProperty] = (),
    ) -> ManagedSlave:
        check_good_name(name)

        properties = tuple(node_properties or ())
        for node_property in properties:
            if not isinstance(node_property, NodeProperty):
                raise ValidationError(f"Not a node property: {node_property!r}")

        validate_retention_strategy(retention_strategy)

        return ManagedSlave(
            name=name.strip(),
            description=_fix_null(description),
            remote_fs=_fix_null(remote_fs).strip(),
            num_executors=parse_num_executors(num_executors),
            mode=_to_mode(mode),
            label_string=_fix_null(label_string).strip(),
            launcher=launcher,
            retention_strategy=retention_strategy,
            node_properties=properties,
        )

    @staticmethod
    def copy(slave: ManagedSlave, **changes) -> ManagedSlave:
        """Rebuild a slave with some attributes replaced."""
        values = dict(
            name=slave.name,
            description=slave.description,
            remote_fs=slave.remote_fs,
            num_executors=slave.num_executors,
            mode=slave.mode,
            label_string=slave.label_string,
            launcher=slave.launcher,
            retention_strategy=slave.retention_strategy,
            node_properties=slave.node_properties,
        )
        values.update(changes)
        return SlaveFactory.create(**values)


def validate_retention_strategy(strategy: RetentionStrategy) -> None:
    if isinstance(strategy, DemandRetention):
        check_non_negative(strategy.in_demand_delay, "In demand delay")
        check_non_negative(strategy.idle_delay, "Idle delay")
    elif isinstance(strategy, ScheduledRetention):
        check_start_time_spec(strategy.start_time_spec)
        if check_non_negative(strategy.up_time_mins, "Scheduled uptime") < 1:
            raise ValidationError("Scheduled uptime must be at least 1 minute")


def build_scheduled_retention(
    start_time_spec: str,
    up_time_mins: int,
    keep_up_when_active: bool,
) -> ScheduledRetention:
    strategy = ScheduledRetention(
        start_time_spec=start_time_spec,
        up_time_mins=up_time_mins,
        keep_up_when_active=keep_up_when_active,
    )
    try:
        validate_retention_strategy(strategy)
    except ValidationError as e:
        raise ValidationError(messages.FAILED_TO_CREATE_RETENTION_STRATEGY) from e
    return strategy
