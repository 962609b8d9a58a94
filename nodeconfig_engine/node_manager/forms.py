# nodeconfig_engine/node_manager/forms.py
"""Submitted settings form, turned into a SettingsPatch."""

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, PositiveInt, field_validator
from pydantic import ValidationError as PydanticValidationError

from nodeconfig_engine.core import messages
from nodeconfig_engine.core.errors import ValidationError
from nodeconfig_engine.core.models import (
    AlwaysRetention,
    CommandLauncher,
    DemandRetention,
    EnvironmentVariablesProperty,
    ManagedServiceLauncher,
    NetworkListenerLauncher,
    NodeMode,
    ScheduledRetention,
    ToolLocationProperty,
)
from nodeconfig_engine.node_manager.patch import SettingsPatch


# ============================================
# LAUNCHERS
# ============================================

class CommandLauncherForm(BaseModel):
    kind: Literal["command"]
    command: str = ""

    def build(self):
        return CommandLauncher(command=self.command)


class ManagedServiceLauncherForm(BaseModel):
    kind: Literal["managed-service"]
    user_name: str = ""
    password: str = ""

    def build(self):
        return ManagedServiceLauncher(user_name=self.user_name, password=self.password)


class NetworkListenerLauncherForm(BaseModel):
    kind: Literal["network-listener"]
    tunnel: Optional[str] = None
    vm_args: Optional[str] = None

    def build(self):
        return NetworkListenerLauncher(tunnel=self.tunnel, vm_args=self.vm_args)


LauncherForm = Annotated[
    Union[CommandLauncherForm, ManagedServiceLauncherForm, NetworkListenerLauncherForm],
    Field(discriminator="kind"),
]


# ============================================
# RETENTION STRATEGIES
# ============================================

class AlwaysRetentionForm(BaseModel):
    kind: Literal["always"]

    def build(self):
        return AlwaysRetention()


class DemandRetentionForm(BaseModel):
    kind: Literal["demand"]
    in_demand_delay: NonNegativeInt = 0
    idle_delay: NonNegativeInt = 1

    def build(self):
        return DemandRetention(in_demand_delay=self.in_demand_delay, idle_delay=self.idle_delay)


class ScheduledRetentionForm(BaseModel):
    kind: Literal["scheduled"]
    start_time_spec: str = ""
    up_time_mins: PositiveInt = 1
    keep_up_when_active: bool = True

    def build(self):
        return ScheduledRetention(
            start_time_spec=self.start_time_spec,
            up_time_mins=self.up_time_mins,
            keep_up_when_active=self.keep_up_when_active,
        )


RetentionForm = Annotated[
    Union[AlwaysRetentionForm, DemandRetentionForm, ScheduledRetentionForm],
    Field(discriminator="kind"),
]


# ============================================
# NODE PROPERTIES
# ============================================

class EnvironmentVariablesForm(BaseModel):
    kind: Literal["environment-variables"]
    variables: Dict[str, str] = Field(default_factory=dict)

    def build(self):
        return EnvironmentVariablesProperty(variables=tuple(self.variables.items()))


class ToolLocationForm(BaseModel):
    kind: Literal["tool-locations"]
    locations: Dict[str, str] = Field(default_factory=dict)

    def build(self):
        return ToolLocationProperty(locations=tuple(self.locations.items()))


PropertyForm = Annotated[
    Union[EnvironmentVariablesForm, ToolLocationForm],
    Field(discriminator="kind"),
]


class RemovePropertyForm(BaseModel):
    kind: str


# ============================================
# SETTINGS FORM
# ============================================

class SettingsForm(BaseModel):
    """
    Settings page submission.

    Each "_field" checkbox says whether the matching value should be
    changed; unchecked values are ignored.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    use_description: bool = Field(False, alias="_description")
    description: Optional[str] = None

    use_remote_fs: bool = Field(False, alias="_remoteFS")
    remote_fs: Optional[str] = Field(None, alias="remoteFS")

    use_num_executors: bool = Field(False, alias="_numExecutors")
    num_executors: Optional[Union[int, str]] = Field(None, alias="numExecutors")

    use_mode: bool = Field(False, alias="_mode")
    mode: Optional[str] = None

    use_label_string: bool = Field(False, alias="_labelString")
    label_string: Optional[str] = Field(None, alias="labelString")

    use_add_label_string: bool = Field(False, alias="_addLabelString")
    add_label_string: Optional[str] = Field(None, alias="addLabelString")

    use_remove_label_string: bool = Field(False, alias="_removeLabelString")
    remove_label_string: Optional[str] = Field(None, alias="removeLabelString")

    use_launcher: bool = Field(False, alias="_launcher")
    launcher: Optional[LauncherForm] = None

    use_retention_strategy: bool = Field(False, alias="_retentionStrategy")
    retention_strategy: Optional[RetentionForm] = Field(None, alias="retentionStrategy")

    add_or_change_properties: List[PropertyForm] = Field(
        default_factory=list, alias="addOrChangeProperties"
    )
    remove_properties: List[RemovePropertyForm] = Field(
        default_factory=list, alias="removeProperties"
    )

    @field_validator("add_or_change_properties", "remove_properties", mode="before")
    @classmethod
    def _single_or_many(cls, value: Any):
        """One selected property arrives as an object, several as a list."""
        if value is None:
            return []
        if isinstance(value, dict):
            return [value]
        return value

    @classmethod
    def parse(cls, data: Dict[str, Any]) -> SettingsPatch:
        """Validate a submitted form and convert it to a patch."""
        try:
            form = cls.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(f"{messages.INVALID_SUBMITTED_FORM} {e}") from e
        return form.to_patch()

    def to_patch(self) -> SettingsPatch:
        patch = SettingsPatch()

        if self.use_description:
            patch.description = self.description or ""
        if self.use_remote_fs:
            patch.remote_fs = self.remote_fs or ""
        if self.use_num_executors:
            patch.num_executors = self.num_executors
        if self.use_mode:
            patch.mode = self._parse_mode(self.mode)
        if self.use_label_string:
            patch.set_labels = self.label_string or ""
        if self.use_add_label_string:
            patch.add_labels = self.add_label_string or ""
        if self.use_remove_label_string:
            patch.remove_labels = self.remove_label_string or ""
        if self.use_launcher and self.launcher is not None:
            patch.launcher = self.launcher.build()
        if self.use_retention_strategy and self.retention_strategy is not None:
            patch.retention_strategy = self.retention_strategy.build()
        if self.add_or_change_properties:
            patch.add_or_change_properties = [p.build() for p in self.add_or_change_properties]
        if self.remove_properties:
            patch.remove_properties = [p.kind for p in self.remove_properties]

        return patch

    @staticmethod
    def _parse_mode(mode: Optional[str]) -> NodeMode:
        if mode == "NORMAL":
            return NodeMode.NORMAL
        if mode == "EXCLUSIVE":
            return NodeMode.EXCLUSIVE
        raise ValidationError(messages.UNDEFINED_MODE)
