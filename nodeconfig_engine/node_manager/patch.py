#nodeconfig_engine\node_manager\patch.py

"""Sparse settings patch applied to every selected slave."""

from dataclasses import dataclass, fields
from typing import List, Optional, Union

from nodeconfig_engine.core.models import (
    Launcher,
    NodeMode,
    NodeProperty,
    RetentionStrategy,
)


@dataclass
class SettingsPatch:
    """New values for the selected slaves. None means leave unchanged."""
    description: Optional[str] = None
    remote_fs: Optional[str] = None
    num_executors: Optional[Union[int, str]] = None
    set_labels: Optional[str] = None
    add_labels: Optional[str] = None
    remove_labels: Optional[str] = None
    mode: Optional[NodeMode] = None
    launcher: Optional[Launcher] = None
    retention_strategy: Optional[RetentionStrategy] = None
    add_or_change_properties: Optional[List[NodeProperty]] = None
    remove_properties: Optional[List[str]] = None

    def changed_fields(self) -> List[str]:
        """Names of the fields carrying a value."""
        return [f.name for f in fields(self) if getattr(self, f.name) is not None]

    def is_empty(self) -> bool:
        return not self.changed_fields()
