#nodeconfig_engine\node_manager\session.py

"""Per-caller workflow state, owned by the caller's session framework."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from nodeconfig_engine.node_manager.node_list import NodeList
from nodeconfig_engine.node_manager.patch import SettingsPatch


class UserMode(Enum):
    """What the user is doing with the selected nodes."""
    CONFIGURE = "CONFIGURE"
    DELETE = "DELETE"
    ADD = "ADD"
    MANAGE = "MANAGE"


@dataclass
class SessionContext:
    """Selection and last results of one user's workflow."""
    user_mode: Optional[UserMode] = None
    node_list: Optional[NodeList] = None
    last_changed_settings: Optional[SettingsPatch] = None
    had_labels: bool = True
