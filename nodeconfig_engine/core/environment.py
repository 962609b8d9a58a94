#nodeconfig_engine\core\environment.py

"""
Environment variable interpretation on slave settings.

Only $NAME is understood: it stands for the slave's own node name.
Substitution is plain string replacement, so a node name that also
occurs inside unrelated text is replaced there too.
"""

import logging
from typing import Optional

from nodeconfig_engine.core import messages
from nodeconfig_engine.core.errors import ValidationError
from nodeconfig_engine.core.factory import SlaveFactory
from nodeconfig_engine.core.models import (
    CommandLauncher,
    ManagedServiceLauncher,
    ManagedSlave,
    NetworkListenerLauncher,
)

logger = logging.getLogger(__name__)

NAME_VARIABLE = "$NAME"


# ============================================
# STRINGS
# ============================================

def to_variables(node_name: str, text: Optional[str]) -> Optional[str]:
    """Replace the literal node name with $NAME."""
    if text is None:
        return None
    return text.replace(node_name, NAME_VARIABLE)


def from_variables(node_name: str, text: Optional[str]) -> Optional[str]:
    """Replace $NAME with the literal node name."""
    if text is None:
        return None
    return text.replace(NAME_VARIABLE, node_name)


def contains_variables(text: Optional[str]) -> bool:
    if text is None:
        return False
    return NAME_VARIABLE in text


# ============================================
# SLAVES
# ============================================

def slave_to_variables(slave: ManagedSlave) -> ManagedSlave:
    """New slave with its own name replaced by $NAME in the free-text settings."""
    return _interpret(slave, to_variables)


def slave_from_variables(slave: ManagedSlave) -> ManagedSlave:
    """New slave with $NAME replaced by its own name in the free-text settings."""
    return _interpret(slave, from_variables)


def _interpret(slave: ManagedSlave, interpret) -> ManagedSlave:
    name = slave.name
    launcher = slave.launcher

    if isinstance(launcher, CommandLauncher):
        launcher = CommandLauncher(command=interpret(name, launcher.command))
    elif isinstance(launcher, ManagedServiceLauncher):
        launcher = ManagedServiceLauncher(
            user_name=interpret(name, launcher.user_name),
            password=interpret(name, launcher.password),
        )
    elif isinstance(launcher, NetworkListenerLauncher):
        launcher = NetworkListenerLauncher(
            tunnel=interpret(name, launcher.tunnel or ""),
            vm_args=interpret(name, launcher.vm_args or ""),
        )

    try:
        return SlaveFactory.copy(
            slave,
            description=interpret(name, slave.description),
            remote_fs=interpret(name, slave.remote_fs),
            label_string=interpret(name, slave.label_string),
            launcher=launcher,
        )
    except ValidationError as e:
        logger.warning(f"Failed to interpret environment variables on slave {name}: {e}")
        raise ValidationError(messages.FAILED_TO_INTERPRET_ENV_VARS) from e
