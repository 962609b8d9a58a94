# nodeconfig_engine/core/messages.py
"""User-facing messages for failures and setting divergence."""

# ============================================
# FAILURES
# ============================================

EMPTY_NODE_LIST = "No slaves were selected, or all selected slaves have been removed."
NO_SELECTED_SLAVES = "No slaves were selected."
NO_SELECTED_SETTINGS = "No settings were selected to change."
SLAVE_DELETED = "One or more of the selected slaves have been deleted by someone else."
EMPTY_NAME_LIST = "No names were given for the slaves to create."
EMPTY_COPY_STRING = "No slave to copy from was given."
UNDEFINED_MODE = "Undefined usage mode."
FAILED_TO_EDIT_NODE_LIST = "Failed to save the list of nodes."
FAILED_TO_INTERPRET_ENV_VARS = "Failed to interpret environment variables on slave."
FAILED_TO_CREATE_RETENTION_STRATEGY = "Failed to create the availability strategy."
INVALID_SUBMITTED_FORM = "The submitted form is invalid."
NO_USER_MODE = "Choose whether to configure, add, delete or manage slaves first."


def unknown_create_mode(mode) -> str:
    return f"Unknown create mode {mode!r}."


def cannot_apply_in_mode(mode: str) -> str:
    return f"Settings cannot be applied while in {mode} mode."


def no_slave_found(name: str) -> str:
    return f"No slave named {name} was found."


def failed_to_edit_slave(name: str) -> str:
    return f"Failed to edit slave {name}."


def failed_to_edit_slaves(names) -> str:
    return f"Failed to edit slaves: {' '.join(names)}"


def could_not_delete(names) -> str:
    return f"Could not delete the following slaves: {' '.join(names)}"


def wrong_interval(name: str, first: str, last: str) -> str:
    return f"The interval {name}{{{first}..{last}}} is not valid."


def slave_already_exists(names) -> str:
    return f"The following slaves already exist: {' '.join(sorted(names))}"


def unsafe_character(name: str, char: str) -> str:
    return f"'{char}' is an unsafe character in {name!r}."


def setting_type_mismatch(setting: str, name: str, found: str) -> str:
    return f"Setting {setting} does not apply to slave {name} ({found})."


# ============================================
# LAUNCHER DIVERGENCE
# ============================================

DIFFERENT_LAUNCH_METHODS = "The slaves use different launch methods."
DIFFERENT_USERNAME_PASSWORD = "The slaves have different user names and passwords."
DIFFERENT_USERNAME = "The slaves have different user names."
DIFFERENT_PASSWORD = "The slaves have different passwords."
DIFFERENT_LAUNCH_COMMAND = "The slaves have different launch commands."
DIFFERENT_VM_ARG_TUNNEL = "The slaves have different tunnels and JVM options."
DIFFERENT_VM_ARG = "The slaves have different JVM options."
DIFFERENT_TUNNEL = "The slaves have different tunnels."
UNABLE_TO_COMPARE_LAUNCH_METHODS = "Unable to compare the launch methods."

# ============================================
# RETENTION DIVERGENCE
# ============================================

DIFFERENT_RETENTION_STRATEGIES = "The slaves use different availability strategies."
DIFFERENT_IN_DEMAND_DELAY_IDLE_DELAY = "The slaves have different in demand delays and idle delays."
DIFFERENT_IN_DEMAND_DELAY = "The slaves have different in demand delays."
DIFFERENT_IDLE_DELAY = "The slaves have different idle delays."
DIFFERENT_STARTUP_SCHEDULE_UPTIME_KEEP_UP = (
    "The slaves have different startup schedules, scheduled uptimes and keep-online settings."
)
DIFFERENT_STARTUP_SCHEDULE_UPTIME = "The slaves have different startup schedules and scheduled uptimes."
DIFFERENT_UPTIME_KEEP_UP = "The slaves have different scheduled uptimes and keep-online settings."
DIFFERENT_STARTUP_SCHEDULE_KEEP_UP = "The slaves have different startup schedules and keep-online settings."
DIFFERENT_STARTUP_SCHEDULE = "The slaves have different startup schedules."
DIFFERENT_UPTIME = "The slaves have different scheduled uptimes."
DIFFERENT_KEEP_UP = "The slaves have different keep-online settings."
UNABLE_TO_COMPARE_RETENTION_STRATEGIES = "Unable to compare the availability strategies."
