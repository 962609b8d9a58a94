# nodeconfig_engine/core/errors.py

from typing import Dict, Optional

# -----------------------------
# Base Errors
# -----------------------------

class NodeConfigError(Exception):
    """Base class for all node configuration errors."""
    pass


# -----------------------------
# Collection / Setting Errors
# -----------------------------

class EmptyCollectionError(NodeConfigError):
    """Operation needs at least one managed slave in the list."""
    pass


class TypeMismatchError(NodeConfigError):
    """Setting read against a launcher or retention variant it does not belong to."""
    pass


# -----------------------------
# Validation / Input Errors
# -----------------------------

class ValidationError(NodeConfigError):
    """Node construction or submitted input rejected."""
    pass


class NameConflictError(ValidationError):
    """One or more requested node names are already registered."""

    def __init__(self, message: str, names=()):
        super().__init__(message)
        self.names = sorted(names)


class InvalidIntervalError(ValidationError):
    """Non-numeric or reversed name range bounds."""
    pass


# -----------------------------
# Apply Errors
# -----------------------------

class ApplyError(NodeConfigError):
    """Bulk operation failed, fully or for some nodes."""

    def __init__(
        self,
        message: str,
        failures: Optional[Dict[str, str]] = None,
        applied=None,
    ):
        super().__init__(message)
        self.failures = dict(failures or {})
        self.applied = applied


# -----------------------------
# Registry Errors
# -----------------------------

class RegistryError(NodeConfigError):
    pass


class RegistryWriteError(RegistryError):
    pass


class NodeNotFoundError(RegistryError):
    pass
