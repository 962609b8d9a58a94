# nodeconfig_engine/node_manager/service.py
"""Node manager service - bulk workflows over the master's node list."""

import logging
from typing import Iterable, Mapping, Optional, Set, Union

from nodeconfig_engine.core import messages
from nodeconfig_engine.core.environment import slave_from_variables, slave_to_variables
from nodeconfig_engine.core.errors import (
    ApplyError,
    EmptyCollectionError,
    InvalidIntervalError,
    NameConflictError,
    RegistryError,
    ValidationError,
)
from nodeconfig_engine.core.events import NodeEvent, NullEventEmitter
from nodeconfig_engine.core.factory import SlaveFactory
from nodeconfig_engine.core.models import (
    AlwaysRetention,
    ManagedServiceLauncher,
    ManagedSlave,
    NodeMode,
)
from nodeconfig_engine.core.repository import NodeRegistry
from nodeconfig_engine.core.validation import check_good_name, parse_integer
from nodeconfig_engine.node_manager.node_list import NodeList, reconciliation_lock
from nodeconfig_engine.node_manager.patch import SettingsPatch
from nodeconfig_engine.node_manager.search import filter_nodes
from nodeconfig_engine.node_manager.session import SessionContext, UserMode

logger = logging.getLogger(__name__)

CREATE_NEW = "newSlave"
CREATE_COPY = "copySlave"


def _fix_empty_and_trim(text: Optional[str]) -> Optional[str]:
    if text is None:
        return None
    text = text.strip()
    return text or None


class NodeManagerService:
    """Service for searching, configuring, adding and deleting slaves in bulk."""

    def __init__(self, registry: NodeRegistry, event_emitters=None):
        self._registry = registry
        self._emitters = event_emitters or NullEventEmitter()

    # ============================================
    # SEARCH & SELECTION
    # ============================================

    def search(
        self,
        criteria: Mapping[str, Optional[str]],
        context: Optional[SessionContext] = None,
    ) -> NodeList:
        """Search registered slaves; the result is sorted by name."""
        node_list = filter_nodes(self._registry.list_nodes(), criteria).sort_by_name()
        if context is not None:
            context.node_list = node_list
        return node_list

    def select_nodes(
        self,
        names: Union[str, Iterable[str], None],
        context: SessionContext,
    ) -> NodeList:
        """Select registered nodes by name. Unknown names are skipped."""
        if isinstance(names, str):
            names = [names]
        names = list(names or [])
        if not names:
            raise ValidationError(messages.NO_SELECTED_SLAVES)

        node_list = NodeList(
            node for node in (self._registry.get(name) for name in names)
            if node is not None
        )
        context.node_list = node_list
        return node_list

    def require_selection(self, context: SessionContext) -> NodeList:
        """Selected list, failing when it holds no slaves."""
        if context.node_list is None or context.node_list.is_empty():
            raise EmptyCollectionError(messages.EMPTY_NODE_LIST)
        return context.node_list

    # ============================================
    # APPLY
    # ============================================

    def apply(self, context: SessionContext, patch: SettingsPatch) -> NodeList:
        """
        Apply settings on the selected slaves.

        In CONFIGURE mode the selection must still be registered and the
        patch must change something. In ADD mode the slaves prepared by
        create_nodes are registered by the same bulk change.
        """
        mode = context.user_mode
        if mode is None:
            raise ValidationError(messages.NO_USER_MODE)
        if mode not in (UserMode.CONFIGURE, UserMode.ADD):
            raise ValidationError(messages.cannot_apply_in_mode(mode.value))
        if context.node_list is None:
            raise EmptyCollectionError(messages.EMPTY_NODE_LIST)
        if patch.is_empty() and mode == UserMode.CONFIGURE:
            raise ValidationError(messages.NO_SELECTED_SETTINGS)

        with reconciliation_lock:
            node_list = context.node_list
            if mode == UserMode.CONFIGURE and not node_list.slaves_still_exist(self._registry):
                raise ApplyError(messages.SLAVE_DELETED)

            # Remembered for the confirmation page
            context.had_labels = node_list.has_labels(patch.remove_labels)
            try:
                changed = node_list.change_settings(patch, self._registry)
            except ApplyError as e:
                if e.applied is not None:
                    context.node_list = e.applied
                    context.last_changed_settings = patch
                raise

        context.node_list = changed
        context.last_changed_settings = patch

        if mode == UserMode.CONFIGURE:
            logger.info(f"User configured the following slaves: {changed} with {patch.changed_fields()}")
            self._emitters.emit([NodeEvent.nodes_configured(changed, patch)])
        else:
            logger.info(f"User added the following slaves: {changed} with {patch.changed_fields()}")
            self._emitters.emit([NodeEvent.nodes_added(changed, patch)])

        return changed

    # ============================================
    # CREATE
    # ============================================

    def derive_names(
        self,
        slave_names: Optional[str],
        slave_name: Optional[str],
        first: Optional[str],
        last: Optional[str],
    ) -> Set[str]:
        """
        Names from a space-separated list plus a numbered range.

        The range is slave_name{first..last}, inclusive, zero-padded to the
        width of first as typed ("00".."10" gives name00..name10).
        """
        names: Set[str] = set()

        if slave_names:
            for name in slave_names.split():
                check_good_name(name)
                names.add(name)

        if slave_name:
            check_good_name(slave_name)
            first_number = parse_integer(first)
            last_number = parse_integer(last)
            if first_number is None or last_number is None or first_number > last_number:
                raise InvalidIntervalError(messages.wrong_interval(slave_name, first, last))

            width = len(first)
            for number in range(first_number, last_number + 1):
                names.add(f"{slave_name}{number:0{width}d}")

        existing = [name for name in names if self._registry.get(name) is not None]
        if existing:
            raise NameConflictError(messages.slave_already_exists(existing), existing)

        return names

    def create_nodes(
        self,
        context: SessionContext,
        *,
        slave_names: Optional[str] = None,
        slave_name: Optional[str] = None,
        first: Optional[str] = None,
        last: Optional[str] = None,
        mode: str = CREATE_NEW,
        copy_from: Optional[str] = None,
        extended_env_interpretation: bool = False,
    ) -> NodeList:
        """
        Prepare new slaves for the ADD workflow.

        Nothing is registered here; apply() registers the list.
        """
        names = self.derive_names(slave_names, slave_name, first, last)
        if not names:
            raise ValidationError(messages.EMPTY_NAME_LIST)

        with reconciliation_lock:
            if mode == CREATE_NEW:
                node_list = NodeList(self._new_slave(name) for name in sorted(names))
            elif mode == CREATE_COPY:
                source = self._copy_source(copy_from, extended_env_interpretation)
                node_list = NodeList(
                    slave_from_variables(SlaveFactory.copy(source, name=name))
                    for name in sorted(names)
                )
            else:
                raise ValidationError(messages.unknown_create_mode(mode))

        context.user_mode = UserMode.ADD
        context.node_list = node_list
        return node_list

    @staticmethod
    def _new_slave(name: str) -> ManagedSlave:
        return SlaveFactory.create(
            name=name,
            description="",
            remote_fs="",
            num_executors=1,
            mode=NodeMode.NORMAL,
            label_string="",
            launcher=ManagedServiceLauncher(user_name="", password=""),
            retention_strategy=AlwaysRetention(),
        )

    def _copy_source(self, copy_from: Optional[str], extended: bool) -> ManagedSlave:
        if not copy_from or not copy_from.strip():
            raise ValidationError(messages.EMPTY_COPY_STRING)

        source = self._registry.get(copy_from)
        if not isinstance(source, ManagedSlave):
            raise ValidationError(messages.no_slave_found(copy_from))

        if extended:
            source = slave_to_variables(source)
        return source

    # ============================================
    # DELETE
    # ============================================

    def delete_nodes(self, node_list: NodeList) -> None:
        """Remove every node in the list; failures are reported together."""
        deleted = []
        failures = {}

        with reconciliation_lock:
            for node in node_list:
                try:
                    self._registry.remove(node)
                    deleted.append(node.name)
                except RegistryError as e:
                    failures[node.name] = str(e)

        if deleted:
            self._emitters.emit([NodeEvent.nodes_deleted(deleted)])

        if failures:
            causes = " ".join(f"{name} cause: {cause}" for name, cause in failures.items())
            logger.warning(messages.could_not_delete([causes]))
            raise ApplyError(messages.could_not_delete(failures.keys()), failures=failures)

        logger.info(f"User deleted the following slaves: {node_list}")

    # ============================================
    # ONLINE / OFFLINE
    # ============================================

    def take_online(self, node_list: Optional[NodeList]) -> bool:
        """Clear temporary offline on the selected nodes."""
        if node_list is None:
            return False

        with reconciliation_lock:
            for node in node_list:
                if self._registry.computer_state(node.name) is not None:
                    self._registry.set_temporarily_offline(node.name, False)

        self._emitters.emit([NodeEvent.computer_state("nodes.online", node_list.names())])
        return True

    def take_offline(self, node_list: Optional[NodeList], reason: Optional[str] = None) -> bool:
        if node_list is None:
            return False

        reason = _fix_empty_and_trim(reason)
        with reconciliation_lock:
            for node in node_list:
                if self._registry.computer_state(node.name) is not None:
                    self._registry.set_temporarily_offline(node.name, True, reason)

        self._emitters.emit([NodeEvent.computer_state("nodes.offline", node_list.names(), reason)])
        return True

    def connect_nodes(self, node_list: Optional[NodeList]) -> bool:
        """Connect (not forced) to the selected nodes that are not connected."""
        if node_list is None:
            return False

        with reconciliation_lock:
            for node in node_list:
                state = self._registry.computer_state(node.name)
                if state is not None and not state.connected:
                    self._registry.connect(node.name)

        self._emitters.emit([NodeEvent.computer_state("nodes.connected", node_list.names())])
        return True

    def disconnect_nodes(self, node_list: Optional[NodeList], reason: Optional[str] = None) -> bool:
        if node_list is None:
            return False

        reason = _fix_empty_and_trim(reason)
        with reconciliation_lock:
            for node in node_list:
                if self._registry.computer_state(node.name) is not None:
                    self._registry.disconnect(node.name, reason)

        self._emitters.emit([NodeEvent.computer_state("nodes.disconnected", node_list.names(), reason)])
        return True
