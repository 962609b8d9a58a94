#tests\test_service.py

"""Test node manager service workflows."""

import pytest

from nodeconfig_engine.core import messages
from nodeconfig_engine.core.errors import (
    ApplyError,
    EmptyCollectionError,
    InvalidIntervalError,
    NameConflictError,
    ValidationError,
)
from nodeconfig_engine.core.models import (
    AlwaysRetention,
    CommandLauncher,
    ManagedServiceLauncher,
    Node,
)
from nodeconfig_engine.node_manager.node_list import NodeList
from nodeconfig_engine.node_manager.patch import SettingsPatch
from nodeconfig_engine.node_manager.service import CREATE_COPY, CREATE_NEW
from nodeconfig_engine.node_manager.session import UserMode


@pytest.fixture
def fleet(registry, make_slave):
    registry.add(make_slave("web2", label_string="linux web"))
    registry.add(make_slave("web1", label_string="linux web"))
    registry.add(make_slave("db1", label_string="linux db"))
    registry.add(
        make_slave(
            "template",
            description="copy of $NAME",
            launcher=CommandLauncher(command="ssh template start"),
        )
    )
    return registry


class TestDeriveNames:
    """Test name derivation for new slaves."""

    def test_range(self, service):
        assert service.derive_names(None, "node", "0", "2") == {"node0", "node1", "node2"}

    def test_padding_follows_first_bound(self, service):
        names = service.derive_names(None, "node", "08", "10")
        assert names == {"node08", "node09", "node10"}

    def test_explicit_names_and_range(self, service):
        names = service.derive_names("alpha beta", "node", "1", "1")
        assert names == {"alpha", "beta", "node1"}

    def test_reversed_range_fails(self, service):
        with pytest.raises(InvalidIntervalError):
            service.derive_names(None, "node", "5", "1")

    def test_non_numeric_range_fails(self, service):
        with pytest.raises(InvalidIntervalError):
            service.derive_names(None, "node", "a", "3")

    @pytest.mark.parametrize("first, last", [("1_0", "1_2"), (" 1", "3"), ("+1", "3"), ("1", "\u0663")])
    def test_loosely_numeric_bounds_fail(self, service, first, last):
        """Test only plain decimal digits are accepted as bounds."""
        with pytest.raises(InvalidIntervalError):
            service.derive_names(None, "node", first, last)

    def test_existing_names_fail(self, service, fleet):
        with pytest.raises(NameConflictError) as exc_info:
            service.derive_names("web1 new1", "db", "1", "2")

        assert exc_info.value.names == ["db1", "web1"]

    def test_unsafe_name_fails(self, service):
        with pytest.raises(ValidationError):
            service.derive_names("bad/name", None, None, None)

    def test_nothing_requested(self, service):
        assert service.derive_names(None, None, None, None) == set()


class TestSearchAndSelect:
    """Test search and selection."""

    def test_search_sorts_by_name(self, service, fleet, context):
        result = service.search({"labels": "web"}, context)

        assert result.names() == ["web1", "web2"]
        assert context.node_list is result

    def test_select_nodes(self, service, fleet, context):
        result = service.select_nodes(["db1", "missing", "web2"], context)
        assert result.names() == ["db1", "web2"]

    def test_select_single_name(self, service, fleet, context):
        assert service.select_nodes("db1", context).names() == ["db1"]

    def test_select_nothing_fails(self, service, context):
        with pytest.raises(ValidationError):
            service.select_nodes([], context)

    def test_require_selection(self, service, context):
        with pytest.raises(EmptyCollectionError):
            service.require_selection(context)

        context.node_list = NodeList([Node(name="master")])
        with pytest.raises(EmptyCollectionError):
            service.require_selection(context)


class TestApply:
    """Test applying settings in the configure workflow."""

    @pytest.fixture
    def selected(self, service, fleet, context):
        context.user_mode = UserMode.CONFIGURE
        service.search({"labels": "web"}, context)
        return context

    def test_apply(self, service, selected, registry, events):
        result = service.apply(selected, SettingsPatch(description="frontend $NAME"))

        assert registry.get("web1").description == "frontend web1"
        assert result.names() == ["web1", "web2"]
        assert selected.node_list is result
        assert selected.last_changed_settings.description == "frontend $NAME"
        assert events.events[-1].event_type == "nodes.configured"
        assert events.events[-1].node_names == ["web1", "web2"]

    def test_empty_patch_fails(self, service, selected):
        with pytest.raises(ValidationError, match=messages.NO_SELECTED_SETTINGS):
            service.apply(selected, SettingsPatch())

    def test_deleted_slave_fails(self, service, selected, registry):
        registry.remove(registry.get("web2"))

        with pytest.raises(ApplyError, match=messages.SLAVE_DELETED):
            service.apply(selected, SettingsPatch(description="x"))

        assert registry.get("web1").description == ""

    def test_had_labels(self, service, selected):
        service.apply(selected, SettingsPatch(remove_labels="web"))
        assert selected.had_labels

        service.apply(selected, SettingsPatch(remove_labels="gpu"))
        assert not selected.had_labels

    def test_partial_failure_updates_selection(self, service, selected, registry):
        with pytest.raises(ApplyError):
            service.apply(selected, SettingsPatch(num_executors="none"))

        assert selected.node_list.names() == ["web1", "web2"]
        assert registry.get("web1").num_executors == 1

    def test_apply_without_mode_fails(self, service, fleet, context):
        service.search({}, context)
        with pytest.raises(ValidationError):
            service.apply(context, SettingsPatch(description="x"))

    def test_apply_in_delete_mode_fails(self, service, fleet, context):
        context.user_mode = UserMode.DELETE
        service.search({}, context)
        with pytest.raises(ValidationError):
            service.apply(context, SettingsPatch(description="x"))


class TestCreateNodes:
    """Test the add workflow."""

    def test_new_slaves_are_registered_on_apply(self, service, registry, context, events):
        created = service.create_nodes(context, slave_name="node", first="1", last="2", mode=CREATE_NEW)

        assert created.names() == ["node1", "node2"]
        assert context.user_mode == UserMode.ADD
        assert registry.get("node1") is None
        assert created[0].launcher == ManagedServiceLauncher(user_name="", password="")
        assert created[0].retention_strategy == AlwaysRetention()

        service.apply(context, SettingsPatch(remote_fs="/builds/$NAME", add_labels="new"))

        assert registry.get("node2").remote_fs == "/builds/node2"
        assert registry.get("node1").label_string == "new"
        assert events.events[-1].event_type == "nodes.added"

    def test_empty_patch_is_allowed_when_adding(self, service, registry, context):
        service.create_nodes(context, slave_names="solo")
        service.apply(context, SettingsPatch())

        assert registry.get("solo") is not None

    def test_no_names_fails(self, service, context):
        with pytest.raises(ValidationError, match=messages.EMPTY_NAME_LIST):
            service.create_nodes(context)

    def test_copy(self, service, fleet, context):
        created = service.create_nodes(
            context, slave_names="copy1", mode=CREATE_COPY, copy_from="template"
        )

        copied = created[0]
        assert copied.name == "copy1"
        assert copied.launcher == CommandLauncher(command="ssh template start")
        assert copied.description == "copy of copy1"

    def test_copy_with_extended_interpretation(self, service, fleet, context):
        created = service.create_nodes(
            context,
            slave_names="copy1",
            mode=CREATE_COPY,
            copy_from="template",
            extended_env_interpretation=True,
        )

        assert created[0].launcher == CommandLauncher(command="ssh copy1 start")

    def test_copy_from_missing_slave(self, service, fleet, context):
        with pytest.raises(ValidationError, match="nowhere"):
            service.create_nodes(context, slave_names="copy1", mode=CREATE_COPY, copy_from="nowhere")

    def test_copy_without_source(self, service, context):
        with pytest.raises(ValidationError, match=messages.EMPTY_COPY_STRING):
            service.create_nodes(context, slave_names="copy1", mode=CREATE_COPY, copy_from="  ")

    def test_unknown_mode(self, service, context):
        with pytest.raises(ValidationError):
            service.create_nodes(context, slave_names="x", mode="cloneSlave")


class TestDeleteNodes:
    """Test deletion."""

    def test_delete(self, service, fleet, registry, events):
        service.delete_nodes(NodeList([registry.get("web1"), registry.get("db1")]))

        assert registry.get("web1") is None
        assert registry.get("db1") is None
        assert registry.get("web2") is not None
        assert events.events[-1].node_names == ["web1", "db1"]

    def test_failures_are_collected(self, service, fleet, registry, make_slave):
        node_list = NodeList([make_slave("ghost"), registry.get("web1")])

        with pytest.raises(ApplyError) as exc_info:
            service.delete_nodes(node_list)

        assert list(exc_info.value.failures) == ["ghost"]
        assert registry.get("web1") is None


class TestComputerControl:
    """Test online, offline, connect and disconnect."""

    @pytest.fixture
    def web(self, service, fleet, context):
        return service.search({"labels": "web"}, context)

    def test_take_offline_trims_reason(self, service, web, registry):
        assert service.take_offline(web, "  maintenance  ")

        state = registry.computer_state("web1")
        assert state.temporarily_offline
        assert state.offline_reason == "maintenance"

    def test_blank_reason_is_none(self, service, web, registry):
        service.take_offline(web, "   ")
        assert registry.computer_state("web2").offline_reason is None

    def test_take_online(self, service, web, registry):
        service.take_offline(web, "x")
        assert service.take_online(web)

        assert not registry.computer_state("web1").temporarily_offline
        assert registry.computer_state("db1").temporarily_offline is False

    def test_connect_and_disconnect(self, service, web, registry, events):
        assert service.connect_nodes(web)
        assert registry.computer_state("web1").connected

        assert service.disconnect_nodes(web, "upgrade")
        assert not registry.computer_state("web1").connected
        assert events.events[-1].metadata == {"reason": "upgrade"}

    def test_without_selection(self, service):
        assert not service.take_online(None)
        assert not service.take_offline(None, "x")
        assert not service.connect_nodes(None)
        assert not service.disconnect_nodes(None)
