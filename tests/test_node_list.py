#tests\test_node_list.py

"""Test node list helpers and common setting resolution."""

import pytest

from nodeconfig_engine.core import messages
from nodeconfig_engine.core.errors import EmptyCollectionError
from nodeconfig_engine.core.models import (
    AlwaysRetention,
    CommandLauncher,
    DemandRetention,
    EnvironmentVariablesProperty,
    ManagedServiceLauncher,
    NetworkListenerLauncher,
    Node,
    NodeMode,
    ScheduledRetention,
    ToolLocationProperty,
)
from nodeconfig_engine.core.setting import Setting
from nodeconfig_engine.node_manager.node_list import (
    NodeList,
    add_labels,
    merge_properties,
    remove_labels,
)


class TestLabelHelpers:
    """Test label add and remove."""

    def test_add_appends_missing_labels_once(self):
        assert add_labels("b c c", "a b") == "a b c"

    def test_add_none_keeps_labels(self):
        assert add_labels(None, "a b") == "a b"

    def test_remove_labels(self):
        assert remove_labels("L1 L2", "L1 L2 L3") == "L3"

    def test_remove_from_empty(self):
        assert remove_labels("L1 L2", "") == ""

    def test_remove_normalizes_spacing(self):
        assert remove_labels("b", "  a   b c ") == "a c"


class TestMergeProperties:
    """Test property precedence: old, then remove, then add/change."""

    def test_add_to_empty(self):
        env = EnvironmentVariablesProperty.of(JAVA_HOME="/opt/jdk")
        assert merge_properties([env], [], None) == [env]

    def test_change_replaces_same_type_and_moves_it_last(self):
        env = EnvironmentVariablesProperty.of(A="1")
        tools = ToolLocationProperty(locations=(("maven", "/opt/maven"),))
        new_env = EnvironmentVariablesProperty.of(A="2")

        assert merge_properties([new_env], [env, tools], None) == [tools, new_env]

    def test_remove_by_kind(self):
        env = EnvironmentVariablesProperty.of(A="1")
        tools = ToolLocationProperty(locations=(("ant", "/opt/ant"),))

        assert merge_properties(None, [env, tools], ["tool-locations"]) == [env]

    def test_remove_then_add_same_kind(self):
        """Test the added property survives a removal of its kind."""
        old = EnvironmentVariablesProperty.of(key="a")
        new = EnvironmentVariablesProperty.of(key="b")

        assert merge_properties([new], [old], ["environment-variables"]) == [new]


class TestNodeListBehaviour:
    """Test collection behaviour."""

    def test_membership_by_name(self, make_slave):
        node_list = NodeList([make_slave("a")])
        assert "a" in node_list
        assert make_slave("a", description="changed") in node_list
        assert "b" not in node_list

    def test_str_lists_names(self, make_slave):
        assert str(NodeList([make_slave("a"), make_slave("b")])) == "a b"

    def test_is_empty_ignores_other_nodes(self, make_slave):
        assert NodeList().is_empty()
        assert NodeList([Node(name="master")]).is_empty()
        assert not NodeList([make_slave("a")]).is_empty()

    def test_sort_by_name(self, make_slave):
        node_list = NodeList([make_slave("c"), make_slave("a"), make_slave("b")])
        assert node_list.sort_by_name().names() == ["a", "b", "c"]

    def test_to_dicts(self, make_slave):
        node_list = NodeList([make_slave("a", label_string="x", num_executors=2), Node(name="master")])

        assert node_list.to_dicts() == [{
            "name": "a",
            "labels": "x",
            "executors": 2,
            "remoteFS": "/var/lib/build/a",
            "description": "",
        }]

    def test_slaves_still_exist(self, make_slave, registry):
        registry.add(make_slave("a"))
        assert NodeList([make_slave("a")]).slaves_still_exist(registry)
        assert not NodeList([make_slave("a"), make_slave("gone")]).slaves_still_exist(registry)


class TestHasLabels:
    """Test label presence across a list."""

    def test_none_is_always_true(self, make_slave):
        assert NodeList().has_labels(None)
        assert NodeList([make_slave("a")]).has_labels(None)

    def test_each_label_on_some_node(self, make_slave):
        node_list = NodeList([
            make_slave("a", label_string="L1 L2"),
            make_slave("b", label_string="L4"),
        ])
        assert node_list.has_labels("L1 L4")
        assert not node_list.has_labels("L1 L5")

    def test_labels_are_whole_tokens(self, make_slave):
        node_list = NodeList([make_slave("a", label_string="linux64")])
        assert not node_list.has_labels("linux")


class TestGetCommon:
    """Test the common value of a single setting."""

    def test_equal_values(self, make_slave):
        node_list = NodeList([make_slave("a", description="same"), make_slave("b", description="same")])
        assert node_list.get_common(Setting.DESCRIPTION) == "same"

    def test_values_equal_after_name_substitution(self, make_slave):
        node_list = NodeList([make_slave("a", description="a-x"), make_slave("b", description="b-x")])
        assert node_list.get_common(Setting.DESCRIPTION) == "$NAME-x"

    def test_literal_match_wins(self, make_slave):
        """Test identical values are reported without substitution."""
        node_list = NodeList([make_slave("a", description="a-x"), make_slave("b", description="a-x")])
        assert node_list.get_common(Setting.DESCRIPTION) == "a-x"

    def test_no_common_value(self, make_slave):
        node_list = NodeList([make_slave("a", description="hello"), make_slave("b", description="world")])
        assert node_list.get_common(Setting.DESCRIPTION) is None

    def test_other_node_kinds_are_ignored(self, make_slave):
        node_list = NodeList([Node(name="master", description="x"), make_slave("a", description="y")])
        assert node_list.get_common(Setting.DESCRIPTION) == "y"

    def test_empty_list_fails(self):
        with pytest.raises(EmptyCollectionError):
            NodeList().get_common(Setting.DESCRIPTION)

    def test_by_name(self, make_slave):
        node_list = NodeList([make_slave("a", num_executors=2), make_slave("b", num_executors=2)])
        assert node_list.get_common_by_name("NUM_EXECUTORS") == "2"

    def test_common_mode(self, make_slave):
        same = NodeList([make_slave("a"), make_slave("b")])
        mixed = NodeList([make_slave("a"), make_slave("b", mode=NodeMode.EXCLUSIVE)])

        assert same.get_common_mode() == NodeMode.NORMAL
        assert mixed.get_common_mode() is None


class TestGetCommonLauncher:
    """Test launcher resolution."""

    def test_different_variants(self, make_slave):
        node_list = NodeList([
            make_slave("a", launcher=CommandLauncher(command="x")),
            make_slave("b", launcher=ManagedServiceLauncher(user_name="u", password="p")),
        ])

        assert node_list.get_common_launcher() is None
        assert node_list.launcher_description() == messages.DIFFERENT_LAUNCH_METHODS

    def test_different_commands_give_blank_command(self, make_slave):
        node_list = NodeList([
            make_slave("a", launcher=CommandLauncher(command="start-a.sh")),
            make_slave("b", launcher=CommandLauncher(command="run.sh")),
        ])

        assert node_list.get_common_launcher() == CommandLauncher(command="")
        assert node_list.launcher_description() == messages.DIFFERENT_LAUNCH_COMMAND

    def test_symbolic_command(self, make_slave):
        node_list = NodeList([
            make_slave("a", launcher=CommandLauncher(command="ssh a")),
            make_slave("b", launcher=CommandLauncher(command="ssh b")),
        ])

        assert node_list.get_common_launcher() == CommandLauncher(command="ssh $NAME")
        assert node_list.launcher_description() == ""

    def test_managed_service_partial_divergence(self, make_slave):
        node_list = NodeList([
            make_slave("a", launcher=ManagedServiceLauncher(user_name="admin", password="one")),
            make_slave("b", launcher=ManagedServiceLauncher(user_name="admin", password="two")),
        ])

        assert node_list.get_common_launcher() == ManagedServiceLauncher(user_name="admin", password="")
        assert node_list.launcher_description() == messages.DIFFERENT_PASSWORD

    def test_network_listener(self, make_slave):
        node_list = NodeList([
            make_slave("a", launcher=NetworkListenerLauncher(tunnel="t1", vm_args="-Xmx1g")),
            make_slave("b", launcher=NetworkListenerLauncher(tunnel="t2", vm_args="-Xmx2g")),
        ])

        assert node_list.get_common_launcher() == NetworkListenerLauncher(tunnel="", vm_args="")
        assert node_list.launcher_description() == messages.DIFFERENT_VM_ARG_TUNNEL


class TestGetCommonRetentionStrategy:
    """Test retention strategy resolution."""

    def test_different_variants(self, make_slave):
        node_list = NodeList([
            make_slave("a", retention_strategy=AlwaysRetention()),
            make_slave("b", retention_strategy=DemandRetention(in_demand_delay=1, idle_delay=2)),
        ])

        assert node_list.get_common_retention_strategy() is None
        assert node_list.retention_description() == messages.DIFFERENT_RETENTION_STRATEGIES

    def test_always(self, make_slave):
        node_list = NodeList([make_slave("a"), make_slave("b")])
        assert node_list.get_common_retention_strategy() == AlwaysRetention()
        assert node_list.retention_description() == ""

    def test_divergent_delay_falls_back_to_default(self, make_slave):
        node_list = NodeList([
            make_slave("a", retention_strategy=DemandRetention(in_demand_delay=2, idle_delay=5)),
            make_slave("b", retention_strategy=DemandRetention(in_demand_delay=2, idle_delay=7)),
        ])

        assert node_list.get_common_retention_strategy() == DemandRetention(in_demand_delay=2, idle_delay=1)
        assert node_list.retention_description() == messages.DIFFERENT_IDLE_DELAY

    def test_scheduled_defaults(self, make_slave):
        node_list = NodeList([
            make_slave("a", retention_strategy=ScheduledRetention("0 8 * * *", 30, True)),
            make_slave("b", retention_strategy=ScheduledRetention("0 8 * * *", 60, False)),
        ])

        assert node_list.get_common_retention_strategy() == ScheduledRetention("0 8 * * *", 1, True)
        assert node_list.retention_description() == messages.DIFFERENT_UPTIME_KEEP_UP

    def test_schedule_common_only_by_name(self, make_slave):
        """Test a $NAME-only schedule is shown as an empty schedule."""
        node_list = NodeList([
            make_slave("mon", retention_strategy=ScheduledRetention("0 8 * * mon", 30, True)),
            make_slave("tue", retention_strategy=ScheduledRetention("0 8 * * tue", 30, True)),
        ])

        assert node_list.get_common(Setting.START_TIME_SPEC) == "0 8 * * $NAME"
        assert node_list.get_common_retention_strategy() == ScheduledRetention("", 30, True)


class TestGetCommonProperties:
    """Test property intersection."""

    def test_only_identical_properties_are_common(self, make_slave):
        env = EnvironmentVariablesProperty.of(JAVA_HOME="/opt/jdk")
        node_list = NodeList([
            make_slave("a", node_properties=(env, ToolLocationProperty(locations=(("git", "/usr/bin"),)))),
            make_slave("b", node_properties=(ToolLocationProperty(locations=(("git", "/opt/git"),)), env)),
        ])

        assert node_list.get_common_properties() == [env]

    def test_no_properties(self, make_slave):
        assert NodeList([make_slave("a")]).get_common_properties() == []
