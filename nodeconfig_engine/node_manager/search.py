#nodeconfig_engine\node_manager\search.py

"""Search slaves by name, labels, description, remote FS and executors."""

from typing import Iterable, Mapping, Optional

from nodeconfig_engine.core.environment import to_variables
from nodeconfig_engine.core.models import ManagedSlave, Node
from nodeconfig_engine.core.validation import parse_integer
from nodeconfig_engine.node_manager.node_list import NodeList


# criteria key -> slave attribute
TEXT_CRITERIA = {
    "description": lambda slave: slave.description,
    "remoteFS": lambda slave: slave.remote_fs,
    "labels": lambda slave: slave.label_string,
    "name": lambda slave: slave.name,
}
EXECUTORS_CRITERION = "executors"


def make_searchable(text: Optional[str]) -> str:
    """Lower-case and trim, None becomes empty."""
    if text is None:
        return ""
    return text.lower().strip()


def has_search_hit(slave: ManagedSlave, search: Optional[str], value: Optional[str]) -> bool:
    """
    Check every search token against the slave's tokens.

    A search token hits when it is a substring of any value token. Tokens
    containing '$' also hit against the $NAME form of the value token at
    the same position.
    """
    if not search:
        return True
    if not value:
        return False

    search_tokens = make_searchable(search).split()
    value_tokens = make_searchable(value).split()
    variable_tokens = make_searchable(to_variables(slave.name, value)).split()

    for search_token in search_tokens:
        hit = False
        for i, value_token in enumerate(value_tokens):
            if search_token in value_token:
                hit = True
                break
            if "$" in search_token and i < len(variable_tokens):
                if search_token in variable_tokens[i]:
                    hit = True
                    break
        if not hit:
            return False
    return True


def _executors_match(slave: ManagedSlave, criterion) -> bool:
    wanted = parse_integer(str(criterion))
    if wanted is None:
        # Non-numeric executor criteria do not constrain the search
        return True
    return slave.num_executors == wanted


def matches(slave: ManagedSlave, criteria: Mapping[str, Optional[str]]) -> bool:
    for key, read in TEXT_CRITERIA.items():
        if not has_search_hit(slave, criteria.get(key), read(slave)):
            return False

    criterion = criteria.get(EXECUTORS_CRITERION)
    if criterion is not None and not _executors_match(slave, criterion):
        return False
    return True


def filter_nodes(nodes: Iterable[Node], criteria: Mapping[str, Optional[str]]) -> NodeList:
    """Managed slaves matching every criterion, in input order."""
    criteria = criteria or {}
    return NodeList(
        node for node in nodes
        if isinstance(node, ManagedSlave) and matches(node, criteria)
    )
