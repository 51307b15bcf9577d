"""Finding remote nodes by id, and the stored locator format.

Stored locators look like ``https://mega.nz/fm/<node_id>``. ``format_locator``
and ``parse_locator`` are the only functions that build or split them.
"""

import logging
from typing import List, Optional, Tuple
from urllib.parse import urlsplit

from .client import RemoteNode, RemoteSession

logger = logging.getLogger(__name__)

LOCATOR_SEGMENT = "fm"


def format_locator(base_url: str, node_id: str) -> str:
    """Build the stored locator for a remote node."""
    if not node_id:
        raise ValueError("node_id cannot be empty")
    return f"{base_url.rstrip('/')}/{LOCATOR_SEGMENT}/{node_id}"


def parse_locator(locator: str) -> str:
    """Extract the node id from a stored locator.

    Raises:
        ValueError: if the string does not end in ``/fm/<node_id>``.
    """
    if not locator:
        raise ValueError("Empty locator")
    path = urlsplit(locator).path
    segments = [s for s in path.split("/") if s]
    if len(segments) < 2 or segments[-2] != LOCATOR_SEGMENT:
        raise ValueError(f"Not a remote storage locator: {locator!r}")
    return segments[-1]


def locate(
    session: RemoteSession,
    root: RemoteNode,
    target_id: str,
    max_depth: int = 2048,
    max_nodes: int = 50000,
) -> Optional[RemoteNode]:
    """Depth-first search under *root* for the node whose id is *target_id*.

    Uses an explicit stack, so tree depth never touches the interpreter's
    recursion limit. Children deeper than *max_depth* are not expanded and the
    walk stops after *max_nodes* visited nodes. Returns None when the node is
    not found; absence is routine (drift) and never raises.
    """
    if root.id == target_id:
        return root

    stack: List[Tuple[RemoteNode, int]] = [(root, 0)]
    visited = 0

    while stack:
        node, depth = stack.pop()
        visited += 1
        if visited > max_nodes:
            logger.warning(
                "Remote search aborted: node limit reached",
                extra={"target_id": target_id, "max_nodes": max_nodes},
            )
            return None
        if not node.is_folder or depth >= max_depth:
            continue

        children = session.list_children(node)
        for child in children:
            if child.id == target_id:
                return child
        # Reversed so the first listed child is expanded first.
        for child in reversed(children):
            if child.is_folder:
                stack.append((child, depth + 1))

    return None


def find_child_by_name(session: RemoteSession, parent: RemoteNode, name: str) -> Optional[RemoteNode]:
    """Return the directory named *name* directly under *parent*.

    When a create race left several same-named directories, the one with the
    smallest id wins, so every caller resolves to the same node.
    """
    matches = [c for c in session.list_children(parent) if c.is_folder and c.name == name]
    if not matches:
        return None
    if len(matches) > 1:
        logger.warning(
            "Duplicate remote containers found",
            extra={"parent_node_id": parent.id, "name": name, "count": len(matches)},
        )
    return min(matches, key=lambda n: n.id)
