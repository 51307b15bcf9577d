"""Per-owner namespace in the remote tree: ``<root>/<app_root>/<owner_id>``.

Every user folder hangs off the owner container. The provider has no atomic
create-if-absent, so two first-time requests for the same owner can both
create a container. Lookup picks the same survivor on every call
(``find_child_by_name``), which keeps the duplicate harmless.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .client import RemoteNode, RemoteSession
from .locator import find_child_by_name
from .retry import RetryPolicy, with_retry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Namespace:
    app_root: RemoteNode
    owner_root: RemoteNode


def _ensure_child(
    session: RemoteSession,
    parent: RemoteNode,
    name: str,
    policy: RetryPolicy,
    sleep: Callable[[float], None],
) -> RemoteNode:
    existing = find_child_by_name(session, parent, name)
    if existing is not None:
        return existing
    logger.info("Provisioning remote container", extra={"container": name, "parent_node_id": parent.id})
    return with_retry(
        lambda: session.make_directory(parent, name),
        policy,
        sleep=sleep,
        label=f"create container {name!r}",
    )


def ensure_namespace(
    session: RemoteSession,
    owner_id: str,
    app_root_name: str,
    policy: RetryPolicy = RetryPolicy(),
    sleep: Callable[[float], None] = time.sleep,
) -> Namespace:
    """Find or create the application and owner containers. Idempotent."""
    app_root = _ensure_child(session, session.root, app_root_name, policy, sleep)
    owner_root = _ensure_child(session, app_root, owner_id, policy, sleep)
    return Namespace(app_root=app_root, owner_root=owner_root)


def find_namespace(session: RemoteSession, owner_id: str, app_root_name: str) -> Optional[Namespace]:
    """Like ``ensure_namespace`` but never creates anything."""
    app_root = find_child_by_name(session, session.root, app_root_name)
    if app_root is None:
        return None
    owner_root = find_child_by_name(session, app_root, owner_id)
    if owner_root is None:
        return None
    return Namespace(app_root=app_root, owner_root=owner_root)
