"""Remote storage: client, node lookup, retry and namespace provisioning."""

from .client import (
    HttpRemoteTreeClient,
    RemoteCredentials,
    RemoteNode,
    RemoteSession,
    RemoteTreeClient,
    get_remote_client,
)
from .locator import format_locator, locate, parse_locator
from .provisioner import Namespace, ensure_namespace, find_namespace
from .retry import RetryPolicy, SINGLE_ATTEMPT, is_transient, with_retry

__all__ = [
    "HttpRemoteTreeClient",
    "RemoteCredentials",
    "RemoteNode",
    "RemoteSession",
    "RemoteTreeClient",
    "get_remote_client",
    "format_locator",
    "locate",
    "parse_locator",
    "Namespace",
    "ensure_namespace",
    "find_namespace",
    "RetryPolicy",
    "SINGLE_ATTEMPT",
    "is_transient",
    "with_retry",
]
