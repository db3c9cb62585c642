"""
Cache Activation Policy

Decides whether caching is effectively enabled for the current caller.

Caching is switched off for admin sessions, for developers working against a
local instance and for requests where the client is the server itself, so
those callers always see fresh data. A ``testCache=1`` override keeps the
cache on for them when they need to exercise it.

The request/process environment is never read implicitly: callers build an
ActivationContext (directly or from a WSGI-style environ) and hand it in.
"""

import ipaddress
import sys
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qs


def _is_loopback(address: str | None) -> bool:
    if not address:
        return False
    try:
        return ipaddress.ip_address(address).is_loopback
    except ValueError:
        return False


def _query_flag(query: Mapping[str, list[str]], name: str) -> bool:
    values = query.get(name)
    if not values:
        return False
    try:
        return int(values[0]) == 1
    except ValueError:
        return False


@dataclass(frozen=True)
class ActivationContext:
    """
    Read-only inputs of the activation policy.

    Attributes:
        is_admin_session: The caller is an admin / elevated user
        test_cache: Force the cache on even for admins and developers
        no_dev: Never treat the caller as a developer
        remote_addr: Peer address of the request
        server_addr: Address the server listens on
        client_ip_header: Value of the Client-IP header
        forwarded_for: Value of the X-Forwarded-For header
        interactive: The process runs in an interactive interpreter
        developer_check: Replaces the built-in developer detection
    """

    is_admin_session: bool = False
    test_cache: bool = False
    no_dev: bool = False
    remote_addr: str | None = None
    server_addr: str | None = None
    client_ip_header: str | None = None
    forwarded_for: str | None = None
    interactive: bool = False
    developer_check: Callable[["ActivationContext"], bool] | None = None

    @classmethod
    def from_environ(cls, environ: Mapping[str, Any], is_admin_session: bool = False) -> "ActivationContext":
        """
        Build a context from a WSGI-style environ.

        Reads REMOTE_ADDR, SERVER_ADDR, HTTP_CLIENT_IP, HTTP_X_FORWARDED_FOR and
        the ``testCache`` / ``noDev`` query parameters of QUERY_STRING.
        """
        query = parse_qs(environ.get("QUERY_STRING", "") or "")
        return cls(
            is_admin_session=is_admin_session,
            test_cache=_query_flag(query, "testCache"),
            no_dev=_query_flag(query, "noDev"),
            remote_addr=environ.get("REMOTE_ADDR"),
            server_addr=environ.get("SERVER_ADDR"),
            client_ip_header=environ.get("HTTP_CLIENT_IP"),
            forwarded_for=environ.get("HTTP_X_FORWARDED_FOR"),
        )

    @classmethod
    def for_current_process(cls) -> "ActivationContext":
        """Context of a process without a request (scripts, workers)."""
        return cls(interactive=hasattr(sys, "ps1"))

    def client_ip(self) -> str | None:
        """
        Best guess of the client address.

        Prefers the Client-IP header, then the first X-Forwarded-For hop,
        then the peer address.
        """
        if self.client_ip_header:
            return self.client_ip_header.strip()
        if self.forwarded_for:
            return self.forwarded_for.split(",")[0].strip()
        return self.remote_addr

    def is_developer(self) -> bool:
        """
        Check for a local developer.

        Default rule: not suppressed by ``no_dev`` and either a loopback
        peer or an interactive interpreter.
        """
        if self.developer_check is not None:
            return bool(self.developer_check(self))
        if self.no_dev:
            return False
        return _is_loopback(self.remote_addr) or self.interactive

    def is_same_host(self) -> bool:
        """True when the request comes from the server itself."""
        return self.server_addr is not None and self.server_addr == self.client_ip()


def is_cache_active_for_current_user(context: ActivationContext) -> bool:
    """
    Decide whether the cache is enabled for the caller described by context.

    Returns:
        False for admins, same-host requests and developers (unless
        test_cache is set), True otherwise
    """
    if context.test_cache:
        return True

    if context.is_admin_session or context.is_same_host() or context.is_developer():
        return False

    return True


def compute_activation(
    cache_enabled: bool,
    check_for_user: bool,
    context: ActivationContext | None = None,
) -> bool:
    """
    Compute the facade's activation flag once, at construction.

    Args:
        cache_enabled: Explicit enable/disable switch
        check_for_user: Apply the per-caller check
        context: Caller context (defaults to the current process)

    Returns:
        Whether caching is active
    """
    if not cache_enabled:
        return False
    if not check_for_user:
        return True
    return is_cache_active_for_current_user(context or ActivationContext.for_current_process())
