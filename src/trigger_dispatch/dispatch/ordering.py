"""Execution order of registrations.

Registrations run in ascending ``order_key``. Registrations sharing a key
form a tie group: the group as a whole runs after every smaller key and
before every larger key, but the order inside the group is unspecified and
must not be relied upon. Configure distinct keys with gaps
(-10, 0, 10, 20, ...) to keep the order unambiguous.
"""
from __future__ import annotations

from collections.abc import Iterable
from itertools import groupby

from trigger_dispatch.registration.registration import Registration


def _key(registration: Registration) -> int:
    return registration.order_key


def order(registrations: Iterable[Registration]) -> list[Registration]:
    """Return *registrations* sorted by ascending ``order_key``."""
    return sorted(registrations, key=_key)


def group_by_order_key(registrations: Iterable[Registration]) -> list[tuple[int, list[Registration]]]:
    """Return ``(order_key, registrations)`` pairs in execution order.

    Groups with more than one member are the tie groups whose internal
    order is unspecified.
    """
    return [(key, list(group)) for key, group in groupby(order(registrations), key=_key)]


def ambiguous_groups(registrations: Iterable[Registration]) -> list[tuple[int, list[Registration]]]:
    """Return only the tie groups, i.e. order keys used more than once."""
    return [(key, group) for key, group in group_by_order_key(registrations) if len(group) > 1]
