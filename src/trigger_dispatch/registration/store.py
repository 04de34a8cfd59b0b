"""RegistrationStore — loads the registrations that apply to one dispatch.

The store sits between a
:class:`~trigger_dispatch.registration.sources.ConfigurationSource` and the
dispatch engine. For each request it:

1. asks the source for the raw rows of the entity kind and extension point,
2. validates them into :class:`Registration` objects,
3. drops registrations configured with ``bypass_execution``,
4. checks that every ``constructor_ref`` resolves in the constructor
   registry.

Any problem raises :class:`~trigger_dispatch.errors.ConfigurationError`
for the requested kind only; rows belonging to other kinds are never
parsed. Nothing is cached between calls.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping

from trigger_dispatch.errors import ConfigurationError
from trigger_dispatch.plugins.contracts import PluginConstructor
from trigger_dispatch.plugins.registry import PluginNotFoundError, PluginRegistry
from trigger_dispatch.registration.registration import Registration, parse_row
from trigger_dispatch.registration.sources import ConfigurationSource

logger = logging.getLogger(__name__)


class RegistrationStore:
    """Read-side view over configured registrations.

    Parameters
    ----------
    source:
        Where raw rows come from.
    constructors:
        Registry resolving ``constructor_ref`` names. Its name is the
        extension point the store serves.
    """

    def __init__(
        self,
        source: ConfigurationSource,
        constructors: PluginRegistry[PluginConstructor],
    ) -> None:
        self._source = source
        self._constructors = constructors

    @property
    def source(self) -> ConfigurationSource:
        return self._source

    @property
    def constructors(self) -> PluginRegistry[PluginConstructor]:
        return self._constructors

    def load_for(self, target_kind: str, extension_point: str) -> list[Registration]:
        """Return the active registrations for *target_kind* and *extension_point*.

        The returned list is in no particular order; use
        :func:`~trigger_dispatch.dispatch.ordering.order` before executing.

        Raises
        ------
        ConfigurationError
            If the source fails, a row is malformed, the extension point is
            not served by the constructor registry, or a ``constructor_ref``
            does not resolve.
        """
        if extension_point != self._constructors.name:
            raise ConfigurationError(
                f"Extension point {extension_point!r} is not served by constructor "
                f"registry {self._constructors.name!r}.",
                target_kind=target_kind,
            )

        try:
            rows = self._source.rows_for(target_kind, extension_point)
        except ConfigurationError as exc:
            if not exc.target_kind:
                exc.target_kind = target_kind
            raise
        except Exception as exc:
            raise ConfigurationError(
                f"Configuration source {type(self._source).__name__} failed for kind "
                f"{target_kind!r}: {exc}",
                target_kind=target_kind,
            ) from exc

        registrations: list[Registration] = []
        for row in rows:
            if not isinstance(row, Mapping):
                raise ConfigurationError(
                    f"Registration row for kind {target_kind!r} is not a mapping: {row!r}",
                    target_kind=target_kind,
                )
            registration = parse_row(row, target_kind)
            if registration.target_kind != target_kind:
                continue
            if registration.bypass_execution:
                logger.debug(
                    "Registration %r for kind %r is configured with bypass_execution; skipping.",
                    registration.constructor_ref,
                    target_kind,
                )
                continue
            self.resolve(registration)
            registrations.append(registration)
        return registrations

    def resolve(self, registration: Registration) -> type[PluginConstructor]:
        """Return the constructor class *registration* refers to.

        Raises
        ------
        ConfigurationError
            If ``registration.constructor_ref`` is not registered.
        """
        try:
            return self._constructors.get(registration.constructor_ref)
        except PluginNotFoundError as exc:
            raise ConfigurationError(
                f"Constructor {registration.constructor_ref!r} configured for kind "
                f"{registration.target_kind!r} is not registered in "
                f"{self._constructors.name!r}.",
                target_kind=registration.target_kind,
                constructor_ref=registration.constructor_ref,
            ) from exc
