"""Registration subsystem — configured plugin bindings and where they come from.

Quick start
-----------
::

    from trigger_dispatch.plugins import PluginConstructor, PluginRegistry
    from trigger_dispatch.registration import (
        EXTENSION_POINT,
        InMemoryConfigurationSource,
        Registration,
        RegistrationStore,
    )

    constructors = PluginRegistry(PluginConstructor, EXTENSION_POINT)
    source = InMemoryConfigurationSource()
    source.add(Registration("invoice", 10, "compute-totals"))

    store = RegistrationStore(source, constructors)
    store.load_for("invoice", EXTENSION_POINT)
"""
from __future__ import annotations

from trigger_dispatch.registration.registration import (
    EXTENSION_POINT,
    Registration,
    RegistrationRow,
    parse_row,
)
from trigger_dispatch.registration.sources import (
    ConfigurationSource,
    InMemoryConfigurationSource,
    JsonFileConfigurationSource,
)
from trigger_dispatch.registration.store import RegistrationStore

__all__ = [
    "EXTENSION_POINT",
    "ConfigurationSource",
    "InMemoryConfigurationSource",
    "JsonFileConfigurationSource",
    "Registration",
    "RegistrationRow",
    "RegistrationStore",
    "parse_row",
]
