"""Plugin subsystem for trigger-dispatch.

Plugin authors implement two roles from :mod:`trigger_dispatch.plugins.contracts`
and register their constructor by name in a
:class:`~trigger_dispatch.plugins.registry.PluginRegistry`. Third-party
constructors can also be advertised through ``importlib.metadata``
entry-points under the "trigger_dispatch.constructors" group.

Example
-------
Declare a constructor in pyproject.toml:

.. code-block:: toml

    [project.entry-points."trigger_dispatch.constructors"]
    stamp-created-by = "my_package.plugins:StampCreatedBy"
"""
from __future__ import annotations

from trigger_dispatch.plugins.contracts import (
    PluginConstructor,
    PluginInstance,
    instance_constructor,
)
from trigger_dispatch.plugins.registry import (
    PluginAlreadyRegisteredError,
    PluginNotFoundError,
    PluginRegistry,
)

ENTRYPOINT_GROUP = "trigger_dispatch.constructors"

__all__ = [
    "ENTRYPOINT_GROUP",
    "PluginAlreadyRegisteredError",
    "PluginConstructor",
    "PluginInstance",
    "PluginNotFoundError",
    "PluginRegistry",
    "instance_constructor",
]
