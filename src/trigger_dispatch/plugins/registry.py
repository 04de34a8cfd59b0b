"""PluginRegistry — named lookup table of plugin implementations.

A registry is bound to one base class (the capability contract) and one
name. Implementations are added explicitly through the :meth:`register`
decorator or :meth:`register_class`, or discovered from an
``importlib.metadata`` entry-point group via :meth:`load_entrypoints`.

The dispatch engine uses a registry of
:class:`~trigger_dispatch.plugins.contracts.PluginConstructor` subclasses
to turn a configured ``constructor_ref`` string into an executable class.
The registry name doubles as the extension-point tag that configuration
rows must carry.

Example
-------
::

    from trigger_dispatch.plugins import PluginConstructor, PluginRegistry

    constructors = PluginRegistry(PluginConstructor, "trigger_action")

    @constructors.register("stamp-created-by")
    class StampCreatedBy(PluginConstructor):
        def construct(self, records, context):
            ...
"""
from __future__ import annotations

import importlib.metadata
import inspect
import logging
import threading
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PluginNotFoundError(KeyError):
    """Raised when a plugin name is not present in a registry."""

    def __init__(self, plugin_name: str, registry_name: str) -> None:
        self.plugin_name = plugin_name
        self.registry_name = registry_name
        super().__init__(
            f"Plugin {plugin_name!r} is not registered in {registry_name!r}."
        )


class PluginAlreadyRegisteredError(ValueError):
    """Raised when registering a plugin name that is already taken."""

    def __init__(self, plugin_name: str, registry_name: str) -> None:
        self.plugin_name = plugin_name
        self.registry_name = registry_name
        super().__init__(
            f"Plugin {plugin_name!r} is already registered in {registry_name!r}. "
            "Deregister it first to replace the implementation."
        )


class PluginRegistry(Generic[T]):
    """Thread-safe mapping of plugin names to implementation classes.

    Parameters
    ----------
    base_class:
        Every registered class must be a subclass of this type.
    name:
        Registry name, used in error messages and as the extension-point
        tag by the dispatch engine.
    """

    def __init__(self, base_class: type[T], name: str) -> None:
        self._base_class = base_class
        self._name = name
        self._plugins: dict[str, type[T]] = {}
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        """The registry name."""
        return self._name

    @property
    def base_class(self) -> type[T]:
        """The contract every registered class satisfies."""
        return self._base_class

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, plugin_name: str) -> Callable[[type[T]], type[T]]:
        """Return a class decorator that registers the decorated class.

        The decorated class is returned unchanged.

        Raises
        ------
        PluginAlreadyRegisteredError
            If *plugin_name* is already taken.
        TypeError
            If the class is not a subclass of the registry's base class.
        """

        def decorator(cls: type[T]) -> type[T]:
            self.register_class(plugin_name, cls)
            return cls

        return decorator

    def register_class(self, plugin_name: str, cls: type[T]) -> None:
        """Register *cls* under *plugin_name*.

        Raises
        ------
        PluginAlreadyRegisteredError
            If *plugin_name* is already taken.
        TypeError
            If *cls* is not a concrete subclass of the registry's base class.
        """
        self._validate(cls)
        with self._lock:
            if plugin_name in self._plugins:
                raise PluginAlreadyRegisteredError(plugin_name, self._name)
            self._plugins[plugin_name] = cls

    def deregister(self, plugin_name: str) -> None:
        """Remove *plugin_name* from the registry.

        Raises
        ------
        PluginNotFoundError
            If *plugin_name* is not registered.
        """
        with self._lock:
            if plugin_name not in self._plugins:
                raise PluginNotFoundError(plugin_name, self._name)
            del self._plugins[plugin_name]

    def load_entrypoints(self, group: str) -> None:
        """Register every class advertised under the entry-point *group*.

        Names already present are skipped, so calling this twice is safe.
        Entry points that fail to import or do not satisfy the contract are
        logged and skipped; one broken distribution does not prevent the
        others from loading.
        """
        for entry_point in importlib.metadata.entry_points(group=group):
            if entry_point.name in self:
                logger.debug(
                    "Entry point %r already registered in %r; skipping.",
                    entry_point.name,
                    self._name,
                )
                continue
            try:
                cls = entry_point.load()
            except Exception:
                logger.warning(
                    "Failed to load entry point %r from group %r.",
                    entry_point.name,
                    group,
                    exc_info=True,
                )
                continue
            try:
                self.register_class(entry_point.name, cls)
            except (TypeError, PluginAlreadyRegisteredError) as exc:
                logger.warning(
                    "Entry point %r rejected by registry %r: %s",
                    entry_point.name,
                    self._name,
                    exc,
                )

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, plugin_name: str) -> type[T]:
        """Return the class registered under *plugin_name*.

        Raises
        ------
        PluginNotFoundError
            If *plugin_name* is not registered.
        """
        with self._lock:
            if plugin_name not in self._plugins:
                raise PluginNotFoundError(plugin_name, self._name)
            return self._plugins[plugin_name]

    def list_plugins(self) -> list[str]:
        """Return registered plugin names, sorted."""
        with self._lock:
            return sorted(self._plugins)

    def _validate(self, cls: object) -> None:
        if not isinstance(cls, type) or not issubclass(cls, self._base_class):
            raise TypeError(
                f"{cls!r} must be a subclass of {self._base_class.__name__} "
                f"to be registered in {self._name!r}."
            )
        if inspect.isabstract(cls):
            raise TypeError(
                f"{cls.__name__} is abstract and cannot be registered in {self._name!r}."
            )

    def __contains__(self, plugin_name: object) -> bool:
        with self._lock:
            return plugin_name in self._plugins

    def __len__(self) -> int:
        with self._lock:
            return len(self._plugins)

    def __repr__(self) -> str:
        return (
            f"PluginRegistry(name={self._name!r}, "
            f"base_class={self._base_class.__name__}, "
            f"plugins={len(self)})"
        )
