# src/sources/registry.py — v1
"""Adapter registry, assembled once at startup.

Adapters are loaded from the SOURCE_ADAPTERS dotted-path table and bound
to a shared SourceContext.
"""

from __future__ import annotations

import importlib
import logging
from typing import TYPE_CHECKING

from signalgate.config.sources import SOURCE_ADAPTERS
from signalgate.sources.base_adapter import BaseSourceAdapter
from signalgate.sources.context import SourceContext

if TYPE_CHECKING:
    from signalgate.config.settings import Settings

logger = logging.getLogger(__name__)


class RegistryError(Exception):
    """Raised when an adapter cannot be loaded or looked up."""


class AdapterRegistry:
    """Ordered collection of source adapters sharing one context."""

    def __init__(self, context: SourceContext) -> None:
        self._context = context
        self._adapters: dict[str, BaseSourceAdapter] = {}

    @property
    def context(self) -> SourceContext:
        return self._context

    @property
    def adapters(self) -> list[BaseSourceAdapter]:
        return list(self._adapters.values())

    @property
    def source_ids(self) -> list[str]:
        return list(self._adapters)

    def register(self, adapter: BaseSourceAdapter) -> None:
        if adapter.id in self._adapters:
            logger.warning("Overwriting existing adapter: %s", adapter.id)
        self._adapters[adapter.id] = adapter

    def get(self, source_id: str) -> BaseSourceAdapter | None:
        return self._adapters.get(source_id)

    def get_or_raise(self, source_id: str) -> BaseSourceAdapter:
        adapter = self._adapters.get(source_id)
        if adapter is None:
            raise RegistryError(f"Source '{source_id}' not found in registry")
        return adapter

    def load(self, source_ids: list[str] | None = None) -> None:
        """Instantiate adapters from SOURCE_ADAPTERS.

        Args:
            source_ids: Sources to load (default: all known sources).

        Raises:
            RegistryError: If an id is unknown or its class cannot be imported.
        """
        for source_id in source_ids if source_ids is not None else list(SOURCE_ADAPTERS):
            class_path = SOURCE_ADAPTERS.get(source_id)
            if class_path is None:
                raise RegistryError(
                    f"Unknown source: {source_id!r}. "
                    f"Available: {', '.join(sorted(SOURCE_ADAPTERS))}"
                )
            adapter_cls = _import_class(class_path)
            self.register(adapter_cls(self._context))
            logger.debug("Loaded adapter: %s", source_id)
        logger.info("Registry loaded %d source adapter(s)", len(self._adapters))


def _import_class(class_path: str) -> type[BaseSourceAdapter]:
    module_path, _, class_name = class_path.rpartition(".")
    try:
        module = importlib.import_module(module_path)
        adapter_cls = getattr(module, class_name)
    except (ImportError, AttributeError) as e:
        raise RegistryError(f"Cannot import adapter {class_path}: {e}") from e
    if not (isinstance(adapter_cls, type) and issubclass(adapter_cls, BaseSourceAdapter)):
        raise RegistryError(f"{class_path} is not a BaseSourceAdapter")
    return adapter_cls


def create_registry(
    settings: Settings, context: SourceContext | None = None
) -> AdapterRegistry:
    """Build a registry for the sources listed in settings."""
    registry = AdapterRegistry(context or SourceContext.from_settings(settings))
    registry.load(settings.comparison_sources_list)
    return registry
