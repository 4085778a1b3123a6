"""Mapping strategy registry with auto-discovery and default fallback."""

import importlib
import inspect
import logging
import pkgutil
from typing import Dict, List, Optional

from bulk_ingest.mapping.base import MappingStrategy
from bulk_ingest.mapping.default import DefaultMapping

logger = logging.getLogger(__name__)


class MappingRegistry:
    """Resolves format keys to mapping strategies.

    - Auto-discovers MappingStrategy subclasses in bulk_ingest/mapping/
    - Unknown format keys resolve to the default strategy
    - Strategies are stateless, so one instance per format is shared
    """

    def __init__(self, default: Optional[MappingStrategy] = None):
        self._strategies: Dict[str, MappingStrategy] = {}
        default = default or DefaultMapping()
        self._default_key = default.format_key
        self.register(default)

    def register(self, strategy: MappingStrategy) -> None:
        if not strategy.format_key:
            raise ValueError(f"{type(strategy).__name__} has no format_key")
        self._strategies[strategy.format_key] = strategy

    def discover(self) -> None:
        """Scan the bulk_ingest.mapping package for strategies and register them."""
        import bulk_ingest.mapping as mapping_pkg

        for _, modname, ispkg in pkgutil.walk_packages(
            mapping_pkg.__path__, prefix="bulk_ingest.mapping."
        ):
            if ispkg or modname in ("bulk_ingest.mapping.base", "bulk_ingest.mapping.registry"):
                continue
            try:
                mod = importlib.import_module(modname)
            except Exception as e:
                logger.warning(f"Failed to import mapping module {modname}: {e}")
                continue

            for _, obj in inspect.getmembers(mod, inspect.isclass):
                if (
                    issubclass(obj, MappingStrategy)
                    and obj is not MappingStrategy
                    and not inspect.isabstract(obj)
                    and obj.format_key
                    and obj.format_key not in self._strategies
                ):
                    self.register(obj())
                    logger.info(f"Registered mapping format: {obj.format_key}")

    def resolve(self, format_key: Optional[str]) -> MappingStrategy:
        """Strategy for format_key, or the default one. Never fails."""
        strategy = self._strategies.get(format_key) if format_key else None
        return strategy or self._strategies[self._default_key]

    def formats(self) -> List[str]:
        return sorted(self._strategies)


# Global registry instance
registry = MappingRegistry()
registry.discover()
