"""Shared error types for ccpm."""

from __future__ import annotations

from typing import Sequence


class CcpmError(Exception):
    """Base class for errors raised by ccpm core modules."""


class ConfigError(CcpmError):
    """The ccpm config file could not be read, parsed or written."""


class InventoryError(CcpmError):
    """Claude's installed-plugin manifest could not be read."""


class CatalogError(CcpmError):
    """A marketplace catalog or plugin manifest could not be read."""


class PluginIdError(CcpmError, ValueError):
    """A plugin identifier is not of the form ``name@marketplace``."""

    def __init__(self, value: str) -> None:
        super().__init__(f"invalid plugin ID format: {value} (expected name@marketplace)")
        self.value = value


class PluginResolutionError(CcpmError, ValueError):
    """A bare plugin name could not be mapped to a single marketplace."""

    def __init__(self, name: str, message: str) -> None:
        super().__init__(message)
        self.name = name


class PluginNotFoundError(PluginResolutionError):
    def __init__(self, name: str) -> None:
        super().__init__(name, "not found in any marketplace")


class AmbiguousPluginError(PluginResolutionError):
    """Raised when a bare name is installed from more than one marketplace."""

    def __init__(self, name: str, candidates: Sequence[str]) -> None:
        self.candidates = sorted(candidates)
        message = (
            "ambiguous - exists in multiple marketplaces: "
            f"{', '.join(self.candidates)}\n"
            f"Please specify: {name}@<marketplace>"
        )
        super().__init__(name, message)


class UnknownMarketplaceError(CcpmError):
    """A requested marketplace is not in the config."""


class MarketplacesRootMissingError(CcpmError):
    """The directory holding marketplace clones does not exist."""
