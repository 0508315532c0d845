"""Readers for locally cloned marketplaces.

A marketplace clone lives at ``~/.claude/plugins/marketplaces/<alias>`` and
looks like::

    <alias>/
      .claude-plugin/marketplace.json     catalog
      <plugin>/.claude-plugin/plugin.json per-plugin metadata
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ccpm.core.config import MarketplaceConfig
from ccpm.core.errors import CatalogError
from ccpm.core.paths import marketplaces_root
from ccpm.utils.log import get_logger

logger = get_logger()

PLUGIN_META_DIR = ".claude-plugin"
CATALOG_FILE = "marketplace.json"
PLUGIN_MANIFEST_FILE = "plugin.json"

_GITHUB_SSH_PREFIX = "git@github.com:"
_GITHUB_HTTPS_MARKER = "github.com/"


def _blank_if_null(value: Any) -> Any:
    return "" if value is None else value


class Owner(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = ""
    email: str = ""

    blank_strings = field_validator("name", "email", mode="before")(_blank_if_null)


class MarketplaceMetadata(BaseModel):
    model_config = ConfigDict(extra="allow")

    description: str = ""
    version: str = ""
    homepage: str = ""
    repository: str = ""

    blank_strings = field_validator(
        "description", "version", "homepage", "repository", mode="before"
    )(_blank_if_null)


class CatalogPlugin(BaseModel):
    """A plugin entry in ``marketplace.json``.

    Only name, description and version are interpreted; the rest is carried
    through as-is since marketplaces disagree on their shape.
    """

    model_config = ConfigDict(extra="allow")

    name: str
    description: str = ""
    version: str = ""
    source: Any = None
    author: Any = None
    homepage: Optional[str] = None
    repository: Optional[str] = None
    license: Optional[str] = None
    category: Optional[str] = None
    keywords: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)

    blank_strings = field_validator("description", "version", mode="before")(_blank_if_null)

    @field_validator("keywords", "tags", mode="before")
    @classmethod
    def _null_list(cls, value: Any) -> Any:
        return [] if value is None else value


class MarketplaceCatalog(BaseModel):
    """Parsed ``.claude-plugin/marketplace.json``."""

    model_config = ConfigDict(extra="allow")

    name: str = ""
    owner: Owner = Field(default_factory=Owner)
    metadata: MarketplaceMetadata = Field(default_factory=MarketplaceMetadata)
    plugins: List[CatalogPlugin] = Field(default_factory=list)

    @field_validator("owner", "metadata", mode="before")
    @classmethod
    def _null_object(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("plugins", mode="before")
    @classmethod
    def _null_plugins(cls, value: Any) -> Any:
        return [] if value is None else value

    def get_plugin(self, name: str) -> Optional[CatalogPlugin]:
        for plugin in self.plugins:
            if plugin.name == name:
                return plugin
        return None

    def plugin_names(self) -> List[str]:
        return [plugin.name for plugin in self.plugins]


class PluginManifest(BaseModel):
    """Parsed ``<plugin>/.claude-plugin/plugin.json``."""

    model_config = ConfigDict(extra="allow")

    name: str = ""
    description: str = ""
    version: str = ""

    blank_strings = field_validator("name", "description", "version", mode="before")(
        _blank_if_null
    )


@dataclass(frozen=True)
class LocalMarketplace:
    alias: str
    repo: str
    path: Path
    catalog: MarketplaceCatalog


def catalog_path(marketplace_path: Path) -> Path:
    return marketplace_path / PLUGIN_META_DIR / CATALOG_FILE


def plugin_manifest_path(marketplace_path: Path, plugin_name: str) -> Path:
    return marketplace_path / plugin_name / PLUGIN_META_DIR / PLUGIN_MANIFEST_FILE


def is_plugin_dir(path: Path) -> bool:
    """True when ``path`` holds a ``.claude-plugin`` directory."""
    return (path / PLUGIN_META_DIR).exists()


def _read_json(path: Path, label: str) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise CatalogError(f"reading {label}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise CatalogError(f"parsing {label}: {exc}") from exc


def load_catalog(marketplace_path: Union[str, Path]) -> MarketplaceCatalog:
    """Parse the catalog of the marketplace cloned at ``marketplace_path``."""
    path = catalog_path(Path(marketplace_path))
    payload = _read_json(path, CATALOG_FILE)
    if not isinstance(payload, dict):
        raise CatalogError(f"parsing {CATALOG_FILE}: root must be an object")
    try:
        return MarketplaceCatalog.model_validate(payload)
    except ValidationError as exc:
        raise CatalogError(f"parsing {CATALOG_FILE}: {exc}") from exc


def load_plugin_manifest(
    marketplace_path: Union[str, Path], plugin_name: str
) -> PluginManifest:
    path = plugin_manifest_path(Path(marketplace_path), plugin_name)
    payload = _read_json(path, PLUGIN_MANIFEST_FILE)
    if not isinstance(payload, dict):
        raise CatalogError(f"parsing {PLUGIN_MANIFEST_FILE}: root must be an object")
    try:
        return PluginManifest.model_validate(payload)
    except ValidationError as exc:
        raise CatalogError(f"parsing {PLUGIN_MANIFEST_FILE}: {exc}") from exc


def read_plugin_manifest(marketplace_path: Path, plugin_name: str) -> PluginManifest:
    """Like :func:`load_plugin_manifest`, but an unreadable file yields an empty manifest."""
    try:
        return load_plugin_manifest(marketplace_path, plugin_name)
    except CatalogError as exc:
        logger.debug(
            "[marketplace] Ignoring unreadable plugin manifest",
            extra={"marketplace": str(marketplace_path), "plugin": plugin_name, "error": str(exc)},
        )
        return PluginManifest(name=plugin_name)


def list_marketplace_dirs(root: Optional[Path] = None) -> List[str]:
    """Sorted names of the directories directly under the clone root."""
    base = root or marketplaces_root()
    if not base.is_dir():
        return []
    return sorted(entry.name for entry in base.iterdir() if entry.is_dir())


def list_catalog_marketplaces(root: Optional[Path] = None) -> List[str]:
    """Marketplace directories that carry a catalog file."""
    base = root or marketplaces_root()
    return [name for name in list_marketplace_dirs(base) if catalog_path(base / name).is_file()]


def list_plugin_dirs(marketplace_path: Path) -> List[str]:
    """Plugin directory names inside a marketplace clone.

    Hidden directories are skipped, as are directories without a
    ``.claude-plugin/plugin.json``.
    """
    if not marketplace_path.is_dir():
        return []
    names: List[str] = []
    for entry in sorted(marketplace_path.iterdir()):
        if not entry.is_dir() or entry.name.startswith("."):
            continue
        if plugin_manifest_path(marketplace_path, entry.name).is_file():
            names.append(entry.name)
    return names


def load_all_catalogs(
    config: MarketplaceConfig, root: Optional[Path] = None
) -> Dict[str, LocalMarketplace]:
    """Catalogs for every configured marketplace keyed by alias.

    Marketplaces whose catalog cannot be loaded are left out.
    """
    base = root or marketplaces_root()
    loaded: Dict[str, LocalMarketplace] = {}
    for repo, alias in config.marketplaces.items():
        path = base / alias
        try:
            catalog = load_catalog(path)
        except CatalogError as exc:
            logger.debug(
                "[marketplace] Skipping marketplace without a usable catalog",
                extra={"alias": alias, "error": str(exc)},
            )
            continue
        loaded[alias] = LocalMarketplace(alias=alias, repo=repo, path=path, catalog=catalog)
    return loaded


def parse_repo_from_remote(remote_url: str) -> str:
    """Extract ``org/name`` from a GitHub remote URL.

    Recognizes ``git@github.com:org/name(.git)`` and
    ``https://github.com/org/name(.git)``; anything else yields ``""``.
    """
    url = remote_url.strip().removesuffix(".git")
    if url.startswith(_GITHUB_SSH_PREFIX):
        return url.removeprefix(_GITHUB_SSH_PREFIX)
    if _GITHUB_HTTPS_MARKER in url:
        return url.split(_GITHUB_HTTPS_MARKER, 1)[1]
    return ""
