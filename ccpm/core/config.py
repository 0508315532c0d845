"""Configuration management for ccpm.

The config file maps upstream marketplace repositories (``org/name``) to the
local aliases Claude clones them under::

    # ccpm - Claude Code Plugin Manager configuration
    # Format: repo: alias
    marketplaces:
      plinde/claude-plugins: plinde-plugins

The file is only ever created by a mutating command (``add``, ``remove``,
``discover``); loading a missing file yields an empty in-memory config.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, Field, PrivateAttr, ValidationError, field_validator

from ccpm.core.errors import ConfigError
from ccpm.core.paths import config_path
from ccpm.utils.log import get_logger

logger = get_logger()

CONFIG_HEADER = "# ccpm - Claude Code Plugin Manager configuration\n# Format: repo: alias\n"
CONFIG_DIR_MODE = 0o755
CONFIG_FILE_MODE = 0o644


class MarketplaceConfig(BaseModel):
    """Repo -> alias mapping persisted in ``ccpm.yaml``."""

    model_config = {"extra": "ignore"}

    marketplaces: Dict[str, str] = Field(default_factory=dict)

    _path: Path = PrivateAttr(default_factory=config_path)

    @field_validator("marketplaces", mode="before")
    @classmethod
    def _empty_mapping(cls, value: Any) -> Any:
        return {} if value is None or value == "" else value

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> "MarketplaceConfig":
        """Load the config at ``path`` (default location when omitted)."""
        target = Path(path) if path else config_path()
        try:
            text = target.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug(
                "[config] Config not found; using empty config",
                extra={"path": str(target)},
            )
            config = cls()
            config._path = target
            return config
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigError(f"reading config: {exc}") from exc

        try:
            # BaseLoader keeps every scalar a string, so aliases like 2024 or on stay text.
            data = yaml.load(text, Loader=yaml.BaseLoader)
        except yaml.YAMLError as exc:
            raise ConfigError(f"parsing config {target}: {exc}") from exc

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"parsing config {target}: top level must be a mapping")

        try:
            config = cls.model_validate(data)
        except ValidationError as exc:
            raise ConfigError(f"parsing config {target}: {exc}") from exc
        config._path = target
        logger.debug(
            "[config] Loaded config",
            extra={"path": str(target), "marketplace_count": len(config.marketplaces)},
        )
        return config

    @property
    def path(self) -> Path:
        return self._path

    @property
    def is_default(self) -> bool:
        """True when this config lives at the default location."""
        return self._path == config_path()

    def dump(self) -> str:
        """Render the file contents, header included."""
        body = yaml.safe_dump(
            {"marketplaces": dict(self.marketplaces)},
            default_flow_style=False,
            sort_keys=True,
            allow_unicode=True,
        )
        return CONFIG_HEADER + body

    def save(self) -> Path:
        """Write the config to disk, creating its directory if needed."""
        try:
            self._path.parent.mkdir(mode=CONFIG_DIR_MODE, parents=True, exist_ok=True)
        except OSError as exc:
            raise ConfigError(f"creating config directory: {exc}") from exc
        try:
            self._path.write_text(self.dump(), encoding="utf-8")
            os.chmod(self._path, CONFIG_FILE_MODE)
        except OSError as exc:
            raise ConfigError(f"writing config: {exc}") from exc
        logger.debug(
            "[config] Saved config",
            extra={"path": str(self._path), "marketplace_count": len(self.marketplaces)},
        )
        return self._path

    def get_alias(self, repo: str) -> Optional[str]:
        return self.marketplaces.get(repo)

    def get_repo(self, alias: str) -> Optional[str]:
        for repo, mapped in self.marketplaces.items():
            if mapped == alias:
                return repo
        return None

    def add_marketplace(self, repo: str, alias: str) -> None:
        """Insert or overwrite the mapping for ``repo``."""
        self.marketplaces[repo] = alias

    def remove_marketplace(self, repo: str) -> bool:
        """Drop ``repo``; returns False when it was not configured."""
        if repo not in self.marketplaces:
            return False
        del self.marketplaces[repo]
        return True

    def repos(self) -> List[str]:
        return list(self.marketplaces)

    def aliases(self) -> List[str]:
        """All configured aliases, sorted."""
        return sorted(self.marketplaces.values())


def load_config(path: Optional[Union[str, Path]] = None) -> MarketplaceConfig:
    """Load the ccpm config, defaulting to ``~/.config/ccpm.yaml``."""
    return MarketplaceConfig.load(path)
