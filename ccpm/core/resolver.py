"""Turn a user-supplied plugin token into a ``(name, alias)`` pair."""

from __future__ import annotations

from typing import Tuple

from ccpm.core.errors import AmbiguousPluginError, PluginNotFoundError
from ccpm.core.installed import InstalledPlugins, PluginId, is_qualified


def resolve_plugin_spec(token: str, installed: InstalledPlugins) -> Tuple[str, str]:
    """Resolve ``name@alias`` verbatim, or find the one marketplace a bare name comes from.

    Qualified tokens are not checked against the inventory. Bare names match
    case-sensitively.
    """
    if is_qualified(token):
        parsed = PluginId.parse(token)
        return parsed.name, parsed.alias

    matches = installed.aliases_for_name(token)
    if not matches:
        raise PluginNotFoundError(token)
    if len(matches) > 1:
        raise AmbiguousPluginError(token, matches)
    return token, matches[0]


def resolve_plugin_id(token: str, installed: InstalledPlugins) -> PluginId:
    name, alias = resolve_plugin_spec(token, installed)
    return PluginId.join(name, alias)
