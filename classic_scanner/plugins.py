"""Plugin (load order) list parsing.

Reads the PLUGINS block of a crash log and builds the index -> filename
table used to resolve FormID prefixes. Matches lines such as::

    [00]     Fallout4.esm
    [FE:001] LightPlugin.esl
    [0A]	ModName.esp
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Optional

from .segments import LogSegment, SegmentType

PLUGIN_ENTRY_PATTERN = re.compile(r'^\s*\[([0-9A-Fa-f]{2}(?::[0-9A-Fa-f]{3})?)\]\s+(.+?)\s*$')


@dataclass
class PluginEntry:
    """One load order slot."""
    index: str
    filename: str
    is_light: bool = False


@dataclass
class PluginList:
    """Load order table split into standard (00-FD) and light (FE:xxx) plugins."""
    plugins: Dict[str, PluginEntry] = field(default_factory=dict)
    light_plugins: Dict[str, PluginEntry] = field(default_factory=dict)
    total_count: int = 0


def parse_plugin_entry(line: str) -> Optional[PluginEntry]:
    """Parse a single plugin list line, or return None if it is not one."""
    match = PLUGIN_ENTRY_PATTERN.match(line)
    if not match:
        return None

    index = match.group(1).upper()
    filename = match.group(2).strip()
    if not filename:
        return None

    return PluginEntry(index=index, filename=filename, is_light=':' in index)


def parse_plugin_list(segment: Optional[LogSegment]) -> PluginList:
    """Build a PluginList from the plugins segment of a crash log.

    A missing segment, a segment of another type or an empty one all give
    an empty list.
    """
    plugin_list = PluginList()

    if segment is None or segment.type is not SegmentType.PLUGINS:
        return plugin_list

    for line in segment.lines:
        entry = parse_plugin_entry(line)
        if entry is None:
            continue

        if entry.is_light:
            plugin_list.light_plugins[entry.index] = entry
        else:
            plugin_list.plugins[entry.index] = entry

    plugin_list.total_count = len(plugin_list.plugins) + len(plugin_list.light_plugins)
    return plugin_list


def get_plugin_by_index(index: str, plugin_list: PluginList) -> Optional[str]:
    """Look up a plugin filename by hex index ("0A", "FE:001")."""
    normalized = index.upper()

    if normalized.startswith('FE'):
        light_entry = plugin_list.light_plugins.get(normalized)
        if light_entry:
            return light_entry.filename

    entry = plugin_list.plugins.get(normalized)
    return entry.filename if entry else None


def plugin_list_to_dict(plugin_list: PluginList) -> Dict[str, str]:
    """Map plugin filename -> hex index, light plugins included."""
    mapping: Dict[str, str] = {}
    for index, entry in plugin_list.plugins.items():
        mapping[entry.filename] = index
    for index, entry in plugin_list.light_plugins.items():
        mapping[entry.filename] = index
    return mapping
