"""FormID extraction and plugin resolution.

FormIDs are 8-digit hex record identifiers. The upper byte is the plugin's
load order index, the lower 6 digits the record inside that plugin.
Crash generators print them in the call stack as ``FormID: 0x000EAFB6``.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from .plugins import PluginList

FORMID_PATTERN = re.compile(r'Form\s*ID:?\s*0x([0-9A-Fa-f]{8})\b', re.IGNORECASE)

# Runtime-created (non-persistent) records live in the FF range
DYNAMIC_PREFIX = 'FF'

LIGHT_PLUGIN_INDEX = 0xFE

NULL_FORMID = '00000000'


@dataclass(frozen=True)
class ExtractedFormId:
    """A FormID found in the call stack."""
    formid: str
    plugin_index: int
    record_id: str
    line_number: int


@dataclass
class ResolvedFormId:
    """An extracted FormID paired with its load order plugin."""
    extracted: ExtractedFormId
    plugin_name: Optional[str]

    @property
    def plugin_found(self) -> bool:
        return self.plugin_name is not None


def parse_plugin_index(formid: str) -> int:
    return int(formid[:2], 16)


def parse_record_id(formid: str) -> str:
    return formid[2:].upper()


def should_filter_formid(formid: str) -> bool:
    """True for dynamic FF-prefixed FormIDs.

    The null FormID 00000000 is always kept, it points at a null reference.
    """
    normalized = formid.upper()
    if normalized == NULL_FORMID:
        return False
    return normalized.startswith(DYNAMIC_PREFIX)


def extract_formids(lines: Iterable[str]) -> List[ExtractedFormId]:
    """Extract FormIDs from call stack lines.

    Results follow line order, then left-to-right order within a line.
    Dynamic (FF) FormIDs are dropped.
    """
    formids: List[ExtractedFormId] = []
    if not lines:
        return formids

    for line_number, line in enumerate(lines):
        if not line:
            continue

        for match in FORMID_PATTERN.finditer(line):
            formid_hex = match.group(1).upper()
            if should_filter_formid(formid_hex):
                continue

            formids.append(ExtractedFormId(
                formid=formid_hex,
                plugin_index=parse_plugin_index(formid_hex),
                record_id=parse_record_id(formid_hex),
                line_number=line_number,
            ))

    return formids


def count_formid_occurrences(formids: Iterable[ExtractedFormId]) -> Dict[str, int]:
    """Count occurrences per full FormID."""
    counts: Dict[str, int] = {}
    for extracted in formids:
        counts[extracted.formid] = counts.get(extracted.formid, 0) + 1
    return counts


def plugin_index_to_hex(index: int) -> str:
    return f"{index:02X}"


def resolve_plugin_index(formid: ExtractedFormId, plugin_list: PluginList) -> Optional[str]:
    """Resolve the plugin that owns a FormID.

    Light plugins share the FE prefix and need a sub-index decoded from the
    record id to be told apart; that is not done, so FE FormIDs are never
    resolved.
    """
    hex_index = plugin_index_to_hex(formid.plugin_index)

    if hex_index == 'FE':
        return None

    entry = plugin_list.plugins.get(hex_index)
    return entry.filename if entry else None


def resolve_formids(formids: Iterable[ExtractedFormId], plugin_list: PluginList) -> List[ResolvedFormId]:
    return [
        ResolvedFormId(extracted=extracted, plugin_name=resolve_plugin_index(extracted, plugin_list))
        for extracted in formids
    ]


def group_by_plugin(resolved_formids: Iterable[ResolvedFormId]) -> Dict[str, List[ResolvedFormId]]:
    """Group resolved FormIDs by plugin name ("Unknown" when unresolved)."""
    groups: Dict[str, List[ResolvedFormId]] = {}
    for resolved in resolved_formids:
        key = resolved.plugin_name or 'Unknown'
        groups.setdefault(key, []).append(resolved)
    return groups


def is_base_game_formid(formid: ExtractedFormId) -> bool:
    return formid.plugin_index == 0


def is_light_plugin_formid(formid: ExtractedFormId) -> bool:
    return formid.plugin_index == LIGHT_PLUGIN_INDEX
