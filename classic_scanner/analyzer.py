"""FormID suspect analysis.

Runs the FormID pipeline over a crash log call stack: extraction,
occurrence counting, plugin resolution against the load order and
description lookups in the FormID database, producing a ranked suspect
list.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .db_paths import find_available_databases
from .formid import (
    ExtractedFormId,
    count_formid_occurrences,
    extract_formids,
    plugin_index_to_hex,
    resolve_plugin_index,
)
from .formid_db import FormIdDatabase
from .plugins import PluginList


@dataclass
class FormIdMatch:
    """A FormID suspect with its resolved plugin."""
    formid: str
    plugin: str
    count: int
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            'formId': self.formid,
            'plugin': self.plugin,
            'count': self.count,
        }
        if self.description is not None:
            data['description'] = self.description
        return data


@dataclass
class FormIdAnalysisResult:
    """Outcome of a FormID analysis run."""
    matches: List[FormIdMatch] = field(default_factory=list)
    database_available: bool = False
    generator_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'matches': [m.to_dict() for m in self.matches],
            'databaseAvailable': self.database_available,
            'generatorName': self.generator_name,
        }


@dataclass
class FormIdAnalysisConfig:
    """Options for a FormID analysis run."""
    game: str
    enabled: bool = True
    show_formid_values: bool = True
    formid_database_paths: List[str] = field(default_factory=list)


def _build_matches(
    extracted_formids: List[ExtractedFormId],
    plugin_list: PluginList,
    game: str,
    database: Optional[FormIdDatabase],
    lookup_descriptions: bool,
) -> List[FormIdMatch]:
    occurrence_counts = count_formid_occurrences(extracted_formids)

    matches: List[FormIdMatch] = []
    seen = set()

    for extracted in extracted_formids:
        # Later occurrences only feed the count
        if extracted.formid in seen:
            continue
        seen.add(extracted.formid)

        plugin_name = resolve_plugin_index(extracted, plugin_list)
        match = FormIdMatch(
            formid=extracted.formid,
            plugin=plugin_name or f"Unknown [{plugin_index_to_hex(extracted.plugin_index)}]",
            count=occurrence_counts.get(extracted.formid, 1),
        )

        if lookup_descriptions and database is not None and plugin_name:
            db_entry = database.lookup_formid(extracted.record_id, plugin_name, game)
            if db_entry:
                match.description = db_entry.entry

        matches.append(match)

    # Stable sort: equal counts keep first-seen order
    matches.sort(key=lambda m: m.count, reverse=True)
    return matches


def analyze_formids(
    callstack_lines: Sequence[str],
    plugin_list: PluginList,
    config: FormIdAnalysisConfig,
    database: Optional[FormIdDatabase] = None,
    generator_name: Optional[str] = None,
) -> FormIdAnalysisResult:
    """
    Analyze FormIDs found in crash log call stack lines.

    If no database is loaded for the game yet and descriptions are wanted,
    the first existing database file (default locations, then
    config.formid_database_paths) is loaded into ``database``. A missing or
    unreadable database only disables descriptions.

    Discovery needs a handle to load into: with ``database=None`` no file is
    opened, config.formid_database_paths is not consulted and the result
    always has database_available=False.

    Args:
        callstack_lines: Lines from the call stack segment
        plugin_list: Parsed load order for prefix resolution
        config: Analysis options
        database: Caller-owned FormID database handle, or None for no lookups
        generator_name: Crash generator name to carry into the result

    Returns:
        FormIdAnalysisResult with matches sorted by count, highest first
    """
    if not config.enabled:
        return FormIdAnalysisResult(matches=[], database_available=False)

    extracted_formids = extract_formids(callstack_lines)
    if not extracted_formids:
        return FormIdAnalysisResult(matches=[], database_available=False, generator_name=generator_name)

    database_available = database is not None and database.has_database(config.game)

    if database is not None and not database_available and config.show_formid_values:
        db_paths = find_available_databases(config.game, config.formid_database_paths)
        if db_paths:
            database_available = database.load_database(db_paths[0], config.game).success

    matches = _build_matches(
        extracted_formids,
        plugin_list,
        config.game,
        database,
        lookup_descriptions=database_available and config.show_formid_values,
    )

    return FormIdAnalysisResult(
        matches=matches,
        database_available=database_available,
        generator_name=generator_name,
    )


def analyze_formids_sync(
    callstack_lines: Sequence[str],
    plugin_list: PluginList,
    game: str,
    database: Optional[FormIdDatabase],
    generator_name: Optional[str] = None,
) -> FormIdAnalysisResult:
    """Analyze FormIDs against an already loaded database, never loading one."""
    database_available = database is not None and database.has_database(game)

    matches = _build_matches(
        extract_formids(callstack_lines),
        plugin_list,
        game,
        database,
        lookup_descriptions=database_available,
    )

    return FormIdAnalysisResult(
        matches=matches,
        database_available=database_available,
        generator_name=generator_name,
    )


def format_formid_analysis(result: FormIdAnalysisResult) -> List[str]:
    """Render the FormID suspect list as report lines."""
    lines: List[str] = []

    if not result.matches:
        lines.append("* COULDN'T FIND ANY FORM ID SUSPECTS *")
        lines.append("")
        return lines

    for match in result.matches:
        if match.description:
            lines.append(f"- Form ID: {match.formid} | [{match.plugin}] | {match.description} | {match.count}")
        else:
            lines.append(f"- Form ID: {match.formid} | [{match.plugin}] | {match.count}")

    lines.append("")
    lines.append("[Last number counts how many times each Form ID shows up in the crash log.]")

    if result.generator_name:
        lines.append(
            f"These Form IDs were caught by {result.generator_name} and some of them might be related to this crash."
        )

    lines.append("You can try searching any listed Form IDs in xEdit and see if they lead to relevant records.")
    lines.append("")

    return lines
