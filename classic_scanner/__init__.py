"""CLASSIC crash log scanner package.

This package turns Bethesda-engine crash logs (Buffout4, NetScriptFramework,
Crash Logger) into structured evidence:
- Segmentation of the raw log into header, call stack, registers, modules and plugins
- FormID extraction from the call stack
- Load order parsing and FormID plugin resolution
- FormID description lookups in the per-game SQLite databases
- Ranked FormID suspect lists
"""
from .analyzer import (
    FormIdAnalysisConfig,
    FormIdAnalysisResult,
    FormIdMatch,
    analyze_formids,
    analyze_formids_sync,
    format_formid_analysis,
)
from .core import (
    Issue,
    ScanConfig,
    ScanMetadata,
    ScanResult,
    read_crash_log,
    scan_crash_log,
)
from .formid import (
    ExtractedFormId,
    count_formid_occurrences,
    extract_formids,
    resolve_plugin_index,
)
from .formid_db import (
    DatabaseLoadResult,
    FormIdDatabase,
    FormIdDatabaseEntry,
    FormIdQuery,
)
from .plugins import (
    PluginEntry,
    PluginList,
    parse_plugin_list,
)
from .segments import (
    LogSegment,
    ParsedCrashLog,
    SegmentType,
    detect_game,
    parse_log_segments,
)
from .constants import VERSION

__all__ = [
    # Scanner
    "Issue",
    "ScanConfig",
    "ScanMetadata",
    "ScanResult",
    "read_crash_log",
    "scan_crash_log",
    # Segmentation
    "LogSegment",
    "ParsedCrashLog",
    "SegmentType",
    "detect_game",
    "parse_log_segments",
    # FormIDs
    "ExtractedFormId",
    "count_formid_occurrences",
    "extract_formids",
    "resolve_plugin_index",
    "PluginEntry",
    "PluginList",
    "parse_plugin_list",
    # Database
    "DatabaseLoadResult",
    "FormIdDatabase",
    "FormIdDatabaseEntry",
    "FormIdQuery",
    # Analysis
    "FormIdAnalysisConfig",
    "FormIdAnalysisResult",
    "FormIdMatch",
    "analyze_formids",
    "analyze_formids_sync",
    "format_formid_analysis",
]

__version__ = VERSION
