"""Core crash log scanning for the CLASSIC scanner.

Reads a crash log, detects the game, segments the log and runs the FormID
suspect analysis over the call stack using the load order from the same
log.
"""
from __future__ import annotations

import codecs
import os
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from .analyzer import FormIdAnalysisConfig, FormIdAnalysisResult, analyze_formids
from .constants import DEFAULT_GAME, ENV_VARS, MAX_CRASH_LOG_SIZE, SUPPORTED_GAMES
from .formid_db import FormIdDatabase
from .plugins import parse_plugin_list
from .segments import SegmentType, detect_game, find_segment, parse_log_segments, segment_lines

_TRUTHY = ('1', 'true', 'yes', 'on')


@dataclass
class ScanConfig:
    """Options for scanning one crash log."""
    log_path: str
    game: Optional[str] = None
    verbose: bool = False
    max_errors: Optional[int] = None
    enable_formid_analysis: bool = True
    show_formid_values: bool = True
    formid_database_paths: List[str] = field(default_factory=list)

    @classmethod
    def from_env(cls, log_path: str, **overrides: Any) -> "ScanConfig":
        """Build a config from CLASSIC_* environment variables.

        Keyword overrides that are not None win over the environment.
        """
        game = os.environ.get(ENV_VARS["game"]) or None
        if game is not None:
            game = game.lower()
            if game not in SUPPORTED_GAMES:
                game = None

        verbose = os.environ.get(ENV_VARS["verbose"], "").strip().lower() in _TRUTHY

        config = cls(log_path=log_path, game=game, verbose=verbose)
        for key, value in overrides.items():
            if value is not None:
                setattr(config, key, value)
        return config


@dataclass
class Issue:
    """A problem found while scanning."""
    id: str
    severity: str
    title: str
    description: str
    suggestion: Optional[str] = None
    related_mod: Optional[str] = None
    line_number: Optional[int] = None


@dataclass
class ScanMetadata:
    start_time: datetime
    file_path: str
    game: str
    end_time: Optional[datetime] = None
    duration_ms: Optional[float] = None
    lines_processed: int = 0


@dataclass
class ScanResult:
    """Complete result of scanning a crash log."""
    status: str
    metadata: ScanMetadata
    issues: List[Issue] = field(default_factory=list)
    formid_analysis: Optional[FormIdAnalysisResult] = None

    def to_dict(self) -> Dict[str, Any]:
        meta = self.metadata
        return {
            'status': self.status,
            'issues': [
                {k: v for k, v in issue.__dict__.items() if v is not None}
                for issue in self.issues
            ],
            'metadata': {
                'startTime': meta.start_time.isoformat(),
                'endTime': meta.end_time.isoformat() if meta.end_time else None,
                'durationMs': meta.duration_ms,
                'filePath': meta.file_path,
                'game': meta.game,
                'linesProcessed': meta.lines_processed,
            },
            'formIdAnalysis': self.formid_analysis.to_dict() if self.formid_analysis else None,
        }


def read_crash_log(log_path: str) -> Tuple[Optional[str], Optional[str]]:
    """
    Read a crash log, trying common encodings.

    Returns:
        (content, None) on success, (None, error message) on failure
    """
    if not os.path.isfile(log_path):
        return None, f"File not found: {log_path}"

    try:
        size = os.path.getsize(log_path)
    except OSError as e:
        return None, f"Could not read log file: {e}"

    if size > MAX_CRASH_LOG_SIZE:
        return None, f"Crash log too large ({size / 1024 / 1024:.1f} MB): {log_path}"

    try:
        with open(log_path, 'rb') as f:
            raw = f.read()
    except OSError as e:
        return None, f"Could not read log file: {e}"

    # latin-1 accepts any byte, so it goes last; utf-16 only with a BOM
    encodings = ['utf-8', 'cp1252', 'latin-1']
    if raw.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)):
        encodings.insert(0, 'utf-16')

    for encoding in encodings:
        try:
            return raw.decode(encoding), None
        except UnicodeDecodeError:
            continue

    return None, 'Could not read log file'


def _finish(result: ScanResult, start: float, lines_processed: int = 0) -> ScanResult:
    result.metadata.end_time = datetime.now()
    result.metadata.duration_ms = (time.perf_counter() - start) * 1000
    result.metadata.lines_processed = lines_processed
    return result


def scan_crash_log(config: ScanConfig, database: Optional[FormIdDatabase] = None) -> ScanResult:
    """
    Scan a crash log file.

    Args:
        config: Scan options
        database: Caller-owned FormID database. When omitted a private one is
            created for this scan and closed before returning.

    Returns:
        ScanResult; read failures give status "failed" with a file-read-error issue
    """
    start = time.perf_counter()
    start_time = datetime.now()
    issues: List[Issue] = []

    content, error = read_crash_log(config.log_path)
    if content is None:
        if config.verbose:
            print(f"[-] {error}")
        return _finish(ScanResult(
            status='failed',
            metadata=ScanMetadata(start_time=start_time, file_path=config.log_path,
                                  game=config.game or DEFAULT_GAME),
            issues=[Issue(
                id='file-read-error',
                severity='error',
                title='Failed to read crash log',
                description=error or 'Unknown error',
            )],
        ), start)

    detected_game = config.game or detect_game(content, os.path.basename(config.log_path))
    if not detected_game:
        issues.append(Issue(
            id='game-detection-failed',
            severity='warning',
            title='Could not detect game',
            description='Unable to determine which game this crash log is from',
        ))
    game = detected_game or DEFAULT_GAME

    if config.verbose:
        print(f"[*] Scanning {config.log_path} ({game})")

    parsed = parse_log_segments(content, game)

    result = ScanResult(
        status='completed',
        metadata=ScanMetadata(start_time=start_time, file_path=config.log_path, game=game),
        issues=issues,
    )

    if config.enable_formid_analysis:
        owns_database = database is None
        if owns_database:
            database = FormIdDatabase(verbose=config.verbose)
        try:
            plugin_list = parse_plugin_list(find_segment(parsed, SegmentType.PLUGINS))
            result.formid_analysis = analyze_formids(
                segment_lines(parsed, SegmentType.CALLSTACK),
                plugin_list,
                FormIdAnalysisConfig(
                    game=game,
                    show_formid_values=config.show_formid_values,
                    formid_database_paths=list(config.formid_database_paths),
                ),
                database=database,
                generator_name=parsed.generator,
            )
        finally:
            if owns_database:
                database.close()

        if config.verbose:
            print(f"[+] Found {len(result.formid_analysis.matches)} FormID suspects "
                  f"({plugin_list.total_count} plugins in load order)")

    if config.max_errors is not None:
        del result.issues[config.max_errors:]

    return _finish(result, start, parsed.total_lines)
