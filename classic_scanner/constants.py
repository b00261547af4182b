"""Application-wide constants for the CLASSIC crash log scanner."""

import re
from typing import Dict, List, Tuple

VERSION = "0.1.0"

APP_NAME = "CLASSIC"

APP_TITLE = "Crash Log Auto Scanner & Setup Integrity Checker"

SUPPORTED_GAMES = ("fallout4", "skyrim")

DEFAULT_GAME = "fallout4"

# Crash log file name patterns, checked in order
CRASH_LOG_PATTERNS: Dict[str, List[re.Pattern]] = {
    "fallout4": [
        re.compile(r"crash-.*\.log$", re.IGNORECASE),
        re.compile(r"Buffout4.*\.log$", re.IGNORECASE),
        re.compile(r"crashlog.*\.txt$", re.IGNORECASE),
    ],
    "skyrim": [
        re.compile(r"crash-.*\.log$", re.IGNORECASE),
        re.compile(r"NetScriptFramework.*\.log$", re.IGNORECASE),
        re.compile(r"crashlog.*\.txt$", re.IGNORECASE),
    ],
}

# Content hints used when the file name gives nothing away
GAME_CONTENT_HINTS: Dict[str, Tuple[str, ...]] = {
    "fallout4": ("fallout4", "f4se", "buffout4"),
    "skyrim": ("skyrim", "skse", "netscriptframework"),
}

# SQLite table holding the FormID entries for each game
FORMID_TABLE_NAMES: Dict[str, str] = {
    "fallout4": "Fallout4",
    "skyrim": "Skyrim",
}

DATABASE_NAMES: Dict[str, Dict[str, str]] = {
    "fallout4": {
        "main": "Fallout4 FormIDs Main.db",
        "local": "Fallout4 FormIDs Local.db",
    },
    "skyrim": {
        "main": "Skyrim FormIDs Main.db",
        "local": "Skyrim FormIDs Local.db",
    },
}

MAX_CRASH_LOG_SIZE = 50 * 1024 * 1024  # 50 MB

ENV_VARS = {
    "data_path": "CLASSIC_DATA_PATH",
    "verbose": "CLASSIC_VERBOSE",
    "game": "CLASSIC_GAME",
}

PASTEBIN_OUTPUT_DIR = "Crash Logs/Pastebin"
