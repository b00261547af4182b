"""
FormID Database Manager

Read-only access to the per-game SQLite FormID databases that map
(plugin, record id) pairs to human-readable descriptions, with a bounded
in-process query cache.
"""

import sqlite3
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple

from .constants import FORMID_TABLE_NAMES

_LOOKUP_SQL = (
    "SELECT plugin, formid, entry FROM {table} "
    "WHERE formid = ? AND plugin = ? COLLATE NOCASE LIMIT 1"
)


@dataclass(frozen=True)
class FormIdDatabaseEntry:
    """Row from a FormID database."""
    plugin: str
    formid: str
    entry: str


@dataclass(frozen=True)
class FormIdQuery:
    """Batch lookup request: 6-digit record id plus plugin filename."""
    formid: str
    plugin: str


@dataclass
class DatabaseLoadResult:
    success: bool
    error: Optional[str] = None


class FormIdDatabase:
    """Manages FormID database connections and the lookup cache.

    One read-only connection per game. The instance is owned by the caller
    and passed to the analyzer; all operations hold an internal lock so a
    shared instance stays consistent across threads.
    """

    def __init__(self, cache_max_size: int = 1000, verbose: bool = False):
        """
        Initialize the database manager.

        Args:
            cache_max_size: Maximum cached lookups before the oldest half is dropped
            verbose: Print status messages
        """
        self.cache_max_size = cache_max_size
        self.verbose = verbose
        self._connections: Dict[str, sqlite3.Connection] = {}
        self._cache: Dict[Tuple[str, str, str], Optional[FormIdDatabaseEntry]] = {}
        self._lock = threading.RLock()

    def __enter__(self) -> "FormIdDatabase":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def load_database(self, db_path, game: str) -> DatabaseLoadResult:
        """
        Open a FormID database read-only for a game.

        Any existing connection for the game is closed first and the game's
        cached lookups are dropped.

        Args:
            db_path: Path to the SQLite database file
            game: Game tag ("fallout4", "skyrim")

        Returns:
            DatabaseLoadResult; failures carry an error message instead of raising
        """
        with self._lock:
            existing = self._connections.pop(game, None)
            if existing is not None:
                existing.close()

            # Cached answers belong to the previous file
            for key in [k for k in self._cache if k[0] == game]:
                del self._cache[key]

            conn = None
            try:
                uri = Path(db_path).resolve().as_uri() + "?mode=ro"
                conn = sqlite3.connect(uri, uri=True, check_same_thread=False)
                # Connecting is lazy; touch the schema so bad files fail here
                conn.execute("SELECT name FROM sqlite_master LIMIT 1").fetchall()
            except (sqlite3.Error, OSError, ValueError) as e:
                if conn is not None:
                    conn.close()
                message = f"Failed to load FormID database: {e}"
                if self.verbose:
                    print(f"[-] {message} ({db_path})")
                return DatabaseLoadResult(success=False, error=message)

            self._connections[game] = conn
            if self.verbose:
                print(f"[+] Loaded FormID database for {game}: {db_path}")
            return DatabaseLoadResult(success=True)

    def has_database(self, game: str) -> bool:
        with self._lock:
            return game in self._connections

    def lookup_formid(self, formid: str, plugin: str, game: str) -> Optional[FormIdDatabaseEntry]:
        """
        Look up a FormID description.

        Args:
            formid: 6-digit record id (no plugin prefix)
            plugin: Plugin filename, matched case-insensitively
            game: Game tag

        Returns:
            Matching entry, or None when not found or no database is loaded
        """
        with self._lock:
            conn = self._connections.get(game)
            if conn is None:
                return None

            cache_key = self._cache_key(game, plugin, formid)
            if cache_key in self._cache:
                return self._cache[cache_key]

            entry = self._query(conn, game, formid, plugin)
            self._add_to_cache(cache_key, entry)
            return entry

    def lookup_formid_batch(
        self, queries: Iterable[FormIdQuery], game: str
    ) -> Dict[Tuple[str, str], FormIdDatabaseEntry]:
        """
        Look up several FormIDs at once.

        Cached queries are answered without touching the database; the rest
        are queried and cached like single lookups.

        Returns:
            Dict keyed by (formid, plugin) holding only the queries that resolved
        """
        results: Dict[Tuple[str, str], FormIdDatabaseEntry] = {}

        with self._lock:
            conn = self._connections.get(game)
            if conn is None:
                return results

            for query in queries:
                cache_key = self._cache_key(game, query.plugin, query.formid)
                if cache_key in self._cache:
                    entry = self._cache[cache_key]
                else:
                    entry = self._query(conn, game, query.formid, query.plugin)
                    self._add_to_cache(cache_key, entry)

                if entry is not None:
                    results[(query.formid, query.plugin)] = entry

        return results

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()

    def close(self) -> None:
        """Close every connection and drop the cache."""
        with self._lock:
            for conn in self._connections.values():
                conn.close()
            self._connections.clear()
            self._cache.clear()

    @property
    def cache_size(self) -> int:
        with self._lock:
            return len(self._cache)

    def is_cached(self, formid: str, plugin: str, game: str) -> bool:
        with self._lock:
            return self._cache_key(game, plugin, formid) in self._cache

    @staticmethod
    def get_table_name(game: str) -> str:
        return FORMID_TABLE_NAMES.get(game, game)

    @staticmethod
    def _cache_key(game: str, plugin: str, formid: str) -> Tuple[str, str, str]:
        return (game, plugin, formid.upper())

    def _query(
        self, conn: sqlite3.Connection, game: str, formid: str, plugin: str
    ) -> Optional[FormIdDatabaseEntry]:
        """Run one lookup; database errors count as not found."""
        sql = _LOOKUP_SQL.format(table=self.get_table_name(game))
        try:
            row = conn.execute(sql, (formid.upper(), plugin)).fetchone()
        except sqlite3.Error as e:
            if self.verbose:
                print(f"[-] FormID lookup failed for {plugin}:{formid}: {e}")
            return None

        if row is None:
            return None
        return FormIdDatabaseEntry(plugin=row[0], formid=row[1], entry=row[2])

    def _add_to_cache(self, key: Tuple[str, str, str], value: Optional[FormIdDatabaseEntry]) -> None:
        # Batch eviction: drop the oldest half by insertion order, not LRU
        if len(self._cache) >= self.cache_max_size:
            for old_key in list(self._cache)[:max(1, self.cache_max_size // 2)]:
                del self._cache[old_key]
        self._cache[key] = value
