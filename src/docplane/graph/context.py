"""Per-run parse context.

Owns the compiled pattern cache for one run. Created once by the caller and
passed explicitly into every parsing function; nothing here is module-global.
"""

from __future__ import annotations

import hashlib
import re
import threading
from dataclasses import dataclass, field

from docplane.config.models import DocPlaneConfig


def _pattern_key(pattern: str, flags: int) -> str:
    return hashlib.sha256(f"{flags}:{pattern}".encode()).hexdigest()[:12]


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    size: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0


@dataclass
class ParseContext:
    """Shared, read-mostly state for one parse run.

    The map phase may call ``pattern`` from several worker threads, so cache
    mutation is guarded by a lock. Parsed records never live here.
    """

    global_scope_paths: tuple[str, ...] = ()
    _patterns: dict[str, re.Pattern[str]] = field(default_factory=dict, repr=False)
    _stats: CacheStats = field(default_factory=CacheStats, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @classmethod
    def from_config(cls, config: DocPlaneConfig) -> ParseContext:
        return cls(global_scope_paths=tuple(config.terminology.global_scope_paths))

    def pattern(self, pattern: str, flags: int = 0) -> re.Pattern[str]:
        """Compiled pattern for ``pattern``, cached by content hash."""
        key = _pattern_key(pattern, flags)
        with self._lock:
            compiled = self._patterns.get(key)
            if compiled is not None:
                self._stats.hits += 1
                return compiled
            self._stats.misses += 1
            compiled = re.compile(pattern, flags)
            self._patterns[key] = compiled
            self._stats.size = len(self._patterns)
            return compiled

    def cache_stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                hits=self._stats.hits, misses=self._stats.misses, size=self._stats.size
            )

    def clear(self) -> None:
        with self._lock:
            self._patterns.clear()
            self._stats = CacheStats()

    def is_global_scope(self, path: str) -> bool:
        """Whether definitions in ``path`` are project-global.

        Entries ending in ``/`` are directory prefixes; others must match the
        relative path exactly. ``TerminologyConfig`` adds the slash to
        configured directory entries.
        """
        for entry in self.global_scope_paths:
            if entry.endswith("/"):
                if path.startswith(entry):
                    return True
            elif path == entry:
                return True
        return False
