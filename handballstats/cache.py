"""
Disk backed cache for built statistics reports.

Entries are addressed by a fingerprint of the report inputs, so a changed
configuration or event file simply misses.
"""
from __future__ import annotations

import hashlib
import json
import logging
import os
import re
import time
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

LOGGER = logging.getLogger(__name__)

ENTRY_PREFIX = "report-"
_FINGERPRINT_RE = re.compile(r"^[0-9a-f]{16,128}$")


def fingerprint(parts: Iterable[Any]) -> str:
    """
    Stable key for a set of JSON serialisable inputs.
    """
    digest = hashlib.sha256()
    for part in parts:
        digest.update(json.dumps(part, sort_keys=True, default=str).encode("utf-8"))
        digest.update(b"\x00")
    return digest.hexdigest()


class ReportCache:
    """
    Store report payloads under ``report-<fingerprint>.json``.

    Each file wraps the report with its fingerprint and creation time; age
    checks use the recorded time, not the file's mtime.
    """

    def __init__(self, cache_dir: str, default_ttl: Optional[int] = None):
        self.cache_dir = Path(cache_dir)
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self.default_ttl = default_ttl

    def path_for(self, report_fingerprint: str) -> Path:
        if not _FINGERPRINT_RE.match(report_fingerprint):
            raise ValueError(f"Not a report fingerprint: {report_fingerprint!r}")
        return self.cache_dir / f"{ENTRY_PREFIX}{report_fingerprint}.json"

    def load(self, report_fingerprint: str, *, max_age: Optional[int] = None) -> Optional[Dict[str, Any]]:
        """
        Return the cached report, or ``None`` when missing, stale or unreadable.
        """
        path = self.path_for(report_fingerprint)
        if not path.exists():
            return None

        try:
            with path.open("r", encoding="utf-8") as handle:
                entry = json.load(handle)
        except json.JSONDecodeError:
            LOGGER.warning("Ignoring unreadable cache entry %s", path)
            return None
        if not isinstance(entry, dict) or entry.get("fingerprint") != report_fingerprint:
            LOGGER.warning("Ignoring cache entry %s with a foreign fingerprint", path)
            return None

        ttl = max_age if max_age is not None else self.default_ttl
        if ttl is not None and time.time() - float(entry.get("createdAt", 0)) > ttl:
            LOGGER.debug("Cache entry %s expired", report_fingerprint)
            return None
        return entry.get("report")

    def store(self, report_fingerprint: str, report: Dict[str, Any]) -> Path:
        """
        Write ``report`` atomically and return the entry path.
        """
        path = self.path_for(report_fingerprint)
        entry = {"fingerprint": report_fingerprint, "createdAt": time.time(), "report": report}
        tmp_path = path.with_name(f"{path.name}.{os.getpid()}.tmp")
        with tmp_path.open("w", encoding="utf-8") as handle:
            json.dump(entry, handle)
        tmp_path.replace(path)
        return path

    def entries(self) -> List[Path]:
        return sorted(self.cache_dir.glob(f"{ENTRY_PREFIX}*.json"))

    def clear(self) -> int:
        """
        Remove every report entry and return how many were removed.
        """
        removed = 0
        for path in self.entries():
            path.unlink()
            removed += 1
        return removed
