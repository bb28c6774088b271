"""
Configuration helpers for report generation.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

LOGGER = logging.getLogger(__name__)

_ENV_LOADED = False

ENV_PREFIX = "HANDBALLSTATS_"
DEFAULT_CACHE_DIR = ".cache"
DEFAULT_REPORT_CONFIG = "config/report.yml"


def _env_candidates() -> List[Path]:
    """Explicit file first, then the working directory, then the project root."""
    candidates: List[Path] = []
    explicit = os.getenv(f"{ENV_PREFIX}ENV_FILE")
    if explicit:
        candidates.append(Path(explicit))
    for path in (Path.cwd() / ".env", Path(__file__).resolve().parents[1] / ".env"):
        if path not in candidates:
            candidates.append(path)
    return candidates


def parse_env_file(path: Path) -> Dict[str, str]:
    """
    Read ``KEY=value`` pairs from a dotenv file.

    Blank lines, ``#`` comments and lines without ``=`` are skipped. An
    ``export`` prefix and matching surrounding quotes are dropped.
    """
    values: Dict[str, str] = {}
    for line in path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if stripped.startswith("export "):
            stripped = stripped[len("export "):].lstrip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = (part.strip() for part in stripped.split("=", 1))
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]
        if key:
            values[key] = value
    return values


def _ensure_env_loaded() -> None:
    """
    Apply dotenv files once per process. Variables already set win.
    """
    global _ENV_LOADED  # noqa: PLW0603 - intentional module level state
    if _ENV_LOADED:
        return

    for path in _env_candidates():
        if not path.is_file():
            continue
        try:
            values = parse_env_file(path)
        except OSError as exc:
            LOGGER.warning("Could not read env file %s: %s", path, exc)
            continue
        applied = [key for key in values if key not in os.environ]
        for key in applied:
            os.environ[key] = values[key]
        LOGGER.debug("Loaded %s variables from %s", len(applied), path)

    _ENV_LOADED = True


def _setting(name: str, default: Optional[str] = None) -> Optional[str]:
    raw = os.getenv(f"{ENV_PREFIX}{name}")
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def _optional_int(name: str) -> Optional[int]:
    raw = _setting(name)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        LOGGER.warning("Ignoring non-integer %s%s=%r", ENV_PREFIX, name, raw)
        return None


@dataclass(frozen=True)
class ReportSettings:
    """
    Runtime configuration for building statistics reports.
    """

    cache_dir: str
    report_config: str
    cache_ttl: Optional[int] = None
    output_path: Optional[str] = None

    @classmethod
    def from_env(cls) -> "ReportSettings":
        """
        Construct settings from ``HANDBALLSTATS_*`` variables with defaults.
        """
        _ensure_env_loaded()
        return cls(
            cache_dir=_setting("CACHE_DIR", DEFAULT_CACHE_DIR),
            report_config=_setting("REPORT_CONFIG", DEFAULT_REPORT_CONFIG),
            cache_ttl=_optional_int("CACHE_TTL"),
            output_path=_setting("OUTPUT"),
        )
