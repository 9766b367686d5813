"""Cleanup policy: exclusion rules and scan thresholds, backed by a JSON file."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path, PurePath
from typing import Any

from diskcleaner.utils import xdg_config_home

log = logging.getLogger(__name__)

_CONFIG_DIR = "diskcleaner"
_CONFIG_FILE = "config.json"


def _default_excluded_paths() -> list[Path]:
    # System directories that should never be cleaned
    return [
        Path("/bin"),
        Path("/sbin"),
        Path("/usr/bin"),
        Path("/usr/sbin"),
        Path("/System"),
        Path("C:\\Windows"),
        Path("C:\\Program Files"),
        Path("C:\\Program Files (x86)"),
    ]


def _default_excluded_extensions() -> list[str]:
    return [".exe", ".dll", ".sys", ".ini", ".cfg"]


def default_config_path() -> Path:
    return xdg_config_home() / _CONFIG_DIR / _CONFIG_FILE


@dataclass
class Config:
    """Policy record consumed by the scanner and the cleaner.

    Only mutate between operations; running operations read it without
    locking.
    """

    use_trash: bool = True
    include_hidden_files: bool = False
    follow_symlinks: bool = False
    min_file_size: int = 0
    max_file_age_days: int = 365
    excluded_paths: list[Path] = field(default_factory=_default_excluded_paths)
    excluded_extensions: list[str] = field(default_factory=_default_excluded_extensions)

    def is_path_excluded(self, path: Path | str) -> bool:
        """Check *path* against the excluded path prefixes and extensions.

        A prefix matches whole path components, so ``/binaries`` is not
        excluded by ``/bin``.  Extensions compare case-insensitively with
        their leading dot.
        """
        pure = PurePath(path)
        for excluded in self.excluded_paths:
            if pure.is_relative_to(excluded):
                return True

        suffix = pure.suffix.lower()
        if suffix:
            return any(suffix == ext.lower() for ext in self.excluded_extensions)
        return False

    # ── persistence ──────────────────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["excluded_paths"] = [str(p) for p in self.excluded_paths]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        """Build a config from a parsed JSON object, ignoring unknown keys.

        Raises:
            ValueError: If a known key holds a value of the wrong type.
        """
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        kwargs: dict[str, Any] = {}
        for f in fields(cls):
            if f.name not in data:
                continue
            value = data[f.name]
            match f.name:
                case "use_trash" | "include_hidden_files" | "follow_symlinks":
                    valid = isinstance(value, bool)
                case "min_file_size" | "max_file_age_days":
                    valid = isinstance(value, int) and not isinstance(value, bool) and value >= 0
                case _:
                    valid = isinstance(value, list) and all(isinstance(v, str) for v in value)
            if not valid:
                raise ValueError(f"invalid value for {f.name}: {value!r}")
            kwargs[f.name] = value

        if "excluded_paths" in kwargs:
            kwargs["excluded_paths"] = [Path(p) for p in kwargs["excluded_paths"]]
        return cls(**kwargs)

    @classmethod
    def load(cls, path: Path | None = None) -> Config:
        """Load config from disk, falling back to defaults on any problem."""
        path = path or default_config_path()
        if not path.exists():
            log.info("Using default configuration")
            return cls()
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            config = cls.from_dict(data)
        except (ValueError, OSError) as e:
            log.warning("Could not load config from %s: %s", path, e)
            return cls()
        log.info("Loaded configuration from: %s", path)
        return config

    def save(self, path: Path | None = None) -> None:
        """Persist config to disk."""
        path = path or default_config_path()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(self.to_dict(), indent=2) + "\n", encoding="utf-8")
        except OSError as e:
            log.warning("Could not save config to %s: %s", path, e)
            return
        log.info("Saved configuration to: %s", path)
