from __future__ import annotations

import copy
import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Final, Mapping, Sequence

import yaml

LOGGER = logging.getLogger(__name__)

REPORT_CONFIG_FILENAME: Final[str] = "config_report.yaml"

MAX_CELL_LENGTH: Final[int] = 500

# Column titles of a daily report; the first column is "browser" for Playwright runs.
COLUMNS_AVAILABLE: Final[tuple[str, ...]] = (
    "area",
    "spec",
    "test name",
    "type",
    "category",
    "team",
    "priority",
    "status",
    "state",
    "manual case",
    "error",
    "speed",
)
PLAYWRIGHT_FIRST_COLUMN: Final[str] = "browser"

# A daily tab's column-title row contains all of these.
HEADER_INDICATORS: Final[tuple[str, ...]] = ("test name", "state")
FOOTER_ROW: Final[str] = "- END -"

DEFAULT_HEADER_METRICS: Final[tuple[str, ...]] = (
    "# passed tests",
    "# failed tests",
    "# skipped/pending tests",
    "# total tests",
)

# 0-based positions of the classification axes inside a report row.
AXIS_COLUMN_INDEX: Final[dict[str, int]] = {"type": 3, "category": 4, "team": 5}
STATE_COLUMN_INDEX: Final[int] = COLUMNS_AVAILABLE.index("state")

DEFAULT_TEST_TYPES: Final[tuple[str, ...]] = (
    "api",
    "ui",
    "unit",
    "integration",
    "endToEnd",
    "performance",
    "security",
    "database",
    "accessibility",
    "web",
    "mobile",
)
DEFAULT_TEST_CATEGORIES: Final[tuple[str, ...]] = (
    "smoke",
    "regression",
    "sanity",
    "exploratory",
    "functional",
    "load",
    "stress",
    "usability",
    "compatibility",
    "alpha",
    "beta",
)
DEFAULT_TEAM_NAMES: Final[tuple[str, ...]] = (
    "raptors",
    "kimchi",
    "protus",
    "danza",
    "sloth",
    "winter",
    "oregano",
    "spoofer",
    "juniper",
    "occaecati",
    "wilkins",
    "canonicus",
)

WEEKDAY_NAMES: Final[tuple[str, ...]] = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)


def get_config_base() -> Path:
    """Return the directory holding the bundled YAML configuration."""
    return Path(__file__).resolve().parents[1] / "config"


def _read_yaml_dict(path: Path) -> dict[str, Any]:
    """Return mapping parsed from *path*, raising on malformed YAML."""
    if not path.exists():
        LOGGER.debug("Config file %s does not exist; using empty mapping", path)
        return {}
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:  # pragma: no cover - file permission issues are environment-dependent
        raise RuntimeError(f"Failed to read config file {path}: {exc}") from exc
    try:
        data = yaml.safe_load(content) or {}
    except yaml.YAMLError as exc:
        raise RuntimeError(f"Failed to parse YAML file {path}: {exc}") from exc
    if not isinstance(data, Mapping):
        raise RuntimeError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
    return dict(data)


@lru_cache(maxsize=None)
def _load_config_cached(base_dir: str) -> dict[str, Any]:
    data = _read_yaml_dict(Path(base_dir) / REPORT_CONFIG_FILENAME)
    LOGGER.debug("report config loaded from %s: %s", base_dir, sorted(data))
    return data


def load_config(
    refresh: bool = False,
    *,
    base_dir: str | os.PathLike[str] | None = None,
) -> dict[str, Any]:
    """Return a deep-copied report configuration dictionary.

    Set ``refresh=True`` to discard the cached content and re-read from disk.
    """
    config_base = Path(base_dir) if base_dir is not None else get_config_base()
    cache_key = str(config_base.resolve())
    if refresh:
        _load_config_cached.cache_clear()
    data = _load_config_cached(cache_key)
    return copy.deepcopy(data)


def _label_tuple(value: Any, fallback: Sequence[str]) -> tuple[str, ...]:
    if value is None:
        return tuple(fallback)
    if isinstance(value, str) or not isinstance(value, Sequence):
        raise TypeError(f"Label universe must be a list of strings, got {type(value).__name__}")
    labels = tuple(str(item) for item in value if str(item).strip())
    return labels or tuple(fallback)


def _coerce_positive_int(value: Any, default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        LOGGER.warning("Invalid integer config value %r; using %s", value, default)
        return default
    return number if number > 0 else default


@dataclass(frozen=True)
class ClassificationConfig:
    """Read-only classification settings shared by one report build.

    Built once from the YAML mapping and handed explicitly to the
    extractors, the row builder and the header builder.
    """

    test_types: tuple[str, ...] = DEFAULT_TEST_TYPES
    test_categories: tuple[str, ...] = DEFAULT_TEST_CATEGORIES
    team_names: tuple[str, ...] = DEFAULT_TEAM_NAMES
    columns: tuple[str, ...] = ()
    week_start: str = "Monday"
    unclassified_label: str = ""
    max_cell_length: int = MAX_CELL_LENGTH
    csv_downloads_path: str = "downloads"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "ClassificationConfig":
        data = data or {}
        week_start = str(data.get("week_start") or "Monday").strip().capitalize()
        if week_start not in WEEKDAY_NAMES:
            raise ValueError(f"week_start must be a weekday name, got {week_start!r}")
        columns = data.get("columns") or ()
        return cls(
            test_types=_label_tuple(data.get("test_types"), DEFAULT_TEST_TYPES),
            test_categories=_label_tuple(data.get("test_categories"), DEFAULT_TEST_CATEGORIES),
            team_names=_label_tuple(data.get("team_names"), DEFAULT_TEAM_NAMES),
            columns=tuple(str(item) for item in columns),
            week_start=week_start,
            unclassified_label=str(data.get("unclassified_label") or ""),
            max_cell_length=_coerce_positive_int(data.get("max_cell_length", MAX_CELL_LENGTH), MAX_CELL_LENGTH),
            csv_downloads_path=str(data.get("csv_downloads_path") or "downloads"),
        )

    def label_universe(self, axis: str) -> tuple[str, ...]:
        """Return the configured labels for ``type``, ``category`` or ``team``."""
        if axis == "type":
            return self.test_types
        if axis == "category":
            return self.test_categories
        if axis == "team":
            return self.team_names
        raise ValueError(f"Unknown classification axis: {axis!r}")

    @property
    def week_start_index(self) -> int:
        return WEEKDAY_NAMES.index(self.week_start)


def get_classification_config(
    *, config: Mapping[str, Any] | None = None, refresh: bool = False
) -> ClassificationConfig:
    """Return the classification settings parsed from the configuration."""
    data = config if config is not None else load_config(refresh=refresh)
    return ClassificationConfig.from_mapping(data)


def columns_available(
    is_playwright_run: bool, config: ClassificationConfig | None = None
) -> list[str]:
    if config is not None and config.columns:
        return list(config.columns)
    columns = list(COLUMNS_AVAILABLE)
    if is_playwright_run:
        columns[0] = PLAYWRIGHT_FIRST_COLUMN
    return columns
