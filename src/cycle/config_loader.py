"""Load, validate, and hot-reload the LunaLoop cycle engine configuration.

The config lives in ``cycle_config.yaml`` alongside this module.  At startup
it is loaded once and cached.  Call ``reload_cycle_config()`` to re-read from
disk after an edit — no restart required.

Usage::

    from src.cycle.config_loader import get_cycle_config

    config = get_cycle_config()
    config.cycle.luteal_length_days          # 14
    config.gamification.point("DAILY_LOG")   # 50
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger("lunaloop.cycle.config")

# Path to the YAML file sitting next to this module
_CONFIG_PATH = Path(__file__).parent / "cycle_config.yaml"


# ---------------------------------------------------------------------------
# Typed config sections
# ---------------------------------------------------------------------------


@dataclass
class CycleRules:
    """Cycle inference and projection settings."""

    luteal_length_days: int = 14
    fertile_window_days: int = 6
    period_gap_days: int = 7
    prediction_cycle_bounds: tuple[int, int] = (15, 60)
    history_cycle_bounds: tuple[int, int] = (15, 50)
    history_max_cycles: int = 6
    projection_months: int = 3


@dataclass
class AnalyticsRules:
    """Frequency table and consistency score settings."""

    top_n: int = 3
    flow_weights: dict[str, int] = field(
        default_factory=lambda: {"Light": 1, "Medium": 2, "Heavy": 3, "Super": 3}
    )
    consistency_stddev_factor: float = 10.0
    regular_threshold: int = 80
    variable_threshold: int = 50
    min_cycles_for_trends: int = 2

    @property
    def max_flow_weight(self) -> int:
        return max(self.flow_weights.values(), default=1)


@dataclass
class LevelDef:
    """One row of the level table."""

    level: int
    xp: int
    reward: str | None = None


@dataclass
class BadgeDef:
    """A badge in the catalogue."""

    id: str
    name: str
    description: str
    icon: str
    target: int


@dataclass
class GamificationRules:
    """Points, level table and badge catalogue."""

    points: dict[str, int]
    levels: dict[int, LevelDef]
    badges: list[BadgeDef]
    water_goal_units: int = 8
    streak_badge_days: int = 7
    hydration_badge_days: int = 10
    mood_badge_logs: int = 20
    cycle_badge_span_days: int = 80
    cycle_badge_cycle_days: int = 28

    def point(self, name: str) -> int:
        """Return the point value for an action, 0 if unknown."""
        return self.points.get(name, 0)

    def level(self, number: int) -> LevelDef | None:
        return self.levels.get(number)

    @property
    def max_level(self) -> int:
        return max(self.levels)

    def badge(self, badge_id: str) -> BadgeDef | None:
        for badge in self.badges:
            if badge.id == badge_id:
                return badge
        return None


@dataclass
class CycleConfig:
    """Complete, validated engine configuration.

    This is the single in-memory representation of cycle_config.yaml.
    Every engine component reads from this object.

    Attributes:
        version:       Config schema version string.
        cycle:         Period detection, prediction and projection rules.
        analytics:     Analytics table and consistency score rules.
        gamification:  Points, levels and badges.
    """

    version: str
    cycle: CycleRules
    analytics: AnalyticsRules
    gamification: GamificationRules
    _raw: dict = field(default_factory=dict, repr=False)


# ---------------------------------------------------------------------------
# Loader / validation
# ---------------------------------------------------------------------------


class ConfigValidationError(ValueError):
    """Raised when cycle_config.yaml fails validation."""


def _load_yaml(path: Path) -> dict:
    """Read and parse a YAML file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigValidationError: If the YAML is malformed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Cycle config not found: {path}")

    with path.open("r", encoding="utf-8") as fh:
        try:
            return yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigValidationError(f"YAML parse error in {path}: {exc}") from exc


def _bounds(value: Any, name: str, default: tuple[int, int], errors: list[str]) -> tuple[int, int]:
    if value is None:
        return default
    try:
        low, high = (int(v) for v in value)
    except (TypeError, ValueError):
        errors.append(f"{name} must be a [low, high] pair, got {value!r}")
        return default
    if low > high:
        errors.append(f"{name} low bound {low} exceeds high bound {high}")
    return (low, high)


def _validate_and_build(raw: dict) -> CycleConfig:
    """Validate the raw YAML dict and construct a CycleConfig.

    Applies defaults for optional fields and collects every problem before
    raising, so one run reports all of them.

    Raises:
        ConfigValidationError: If required fields are missing or invalid.
    """
    errors: list[str] = []
    version = str(raw.get("version", "1.0"))

    # ── Cycle rules ──
    c_raw = raw.get("cycle", {}) or {}
    cycle = CycleRules(
        luteal_length_days=int(c_raw.get("luteal_length_days", 14)),
        fertile_window_days=int(c_raw.get("fertile_window_days", 6)),
        period_gap_days=int(c_raw.get("period_gap_days", 7)),
        prediction_cycle_bounds=_bounds(
            c_raw.get("prediction_cycle_bounds"), "cycle.prediction_cycle_bounds", (15, 60), errors
        ),
        history_cycle_bounds=_bounds(
            c_raw.get("history_cycle_bounds"), "cycle.history_cycle_bounds", (15, 50), errors
        ),
        history_max_cycles=int(c_raw.get("history_max_cycles", 6)),
        projection_months=int(c_raw.get("projection_months", 3)),
    )
    if cycle.fertile_window_days < 1:
        errors.append("cycle.fertile_window_days must be at least 1")

    # ── Analytics rules ──
    a_raw = raw.get("analytics", {}) or {}
    flow_weights: dict[str, int] = {}
    for flow, weight in (a_raw.get("flow_weights") or {}).items():
        try:
            flow_weights[str(flow)] = int(weight)
        except (TypeError, ValueError):
            errors.append(f"analytics.flow_weights.{flow} must be a number, got {weight!r}")
    analytics = AnalyticsRules(
        top_n=int(a_raw.get("top_n", 3)),
        consistency_stddev_factor=float(a_raw.get("consistency_stddev_factor", 10)),
        regular_threshold=int(a_raw.get("regular_threshold", 80)),
        variable_threshold=int(a_raw.get("variable_threshold", 50)),
        min_cycles_for_trends=int(a_raw.get("min_cycles_for_trends", 2)),
    )
    if flow_weights:
        analytics.flow_weights = flow_weights

    # ── Gamification ──
    g_raw = raw.get("gamification", {}) or {}

    points: dict[str, int] = {}
    for name, value in (g_raw.get("points") or {}).items():
        try:
            points[name] = int(value)
        except (TypeError, ValueError):
            errors.append(f"gamification.points.{name} must be an integer, got {value!r}")
            continue
        if points[name] < 0:
            errors.append(f"gamification.points.{name} = {points[name]} is negative")
    for required in ("DAILY_LOG", "WATER_GOAL", "BADGE_UNLOCK"):
        if required not in points:
            errors.append(f"Missing required key '{required}' in section 'gamification.points'")

    levels: dict[int, LevelDef] = {}
    for number, cfg in (g_raw.get("levels") or {}).items():
        if not isinstance(cfg, dict) or "xp" not in cfg:
            errors.append(f"gamification.levels.{number} must be a mapping with 'xp'")
            continue
        levels[int(number)] = LevelDef(
            level=int(number), xp=int(cfg["xp"]), reward=cfg.get("reward")
        )
    if not levels:
        errors.append("'gamification.levels' section is missing or empty")
    else:
        ordered = [levels[n] for n in sorted(levels)]
        if ordered[0].level != 1 or ordered[0].xp != 0:
            errors.append("gamification.levels must start at level 1 with xp 0")
        for prev, cur in zip(ordered, ordered[1:]):
            if cur.level != prev.level + 1:
                errors.append(f"gamification.levels skips from {prev.level} to {cur.level}")
            if cur.xp <= prev.xp:
                errors.append(
                    f"gamification.levels.{cur.level} xp {cur.xp} is not above level {prev.level}"
                )

    badges: list[BadgeDef] = []
    seen: set[str] = set()
    for item in g_raw.get("badges") or []:
        if not isinstance(item, dict) or "id" not in item:
            errors.append(f"gamification.badges entry must be a mapping with 'id', got {item!r}")
            continue
        badge_id = str(item["id"])
        if badge_id in seen:
            errors.append(f"Duplicate badge id '{badge_id}'")
        seen.add(badge_id)
        badges.append(
            BadgeDef(
                id=badge_id,
                name=str(item.get("name", badge_id)),
                description=str(item.get("description", "")),
                icon=str(item.get("icon", "")),
                target=int(item.get("target", 1)),
            )
        )

    gamification = GamificationRules(
        points=points,
        levels=levels,
        badges=badges,
        water_goal_units=int(g_raw.get("water_goal_units", 8)),
        streak_badge_days=int(g_raw.get("streak_badge_days", 7)),
        hydration_badge_days=int(g_raw.get("hydration_badge_days", 10)),
        mood_badge_logs=int(g_raw.get("mood_badge_logs", 20)),
        cycle_badge_span_days=int(g_raw.get("cycle_badge_span_days", 80)),
        cycle_badge_cycle_days=int(g_raw.get("cycle_badge_cycle_days", 28)),
    )

    if errors:
        raise ConfigValidationError(
            f"cycle_config.yaml has {len(errors)} validation error(s):\n"
            + "\n".join(f"  • {e}" for e in errors)
        )

    return CycleConfig(
        version=version,
        cycle=cycle,
        analytics=analytics,
        gamification=gamification,
        _raw=raw,
    )


def load_cycle_config(path: Path | None = None) -> CycleConfig:
    """Load and validate the cycle config from disk.

    Args:
        path: Override path to YAML. Uses the bundled cycle_config.yaml by default.
    """
    target = path or _CONFIG_PATH
    raw = _load_yaml(target)
    config = _validate_and_build(raw)
    logger.info("Loaded cycle config v%s from %s", config.version, target)
    return config


# ---------------------------------------------------------------------------
# Global singleton with hot-reload support
# ---------------------------------------------------------------------------

_config: CycleConfig | None = None
_config_lock = threading.Lock()


def get_cycle_config() -> CycleConfig:
    """Return the global CycleConfig singleton, loading it on first call."""
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:  # double-checked locking
                _config = load_cycle_config()
    return _config


def reload_cycle_config(path: Path | None = None) -> CycleConfig:
    """Reload the cycle config from disk and replace the global singleton.

    If validation fails, the old config is retained and the error is
    re-raised.

    Raises:
        ConfigValidationError: If the new config is invalid.
        FileNotFoundError:     If the config file is missing.
    """
    global _config
    new_config = load_cycle_config(path)  # validate before acquiring lock
    with _config_lock:
        old_version = _config.version if _config else "none"
        _config = new_config
    logger.info("Reloaded cycle config: %s → %s", old_version, new_config.version)
    return new_config
