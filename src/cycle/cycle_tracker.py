"""Cycle inference engine.

Turns the daily log collection into:
- period-start events (gap detection over flow-bearing days)
- an effective cycle length (outlier-filtered mean of start-to-start gaps)
- the current cycle day and phase
- the next period date and a short prediction label

Phases are anchored on a fixed luteal phase (14 days by default): ovulation
is ``cycle_length - luteal`` and the fertile window is the 6 days ending on
ovulation day.  With no usable history the user's declared settings are
the prior, so a brand-new install still gets a plausible day and phase.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable

from src.cycle.config_loader import CycleConfig, get_cycle_config
from src.cycle.dates import add_days, day_diff, parse_date, today_string
from src.models.tracking import AppSettings, CyclePhase, LogEntry

logger = logging.getLogger("lunaloop.cycle.tracker")


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (not banker's rounding)."""
    return math.floor(value + 0.5)


@dataclass
class CycleData:
    """Current cycle state derived from logs + settings.

    Attributes:
        current_day:          Day within the current cycle (1-indexed, >= 1).
        total_cycle_length:   Effective cycle length used for prediction.
        phase:                Current phase.
        prediction:           "Late by N days", "Expected Today", "Tomorrow"
                              or a short date such as "Mar 4".
        next_period_date:     Predicted next period start (YYYY-MM-DD).
        days_until_next:      Days until next_period_date (negative when late).
        last_period_start:    Start of the current cycle; synthesized from
                              settings when no period has been logged.
        ovulation_day:        Cycle day of ovulation.
        fertile_window_start: First cycle day of the fertile window.
        period_starts:        Every detected period start, oldest first.
        cycles_used:          Start-to-start gaps that passed the outlier filter.
    """

    current_day: int
    total_cycle_length: int
    phase: CyclePhase
    prediction: str
    next_period_date: str
    days_until_next: int
    last_period_start: str
    ovulation_day: int
    fertile_window_start: int
    period_starts: list[str] = field(default_factory=list)
    cycles_used: int = 0

    @property
    def is_late(self) -> bool:
        """True once the cycle has run past its expected length."""
        return self.current_day > self.total_cycle_length

    @property
    def has_logged_period(self) -> bool:
        return bool(self.period_starts)


def detect_period_starts(logs: Iterable[LogEntry], gap_days: int = 7) -> list[str]:
    """Return period-start dates, oldest first.

    A start is the first flow-bearing day overall, then any flow-bearing day
    more than ``gap_days`` after the previous flow-bearing day.
    """
    flow_dates = sorted(entry.date for entry in logs if entry.is_period_day)
    starts: list[str] = []
    last_flow: str | None = None
    for current in flow_dates:
        if last_flow is None or day_diff(last_flow, current) > gap_days:
            starts.append(current)
        last_flow = current
    return starts


def start_to_start_lengths(starts: list[str]) -> list[int]:
    """Day counts between consecutive period starts (oldest gap first)."""
    return [day_diff(a, b) for a, b in zip(starts, starts[1:])]


def format_short_date(value: str) -> str:
    """``2024-03-04`` -> ``Mar 4``."""
    d = parse_date(value)
    return f"{d.strftime('%b')} {d.day}"


def prediction_label(days_until_next: int, next_period_date: str) -> str:
    if days_until_next < 0:
        return f"Late by {abs(days_until_next)} days"
    if days_until_next == 0:
        return "Expected Today"
    if days_until_next == 1:
        return "Tomorrow"
    return format_short_date(next_period_date)


class CycleTracker:
    """Infer the current cycle state from daily logs.

    Usage::

        tracker = CycleTracker()
        data = tracker.calculate(logs, settings, as_of=date(2026, 3, 1))
        print(data.phase, data.prediction)
    """

    def __init__(self, config: CycleConfig | None = None) -> None:
        self._config = config or get_cycle_config()

    @property
    def _rules(self):
        return self._config.cycle

    def period_starts(self, logs: Iterable[LogEntry]) -> list[str]:
        return detect_period_starts(logs, self._rules.period_gap_days)

    def effective_cycle_length(self, starts: list[str], fallback: int) -> tuple[int, int]:
        """Mean start-to-start gap, ignoring gaps outside the prediction bounds.

        Walks the most recent gaps first.  Gaps outside the bounds usually
        mean a missed period log spanning two or more cycles.

        Returns:
            (effective length, number of gaps used).  Falls back to
            ``fallback`` with 0 gaps used when nothing valid remains.
        """
        low, high = self._rules.prediction_cycle_bounds
        valid = [
            length
            for length in reversed(start_to_start_lengths(starts))
            if low <= length <= high
        ]
        if not valid:
            return fallback, 0
        return round_half_up(sum(valid) / len(valid)), len(valid)

    def ovulation_day(self, cycle_length: int) -> int:
        return cycle_length - self._rules.luteal_length_days

    def fertile_window_start(self, cycle_length: int) -> int:
        return self.ovulation_day(cycle_length) - (self._rules.fertile_window_days - 1)

    def classify_phase(self, cycle_day: int, cycle_length: int, period_length: int) -> CyclePhase:
        """Phase for a cycle day.

        Days past the cycle length (a late period) are held on the last
        day, which is always luteal; days before day 1 wrap into the cycle.
        """
        length = max(1, cycle_length)
        if cycle_day > length:
            day = length
        elif cycle_day < 1:
            day = ((cycle_day - 1) % length) + 1
        else:
            day = cycle_day

        ovulation = self.ovulation_day(length)
        fertile_start = self.fertile_window_start(length)

        if day <= period_length:
            return CyclePhase.menstrual
        if fertile_start <= day <= ovulation:
            return CyclePhase.ovulation
        if day > ovulation:
            return CyclePhase.luteal
        return CyclePhase.follicular

    def calculate(
        self,
        logs: list[LogEntry],
        settings: AppSettings,
        as_of: date | None = None,
    ) -> CycleData:
        """Compute the current cycle state.

        Args:
            logs:     All log entries (any order).
            settings: Declared cycle/period length, used as the prior.
            as_of:    Reference day (defaults to local today).
        """
        today = today_string(as_of)
        starts = self.period_starts(logs)
        effective, used = self.effective_cycle_length(starts, settings.cycle_length)

        if starts:
            last_start = starts[-1]
        else:
            # Nothing logged yet: pretend a period began one declared cycle ago
            last_start = add_days(today, -settings.cycle_length)

        days_since_start = day_diff(last_start, today)
        current_day = days_since_start + 1
        next_period = add_days(last_start, effective)
        days_until_next = effective - days_since_start

        phase = self.classify_phase(current_day, effective, settings.period_length)

        logger.debug(
            "Cycle calc: starts=%s effective=%d (gaps used=%d) day=%d phase=%s",
            starts, effective, used, current_day, phase.value,
        )

        return CycleData(
            current_day=max(1, current_day),
            total_cycle_length=effective,
            phase=phase,
            prediction=prediction_label(days_until_next, next_period),
            next_period_date=next_period,
            days_until_next=days_until_next,
            last_period_start=last_start,
            ovulation_day=self.ovulation_day(effective),
            fertile_window_start=self.fertile_window_start(effective),
            period_starts=starts,
            cycles_used=used,
        )
