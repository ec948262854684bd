"""Historical analytics over the daily log collection.

Produces:
- symptom / mood frequency tables (top N)
- flow distribution and a 0–100 flow score
- per-cycle history for the trend chart (most recent 6 valid cycles)
- a 0–100 consistency score from the spread of historical cycle lengths

The history filter ([15, 50] days) is deliberately narrower than the live
prediction filter ([15, 60]): the chart only shows plausible single cycles
while prediction tolerates more irregularity.
"""

from __future__ import annotations

import logging
import statistics
from collections import Counter
from dataclasses import dataclass, field

from src.cycle.config_loader import CycleConfig, get_cycle_config
from src.cycle.cycle_tracker import detect_period_starts, round_half_up, start_to_start_lengths
from src.cycle.dates import parse_date
from src.models.tracking import AppSettings, LogEntry

logger = logging.getLogger("lunaloop.cycle.analytics")


@dataclass
class FrequencyStat:
    """A tag and how often it was logged.

    ``pct`` is the share of *all* logs carrying the tag, so symptom
    percentages do not sum to 100.
    """

    name: str
    count: int
    pct: int = 0


@dataclass
class FlowStats:
    light: int = 0
    medium: int = 0
    heavy: int = 0
    score: float = 0.0


@dataclass
class CycleHistoryPoint:
    """One completed cycle for the trend chart.

    Attributes:
        month:      Short month name of the cycle start ("Jan").
        total:      Cycle length in days (start to next start).
        period:     Flow-bearing log days within [start, next start).
        start_date: Cycle start.
        end_date:   Next cycle start (exclusive).
    """

    month: str
    total: int
    period: int
    start_date: str
    end_date: str


@dataclass
class AnalyticsData:
    """Aggregated analytics.  Check ``has_enough_data`` before drawing trends."""

    avg_period: int
    avg_cycle: int
    variability: float
    consistency_score: int
    cycle_status: str
    chart_data: list[CycleHistoryPoint] = field(default_factory=list)
    has_enough_data: bool = False
    symptom_stats: list[FrequencyStat] = field(default_factory=list)
    mood_stats: list[FrequencyStat] = field(default_factory=list)
    flow_stats: FlowStats = field(default_factory=FlowStats)


def _pct(count: int, total: int) -> int:
    return round_half_up(count / total * 100) if total else 0


def _top(counter: Counter, n: int, total: int) -> list[FrequencyStat]:
    # Counter.most_common keeps first-seen order among ties
    return [FrequencyStat(name, count, _pct(count, total)) for name, count in counter.most_common(n)]


def consistency_score(lengths: list[int], stddev_factor: float = 10.0) -> tuple[float, float]:
    """Score cycle regularity from historical lengths.

    Uses the population standard deviation: 0 days of spread scores 100,
    10 points are lost per day of spread, floored at 0.  Fewer than two
    lengths score 100; callers must flag the lack of data separately.

    Returns:
        (unrounded score, standard deviation)
    """
    if len(lengths) < 2:
        return 100.0, 0.0
    std_dev = statistics.pstdev(lengths)
    return max(0.0, min(100.0, 100.0 - std_dev * stddev_factor)), std_dev


class AnalyticsEngine:
    """Compute ``AnalyticsData`` from logs and declared settings.

    Usage::

        engine = AnalyticsEngine()
        data = engine.compute(logs, settings)
        if data.has_enough_data:
            render(data.chart_data)
    """

    def __init__(self, config: CycleConfig | None = None) -> None:
        self._config = config or get_cycle_config()

    def status_label(self, score: float) -> str:
        rules = self._config.analytics
        if score > rules.regular_threshold:
            return "Regular"
        if score > rules.variable_threshold:
            return "Variable"
        return "Irregular"

    def flow_stats(self, logs: list[LogEntry]) -> FlowStats:
        weights = self._config.analytics.flow_weights
        stats = FlowStats()
        flow_logs = [entry for entry in logs if entry.is_period_day]
        weighted = 0
        for entry in flow_logs:
            flow = entry.flow.value
            if flow == "Light":
                stats.light += 1
            elif flow == "Medium":
                stats.medium += 1
            else:
                stats.heavy += 1
            weighted += weights.get(flow, 0)
        if flow_logs:
            mean_weight = weighted / len(flow_logs)
            stats.score = mean_weight / self._config.analytics.max_flow_weight * 100
        return stats

    def cycle_history(self, logs: list[LogEntry]) -> list[CycleHistoryPoint]:
        """Valid historical cycles, oldest first (all of them; trimmed later)."""
        rules = self._config.cycle
        low, high = rules.history_cycle_bounds
        starts = detect_period_starts(logs, rules.period_gap_days)
        flow_dates = [entry.date for entry in logs if entry.is_period_day]

        history: list[CycleHistoryPoint] = []
        for start, nxt, length in zip(starts, starts[1:], start_to_start_lengths(starts)):
            if not low <= length <= high:
                continue
            history.append(
                CycleHistoryPoint(
                    month=parse_date(start).strftime("%b"),
                    total=length,
                    period=sum(1 for d in flow_dates if start <= d < nxt),
                    start_date=start,
                    end_date=nxt,
                )
            )
        return history

    def compute(self, logs: list[LogEntry], settings: AppSettings) -> AnalyticsData:
        rules = self._config.analytics
        total_logs = len(logs)

        symptom_counts: Counter = Counter()
        mood_counts: Counter = Counter()
        for entry in logs:
            symptom_counts.update(entry.symptoms)
            if entry.mood:
                mood_counts[entry.mood] += 1

        history = self.cycle_history(logs)
        lengths = [point.total for point in history]
        score, std_dev = consistency_score(lengths, rules.consistency_stddev_factor)
        has_enough = len(history) >= rules.min_cycles_for_trends

        if history:
            avg_cycle = round_half_up(statistics.mean(lengths))
            avg_period = round_half_up(statistics.mean(p.period for p in history))
        else:
            avg_cycle = settings.cycle_length
            avg_period = settings.period_length

        logger.debug(
            "Analytics: %d logs, %d valid cycles, stddev=%.2f score=%.1f",
            total_logs, len(history), std_dev, score,
        )

        return AnalyticsData(
            avg_period=avg_period,
            avg_cycle=avg_cycle,
            variability=round(std_dev, 1),
            consistency_score=round_half_up(score),
            cycle_status=self.status_label(score),
            chart_data=history[-self._config.cycle.history_max_cycles:],
            has_enough_data=has_enough,
            symptom_stats=_top(symptom_counts, rules.top_n, total_logs),
            mood_stats=_top(mood_counts, rules.top_n, total_logs),
            flow_stats=self.flow_stats(logs),
        )
