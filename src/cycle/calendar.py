"""Forward calendar projections of period and ovulation days."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal

from src.cycle.config_loader import CycleConfig, get_cycle_config
from src.cycle.cycle_tracker import CycleData
from src.cycle.dates import add_days

logger = logging.getLogger("lunaloop.cycle.calendar")

ProjectionType = Literal["period", "ovulation"]


@dataclass(frozen=True)
class CalendarProjection:
    date: str
    type: ProjectionType


class CalendarProjector:
    """Extend the current cycle estimate forward.

    Each projected cycle emits one ``period`` entry per day of the declared
    period length starting at the cycle start, then one ``ovulation`` entry
    at ``start + (cycle_length - luteal)``.  The output is flat and not
    deduplicated; callers filter by date themselves.
    """

    def __init__(self, config: CycleConfig | None = None) -> None:
        self._config = config or get_cycle_config()

    def project(
        self,
        cycle_data: CycleData,
        period_length: int,
        months_ahead: int | None = None,
    ) -> list[CalendarProjection]:
        months = self._config.cycle.projection_months if months_ahead is None else months_ahead
        cycle_length = cycle_data.total_cycle_length
        ovulation_offset = cycle_length - self._config.cycle.luteal_length_days

        projections: list[CalendarProjection] = []
        start = cycle_data.next_period_date
        for _ in range(max(0, months)):
            for offset in range(max(0, period_length)):
                projections.append(CalendarProjection(add_days(start, offset), "period"))
            projections.append(CalendarProjection(add_days(start, ovulation_offset), "ovulation"))
            start = add_days(start, cycle_length)

        logger.debug("Projected %d cycles from %s", max(0, months), cycle_data.next_period_date)
        return projections
