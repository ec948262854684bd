"""Phase insight text from Claude, with a per-day cache and offline fallback.

``InsightService.get_insight`` always returns a string:

1. a cached insight for (today, phase) if one exists,
2. otherwise a model-generated sentence when an API key is configured,
3. otherwise, or on any failure, a canned line for the phase.

Only real model output is cached, so a transient failure does not pin the
fallback for the rest of the day.  Phase and prediction computation never
wait on this; callers may cancel the coroutine or wrap it in
``asyncio.wait_for``.
"""

from __future__ import annotations

import logging
import random
from datetime import date

import anthropic

from src.config import Settings, get_settings
from src.cycle.dates import today_string
from src.models.tracking import CyclePhase
from src.services.storage import KeyValueStore

logger = logging.getLogger("lunaloop.cycle.insights")

FALLBACK_INSIGHTS: dict[CyclePhase, list[str]] = {
    CyclePhase.menstrual: [
        "Estrogen and progesterone are at their lowest; rest is scientifically beneficial.",
        "Inflammation markers may be higher; gentle movement can help circulation.",
        "Iron levels drop with blood loss; consider iron-rich foods like spinach.",
        "Uterine contractions cause cramps; magnesium may help muscle relaxation.",
    ],
    CyclePhase.follicular: [
        "Estrogen is rising, boosting serotonin and energy levels.",
        "Insulin sensitivity improves now; great time for complex carbs.",
        "Collagen production increases with estrogen; your skin may glow.",
        "Rising hormones improve cognitive function and verbal skills.",
    ],
    CyclePhase.ovulation: [
        "Peak estrogen triggers the LH surge; energy and libido are highest.",
        "Testosterone spikes slightly, increasing confidence and drive.",
        "Body temperature dips slightly before rising; you are most fertile.",
        "Immune system shifts slightly; prioritize hydration and hygiene.",
    ],
    CyclePhase.luteal: [
        "Progesterone rises, increasing body temperature and calorie burn.",
        "Progesterone has a sedating effect; you may feel sleepier.",
        "Blood sugar is less stable; focus on protein to avoid mood swings.",
        "Pre-menstrual drop in hormones can trigger neurotransmitter dips.",
    ],
}

_PROMPT = """\
Act as a clinical women's health expert. The user is on day {day} of their cycle ({phase} phase).
Their mood is "{mood}".

Provide a 1-sentence scientific health insight.
Explain what is happening hormonally (Estrogen/Progesterone/LH) and how it affects them.
Keep it under 25 words. Be empathetic but factual."""


def fallback_insight(phase: CyclePhase, rng: random.Random | None = None) -> str:
    """Pick a canned insight for ``phase`` (menstrual lines if unknown)."""
    options = FALLBACK_INSIGHTS.get(phase) or FALLBACK_INSIGHTS[CyclePhase.menstrual]
    return (rng or random).choice(options)


CACHE_PREFIX = "insight_"


def cache_key(day_str: str, phase: CyclePhase) -> str:
    return f"{CACHE_PREFIX}{day_str}_{phase.value}"


class InsightService:
    """Async insight provider backed by the Anthropic Messages API."""

    def __init__(
        self,
        store: KeyValueStore,
        settings: Settings | None = None,
        client: anthropic.AsyncAnthropic | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the insight service.

        Args:
            store:    Key-value store used for the per-day cache.
            settings: App settings (API key, model, timeout).
            client:   Optional pre-built Anthropic client (for testing).
            rng:      Random source for fallback selection.
        """
        self._store = store
        self._settings = settings or get_settings()
        self._client = client
        self._rng = rng or random.Random()

    @property
    def online(self) -> bool:
        return self._client is not None or bool(self._settings.anthropic_api_key)

    def _get_client(self) -> anthropic.AsyncAnthropic:
        if self._client is None:
            self._client = anthropic.AsyncAnthropic(
                api_key=self._settings.anthropic_api_key,
                timeout=self._settings.insight_timeout_seconds,
                max_retries=1,
            )
        return self._client

    async def get_insight(
        self,
        phase: CyclePhase,
        day: int,
        mood: str | None = None,
        as_of: date | None = None,
    ) -> str:
        today = today_string(as_of)
        key = cache_key(today, phase)
        cached = self._store.get(key)
        if isinstance(cached, str) and cached:
            return cached

        if not self.online:
            return fallback_insight(phase, self._rng)

        prompt = _PROMPT.format(day=day, phase=phase.value, mood=mood or "Neutral")
        try:
            response = await self._get_client().messages.create(
                model=self._settings.insight_model,
                max_tokens=self._settings.insight_max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
            text = "".join(
                block.text for block in response.content if getattr(block, "type", "") == "text"
            ).strip()
        except Exception as exc:
            logger.warning("Insight request failed (%s) — using fallback", exc)
            return fallback_insight(phase, self._rng)

        if not text:
            logger.warning("Insight response was empty — using fallback")
            return fallback_insight(phase, self._rng)

        self._store.set(key, text)
        self._prune_cache(today)
        return text

    def _prune_cache(self, today: str) -> None:
        """Drop cached insights from earlier days."""
        current = f"{CACHE_PREFIX}{today}_"
        stale = [
            k for k in self._store.keys()
            if k.startswith(CACHE_PREFIX) and not k.startswith(current)
        ]
        for k in stale:
            self._store.delete(k)
        if stale:
            logger.debug("Pruned %d stale insight cache entries", len(stale))
