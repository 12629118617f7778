"""Risk alerts over a trade history.

Three checks, each emitting at most one alert (the strategy check emits at
most one per strategy):

- Recent drawdown: percent given back from the running peak over the last
  ``lookback_days`` (peak starts at 0, only measured once the peak is
  positive).
- Losing streak: longest run of consecutive losing trades in date order.
- Strategy win rate: trade-level win rate of every strategy with enough
  operations, flagged when poor and noted when strong and profitable.

Usage::

    alerts = evaluate_risk_alerts(records, today=date.today())
    for alert in alerts:
        print(alert.severity, alert.title)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Iterable

from robo_analytics.core.config import RiskAlertConfig
from robo_analytics.core.enums import AlertSeverity
from robo_analytics.core.models import TradeRecord

from .strategy_stats import group_by_strategy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RiskAlert:
    """A single risk alert."""

    id: str                  # e.g. "drawdown-high", "strategy-poor-zeus"
    severity: AlertSeverity
    title: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)


def recent_drawdown_pct(results: Iterable[float]) -> float:
    """Largest drawdown as a percent of the running peak.

    Points where the peak is still 0 are not measured.
    """
    peak = 0.0
    running = 0.0
    worst = 0.0
    for r in results:
        running += r
        if running > peak:
            peak = running
        if peak > 0:
            worst = max(worst, (peak - running) / peak * 100)
    return worst


def longest_losing_run(results: Iterable[float]) -> int:
    """Longest run of consecutive negative results.  Zero breaks a run."""
    current = longest = 0
    for r in results:
        if r < 0:
            current += 1
            longest = max(longest, current)
        else:
            current = 0
    return longest


def _drawdown_alert(
    records: list[TradeRecord], today: date, cfg: RiskAlertConfig
) -> RiskAlert | None:
    start = today - timedelta(days=cfg.lookback_days)
    recent = [r.result for r in records if r.date >= start]
    if not recent:
        return None
    dd = recent_drawdown_pct(recent)
    if dd > cfg.drawdown_high_pct:
        return RiskAlert(
            id="drawdown-high",
            severity=AlertSeverity.HIGH,
            title="High drawdown detected",
            message=(
                f"Drawdown reached {dd:.1f}% over the last {cfg.lookback_days} days. "
                "Consider reducing position size."
            ),
            details={"drawdown_pct": dd},
        )
    if dd > cfg.drawdown_medium_pct:
        return RiskAlert(
            id="drawdown-warning",
            severity=AlertSeverity.MEDIUM,
            title="Drawdown warning",
            message=f"Current drawdown is {dd:.1f}%. Watch the next operations closely.",
            details={"drawdown_pct": dd},
        )
    return None


def _losing_streak_alert(records: list[TradeRecord], cfg: RiskAlertConfig) -> RiskAlert | None:
    run = longest_losing_run(r.result for r in records)
    if run >= cfg.losing_streak_high:
        return RiskAlert(
            id="consecutive-losses-high",
            severity=AlertSeverity.HIGH,
            title="Worrying losing streak",
            message=f"{run} consecutive losing operations. Review strategy and risk management.",
            details={"losing_streak": run},
        )
    if run >= cfg.losing_streak_medium:
        return RiskAlert(
            id="consecutive-losses-medium",
            severity=AlertSeverity.MEDIUM,
            title="Consecutive losses",
            message=f"{run} losing operations in a row. Consider pausing for review.",
            details={"losing_streak": run},
        )
    return None


def _strategy_alerts(records: list[TradeRecord], cfg: RiskAlertConfig) -> list[RiskAlert]:
    alerts: list[RiskAlert] = []
    for name, recs in group_by_strategy(records).items():
        total = len(recs)
        if total < cfg.strategy_min_operations:
            continue
        wins = sum(1 for r in recs if r.result > 0)
        total_result = sum(r.result for r in recs)
        win_rate = wins / total * 100
        details = {"win_rate": win_rate, "operations": total, "total_result": total_result}

        if win_rate < cfg.strategy_poor_win_rate:
            alerts.append(RiskAlert(
                id=f"strategy-poor-{name}",
                severity=AlertSeverity.MEDIUM,
                title="Strategy underperforming",
                message=f'Strategy "{name}" has a {win_rate:.1f}% win rate. Consider reviewing it.',
                details=details,
            ))
        elif win_rate > cfg.strategy_strong_win_rate and total_result > 0:
            alerts.append(RiskAlert(
                id=f"strategy-excellent-{name}",
                severity=AlertSeverity.LOW,
                title="Strategy performing well",
                message=f'Strategy "{name}" has a {win_rate:.1f}% win rate with a positive result.',
                details=details,
            ))
    return alerts


def evaluate_risk_alerts(
    records: Iterable[TradeRecord],
    *,
    today: date,
    config: RiskAlertConfig | None = None,
) -> list[RiskAlert]:
    """Run every risk check.  Empty input yields no alerts."""
    cfg = config or RiskAlertConfig()
    ordered = sorted(records, key=lambda r: (r.date, r.time))
    if not ordered:
        return []

    alerts: list[RiskAlert] = []
    for alert in (_drawdown_alert(ordered, today, cfg), _losing_streak_alert(ordered, cfg)):
        if alert is not None:
            alerts.append(alert)
    alerts.extend(_strategy_alerts(ordered, cfg))

    if alerts:
        logger.info("Raised %d risk alerts", len(alerts))
    return alerts
