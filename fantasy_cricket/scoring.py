"""Fantasy points for a single match performance."""

import math
from typing import List, Optional, Tuple

from .constants import (
    CATCH_POINTS,
    ECONOMY_RATE_BONUS,
    MAIDEN_POINTS,
    MIN_OVERS_FOR_ER_BONUS,
    MIN_RUNS_FOR_SR_BONUS,
    RUN_OUT_POINTS,
    RUN_POINTS,
    STRIKE_RATE_BONUS,
    STUMPING_POINTS,
    WICKET_POINTS,
)
from .models import MatchPerformance, PointsResult

Breakdown = List[Tuple[str, int]]


def _plural(count: int, word: str, plural: Optional[str] = None) -> str:
    if count == 1:
        return f'{count} {word}'
    return f'{count} {plural or word + "s"}'


def _valid_rate(value: Optional[float]) -> bool:
    return value is not None and not math.isnan(value) and value >= 0


def parse_overs(value) -> float:
    """
    Convert overs to a decimal number.

    Scorecards write partial overs as "4.2" meaning 4 overs and 2 balls,
    which is 4 + 2/6 overs, not 4.2. Anything that is not in that notation
    (more than one decimal digit, or 6+ balls) is taken as a plain decimal.
    """
    if value is None or value == '':
        return 0.0
    text = str(value).strip()
    full, _, balls = text.partition('.')
    if len(balls) == 1 and balls.isdigit() and int(balls) < 6 and full.isdigit():
        return int(full) + int(balls) / 6
    return float(text)


def effective_strike_rate(perf: MatchPerformance) -> Optional[float]:
    """Strike rate as supplied, else derived from balls faced (None if neither)."""
    if perf.strike_rate is not None:
        return perf.strike_rate
    if perf.balls_faced and perf.balls_faced > 0:
        return (perf.runs or 0) / perf.balls_faced * 100
    return None


def effective_economy_rate(perf: MatchPerformance) -> Optional[float]:
    """Economy rate as supplied, else derived from runs conceded (None if neither)."""
    if perf.economy_rate is not None:
        return perf.economy_rate
    if perf.runs_conceded is not None and perf.overs_bowled and perf.overs_bowled > 0:
        return perf.runs_conceded / perf.overs_bowled
    return None


def strike_rate_bonus(strike_rate: float) -> int:
    for threshold, bonus in STRIKE_RATE_BONUS:
        if strike_rate >= threshold:
            return bonus
    return 0


def economy_rate_bonus(economy_rate: float) -> int:
    for threshold, bonus in ECONOMY_RATE_BONUS:
        if economy_rate <= threshold:
            return bonus
    return 0


def score_batting(perf: MatchPerformance) -> Tuple[int, Breakdown]:
    """
    Score batting.

    Scoring:
        - 1 point per run
        - Strike rate bonus (only with 20+ runs and a strike rate):
          160+: 25 | 150-159.99: 20 | 140-149.99: 15 | 130-139.99: 10 | 120-129.99: 5
    """
    points = 0
    breakdown: Breakdown = []

    runs = int(perf.runs or 0)
    if runs > 0:
        run_pts = runs * RUN_POINTS
        breakdown.append((_plural(runs, 'run'), run_pts))
        points += run_pts

    strike_rate = effective_strike_rate(perf)
    if runs >= MIN_RUNS_FOR_SR_BONUS and _valid_rate(strike_rate) and strike_rate > 0:
        bonus = strike_rate_bonus(strike_rate)
        if bonus:
            breakdown.append((f'SR {strike_rate:.2f}', bonus))
            points += bonus

    return points, breakdown


def score_bowling(perf: MatchPerformance) -> Tuple[int, Breakdown]:
    """
    Score bowling.

    Scoring:
        - 25 points per wicket
        - 20 points per maiden
        - Economy bonus (only with 3+ overs and an economy rate):
          <=5: 25 | <=6: 20 | <=7: 15 | <=8: 10
    """
    points = 0
    breakdown: Breakdown = []

    wickets = int(perf.wickets or 0)
    if wickets > 0:
        wkt_pts = wickets * WICKET_POINTS
        breakdown.append((_plural(wickets, 'wkt'), wkt_pts))
        points += wkt_pts

    maidens = int(perf.maidens or 0)
    if maidens > 0:
        maiden_pts = maidens * MAIDEN_POINTS
        breakdown.append((_plural(maidens, 'maiden'), maiden_pts))
        points += maiden_pts

    economy = effective_economy_rate(perf)
    if (perf.overs_bowled or 0) >= MIN_OVERS_FOR_ER_BONUS and _valid_rate(economy):
        bonus = economy_rate_bonus(economy)
        if bonus:
            breakdown.append((f'ER {economy:.2f}', bonus))
            points += bonus

    return points, breakdown


def score_fielding(perf: MatchPerformance) -> Tuple[int, Breakdown]:
    """
    Score fielding.

    Scoring:
        - 12 points per catch
        - 20 points per run out
        - 15 points per stumping (keepers only)
    """
    points = 0
    breakdown: Breakdown = []

    catches = int(perf.catches or 0)
    if catches > 0:
        catch_pts = catches * CATCH_POINTS
        breakdown.append((_plural(catches, 'catch', 'catches'), catch_pts))
        points += catch_pts

    run_outs = int(perf.run_outs or 0)
    if run_outs > 0:
        run_out_pts = run_outs * RUN_OUT_POINTS
        breakdown.append((_plural(run_outs, 'run out'), run_out_pts))
        points += run_out_pts

    stumpings = int(perf.stumpings or 0)
    if stumpings > 0 and perf.is_keeper:
        stumping_pts = stumpings * STUMPING_POINTS
        breakdown.append((_plural(stumpings, 'stumping'), stumping_pts))
        points += stumping_pts

    return points, breakdown


def score_performance(perf: MatchPerformance) -> PointsResult:
    """
    Total fantasy points for one player in one match.

    Pure and deterministic: the same record always produces the same result,
    so an admin preview can be reproduced exactly before points are applied.
    Missing fields only skip their own contribution.
    """
    result = PointsResult()
    for scorer in (score_batting, score_bowling, score_fielding):
        points, breakdown = scorer(perf)
        result.total += points
        result.breakdown.extend(breakdown)
    return result
