"""
Aggregation Engine - Olympic average rankings

Per material (one dancer):
  category_average[c] = mean of all judges' non-null values for c
  judge_total         = sum of one judge's non-null values (partial sums count)
  total_score         = mean(judge_totals)
  olympic_average     = olympic(judge_totals)

Across materials (one dancer):
  category_total[c]   = sum of per-material category averages
  total_score         = sum of per-material total scores
  olympic_average     = olympic(per-judge sums over every material)
                        recomputed from raw values, never from trimmed figures

Olympic average:
  0 values  -> None
  1-2       -> mean
  >=3       -> drop one lowest and one highest value, mean of the rest

None always means "no data": it is skipped by every sum and mean and only
turns into a placeholder at render time.
"""
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from audition.models import (
    SCORE_CATEGORIES,
    AggregatedDancerResult,
    DancerResult,
    MaterialResult,
)


# Fewest judges for which trimming actually drops anything
OLYMPIC_MIN_JUDGES = 3


def calculate_simple_average(values: Sequence[float]) -> Optional[float]:
    """Arithmetic mean, None for an empty list"""
    if not values:
        return None
    return sum(values) / len(values)


def calculate_olympic_average(values: Sequence[float]) -> Optional[float]:
    """
    Trimmed mean dropping exactly one minimum and one maximum

    Only single instances are dropped: [5, 10, 10, 10, 100] keeps all three 10s.

    Args:
        values: Judge totals

    Returns:
        Olympic average, plain mean below 3 values, None when empty

    Example:
        >>> calculate_olympic_average([10, 20, 30])
        20.0
    """
    if not values:
        return None
    if len(values) < OLYMPIC_MIN_JUDGES:
        return calculate_simple_average(values)

    ordered = sorted(values)
    trimmed = ordered[1:-1]
    return sum(trimmed) / len(trimmed)


def _judge_totals(scores: Iterable[Any]) -> Dict[str, float]:
    """
    Sum each judge's non-null category values

    Judges whose rows are entirely unset get no entry (they have no total),
    but they still count toward judge_count in the callers.
    """
    totals: Dict[str, float] = {}
    for score in scores:
        for category in SCORE_CATEGORIES:
            value = getattr(score, category)
            if value is not None:
                totals[score.judge_id] = totals.get(score.judge_id, 0.0) + value
    return totals


def calculate_dancer_results(dancer: Any, scores: Sequence[Any]) -> DancerResult:
    """
    Results for one dancer within one material

    Args:
        dancer: Object with id, dancer_number, name
        scores: This dancer's score rows for a single material

    Returns:
        DancerResult (all numbers None and judge_count 0 when no scores)
    """
    judge_ids = {s.judge_id for s in scores}

    category_averages: Dict[str, Optional[float]] = {}
    for category in SCORE_CATEGORIES:
        values = [getattr(s, category) for s in scores if getattr(s, category) is not None]
        category_averages[category] = calculate_simple_average(values)

    per_judge = list(_judge_totals(scores).values())

    return DancerResult(
        dancer_id=dancer.id,
        dancer_number=dancer.dancer_number,
        dancer_name=dancer.name,
        category_averages=category_averages,
        total_score=calculate_simple_average(per_judge),
        olympic_average=calculate_olympic_average(per_judge),
        judge_count=len(judge_ids),
        is_olympic_average=len(judge_ids) >= OLYMPIC_MIN_JUDGES,
    )


def _sum_present(values: Iterable[Optional[float]]) -> Optional[float]:
    present = [v for v in values if v is not None]
    return sum(present) if present else None


def calculate_aggregated_results(
    dancers: Sequence[Any],
    scores: Sequence[Any],
    group_material_map: Dict[str, Tuple[str, str]],
) -> List[AggregatedDancerResult]:
    """
    Cross-material rollup per dancer

    Args:
        dancers: Objects with id, dancer_number, name
        scores: Score rows (any group); rows whose group is not in the map are ignored
        group_material_map: instance group_id -> (material_id, material_name);
            templates never appear here

    Returns:
        One AggregatedDancerResult per dancer, in input order
    """
    by_dancer: Dict[str, List[Any]] = {}
    for score in scores:
        if score.group_id in group_material_map:
            by_dancer.setdefault(score.dancer_id, []).append(score)

    results = []
    for dancer in dancers:
        dancer_scores = by_dancer.get(dancer.id, [])

        # Partition by material
        by_material: Dict[str, Tuple[str, List[Any]]] = {}
        for score in dancer_scores:
            material_id, material_name = group_material_map[score.group_id]
            by_material.setdefault(material_id, (material_name, []))[1].append(score)

        material_results = [
            MaterialResult(
                material_id=material_id,
                material_name=material_name,
                result=calculate_dancer_results(dancer, material_scores),
            )
            for material_id, (material_name, material_scores) in by_material.items()
        ]
        material_results.sort(key=lambda mr: mr.material_name)

        category_totals = {
            category: _sum_present(mr.result.category_averages[category] for mr in material_results)
            for category in SCORE_CATEGORIES
        }
        total_score = _sum_present(mr.result.total_score for mr in material_results)

        # Independent olympic average over cross-material judge sums
        cross_material_totals = list(_judge_totals(dancer_scores).values())
        judge_count = len({s.judge_id for s in dancer_scores})

        results.append(AggregatedDancerResult(
            dancer_id=dancer.id,
            dancer_number=dancer.dancer_number,
            dancer_name=dancer.name,
            category_totals=category_totals,
            total_score=total_score,
            olympic_average=calculate_olympic_average(cross_material_totals),
            judge_count=judge_count,
            is_olympic_average=judge_count >= OLYMPIC_MIN_JUDGES,
            material_results=material_results,
        ))

    return results


def rank_results(results: List[Any]) -> List[Any]:
    """
    Sort results for display: olympic average desc, no-data last,
    ties broken by dancer number asc
    """
    return sorted(
        results,
        key=lambda r: (r.olympic_average is None, -(r.olympic_average or 0.0), r.dancer_number),
    )
