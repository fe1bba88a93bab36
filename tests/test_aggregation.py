"""
Tests for olympic averages, per-material results and the cross-material rollup
"""
from types import SimpleNamespace

import pytest

from audition.core.aggregation import (
    calculate_aggregated_results,
    calculate_dancer_results,
    calculate_olympic_average,
    calculate_simple_average,
    rank_results,
)


def make_dancer(dancer_id="d1", number=101, name="Ava"):
    return SimpleNamespace(id=dancer_id, dancer_number=number, name=name)


def make_score(judge_id, group_id="g1", dancer_id="d1", technique=None, musicality=None,
               expression=None, timing=None, presentation=None):
    return SimpleNamespace(
        judge_id=judge_id, group_id=group_id, dancer_id=dancer_id,
        technique=technique, musicality=musicality, expression=expression,
        timing=timing, presentation=presentation,
    )


def uniform_score(judge_id, value, **kwargs):
    return make_score(judge_id, technique=value, musicality=value, expression=value,
                      timing=value, presentation=value, **kwargs)


# ==================== OLYMPIC AVERAGE ====================

def test_olympic_empty():
    """No values, no data"""
    assert calculate_olympic_average([]) is None


def test_olympic_below_threshold_is_mean():
    """One or two values: plain mean"""
    assert calculate_olympic_average([18]) == 18
    assert calculate_olympic_average([18, 22]) == 20


def test_olympic_three_values_keeps_middle():
    """Three values: only the median survives"""
    assert calculate_olympic_average([10, 20, 30]) == 20


def test_olympic_drops_single_extremes():
    """Only one instance of the min and the max is dropped"""
    assert calculate_olympic_average([5, 10, 10, 10, 100]) == 10
    assert calculate_olympic_average([10, 10, 10]) == 10


def test_olympic_order_independent():
    """Result does not depend on judge order"""
    assert calculate_olympic_average([25, 15, 20, 18]) == calculate_olympic_average([15, 18, 20, 25])
    assert calculate_olympic_average([25, 15, 20, 18]) == 19


def test_simple_average_empty():
    assert calculate_simple_average([]) is None


# ==================== PER MATERIAL ====================

def test_dancer_results_no_scores():
    """No scores: every figure is None, judge_count 0"""
    result = calculate_dancer_results(make_dancer(), [])
    assert result.judge_count == 0
    assert result.total_score is None
    assert result.olympic_average is None
    assert all(v is None for v in result.category_averages.values())
    assert result.is_olympic_average is False


def test_dancer_results_three_judges():
    """Totals 15, 20, 25 -> mean 20, olympic 20"""
    scores = [uniform_score("j1", 3), uniform_score("j2", 4), uniform_score("j3", 5)]
    result = calculate_dancer_results(make_dancer(), scores)
    assert result.judge_count == 3
    assert result.total_score == 20
    assert result.olympic_average == 20
    assert result.category_averages["technique"] == 4
    assert result.is_olympic_average is True


def test_dancer_results_partial_scores_not_zero():
    """Unset categories are skipped, never averaged in as zero"""
    scores = [
        make_score("j1", technique=4, musicality=4),
        make_score("j2", technique=2),
    ]
    result = calculate_dancer_results(make_dancer(), scores)
    assert result.category_averages["technique"] == 3
    assert result.category_averages["musicality"] == 4
    assert result.category_averages["timing"] is None
    # judge totals 8 and 2
    assert result.total_score == 5
    assert result.olympic_average == 5


def test_dancer_results_all_unset_judge_still_counted():
    """A judge with an empty row counts as a judge but has no total"""
    scores = [uniform_score("j1", 4), make_score("j2")]
    result = calculate_dancer_results(make_dancer(), scores)
    assert result.judge_count == 2
    assert result.total_score == 20


# ==================== CROSS MATERIAL ====================

@pytest.fixture
def two_material_scores():
    """
    Ballet judge totals 18, 20, 22; Jazz judge totals 10, 11, 12.

    Judge j1: 18 + 10, j2: 20 + 11, j3: 22 + 12
    """
    ballet = [
        make_score("j1", group_id="gb", technique=4, musicality=4, expression=4, timing=3, presentation=3),
        make_score("j2", group_id="gb", technique=4, musicality=4, expression=4, timing=4, presentation=4),
        make_score("j3", group_id="gb", technique=5, musicality=5, expression=4, timing=4, presentation=4),
    ]
    jazz = [
        make_score("j1", group_id="gj", technique=2, musicality=2, expression=2, timing=2, presentation=2),
        make_score("j2", group_id="gj", technique=3, musicality=2, expression=2, timing=2, presentation=2),
        make_score("j3", group_id="gj", technique=3, musicality=3, expression=2, timing=2, presentation=2),
    ]
    return ballet + jazz


def test_aggregated_sums_material_figures(two_material_scores):
    """total_score is the sum of per-material means"""
    group_map = {"gb": ("m-ballet", "Ballet"), "gj": ("m-jazz", "Jazz")}
    [result] = calculate_aggregated_results([make_dancer()], two_material_scores, group_map)

    assert [mr.material_name for mr in result.material_results] == ["Ballet", "Jazz"]
    assert result.material_results[0].result.total_score == 20
    assert result.material_results[1].result.total_score == 11
    assert result.total_score == 31
    assert result.judge_count == 3


def test_aggregated_olympic_uses_raw_judge_sums(two_material_scores):
    """Olympic rollup trims cross-material judge sums 28, 31, 34 -> 31"""
    group_map = {"gb": ("m-ballet", "Ballet"), "gj": ("m-jazz", "Jazz")}
    [result] = calculate_aggregated_results([make_dancer()], two_material_scores, group_map)
    assert result.olympic_average == 31


def test_aggregated_judge_missing_from_one_material():
    """
    Judge A: Ballet 20, Jazz 22. Judge B: Ballet 18 only.

    Ballet mean 19 + Jazz mean 22 = 41. Judge sums 42 and 18 -> mean 30.
    """
    scores = [
        make_score("A", group_id="gb", technique=4, musicality=4, expression=4, timing=4, presentation=4),
        make_score("B", group_id="gb", technique=4, musicality=4, expression=4, timing=3, presentation=3),
        make_score("A", group_id="gj", technique=5, musicality=5, expression=4, timing=4, presentation=4),
    ]
    group_map = {"gb": ("m-ballet", "Ballet"), "gj": ("m-jazz", "Jazz")}
    [result] = calculate_aggregated_results([make_dancer()], scores, group_map)

    assert result.material_results[0].result.total_score == 19
    assert result.material_results[1].result.total_score == 22
    assert result.total_score == 41
    assert result.olympic_average == 30
    assert result.judge_count == 2
    assert result.is_olympic_average is False


def test_aggregated_category_totals_skip_missing_material():
    """A category averaged in only one material sums just that one"""
    scores = [
        make_score("j1", group_id="gb", technique=4),
        make_score("j1", group_id="gj", technique=3, timing=5),
    ]
    group_map = {"gb": ("m1", "Ballet"), "gj": ("m2", "Jazz")}
    [result] = calculate_aggregated_results([make_dancer()], scores, group_map)
    assert result.category_totals["technique"] == 7
    assert result.category_totals["timing"] == 5
    assert result.category_totals["musicality"] is None


def test_aggregated_ignores_unmapped_groups():
    """Scores of groups outside the map (templates, other sessions) are ignored"""
    scores = [uniform_score("j1", 4, group_id="gb"), uniform_score("j2", 1, group_id="stray")]
    [result] = calculate_aggregated_results([make_dancer()], scores, {"gb": ("m1", "Ballet")})
    assert result.judge_count == 1
    assert result.olympic_average == 20


def test_aggregated_dancer_without_scores():
    """Dancers never scored are still listed, with no data"""
    [result] = calculate_aggregated_results([make_dancer()], [], {})
    assert result.material_results == []
    assert result.total_score is None
    assert result.olympic_average is None


# ==================== RANKING ====================

def test_rank_results_order():
    """Olympic desc, ties by dancer number, no-data last"""
    results = [
        SimpleNamespace(dancer_number=5, olympic_average=None),
        SimpleNamespace(dancer_number=3, olympic_average=18.0),
        SimpleNamespace(dancer_number=2, olympic_average=20.0),
        SimpleNamespace(dancer_number=1, olympic_average=18.0),
    ]
    ranked = rank_results(results)
    assert [r.dancer_number for r in ranked] == [2, 1, 3, 5]
