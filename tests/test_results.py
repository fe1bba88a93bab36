"""
Tests for the results service and CSV export
"""
import csv
import io

import pytest

from audition.core import lifecycle
from audition.core.submission import submit_scores
from audition.errors import NotFoundError
from audition.models import AggregatedDancerResult, DancerResult
from audition.services.results import (
    EXPORT_HEADERS,
    export_csv,
    get_aggregated_results,
    get_material_results,
    results_to_rows,
)

from helpers import full_scores, judge_identity


def submit(store, group, judge, value_by_dancer):
    submit_scores(
        store, judge_identity(judge), group.id, judge.id,
        [full_scores(d, value_by_dancer.get(d, 3.0)) for d in group.dancer_ids],
    )


def test_material_results_ranked(store, session, dancers, instance, judges, materials):
    """Olympic average desc; dancer 102 scored highest by every judge"""
    for judge in judges:
        submit(store, instance, judge, {dancers[1].id: 5.0, dancers[0].id: 4.0})

    results = get_material_results(store, session.id, materials[0].id)
    assert [r.dancer_number for r in results] == [102, 101, 103]
    assert results[0].olympic_average == 25
    assert results[0].is_olympic_average is True


def test_material_results_without_push_lists_all_dancers(store, session, dancers, materials):
    results = get_material_results(store, session.id, materials[1].id)
    assert [r.dancer_number for r in results] == [101, 102, 103]
    assert all(r.olympic_average is None for r in results)


def test_material_results_only_pushed_dancers(store, session, dancers, materials):
    """Once a material has instances, only their dancers are listed"""
    template = lifecycle.create_template(store, session.id, 7, [dancers[2].id])
    lifecycle.push_group(store, template.id, materials[0].id)

    results = get_material_results(store, session.id, materials[0].id)
    assert [r.dancer_number for r in results] == [103]


def test_material_results_unknown_material(store, session):
    with pytest.raises(NotFoundError):
        get_material_results(store, session.id, "missing")


def test_retracted_scores_still_count(store, session, dancers, instance, judges):
    """Retract without delete keeps the instance's scores in the results"""
    submit(store, instance, judges[0], {})
    lifecycle.retract_group(store, instance.id)

    [first, *_] = get_aggregated_results(store, session.id)
    assert first.judge_count == 1
    assert first.total_score == 15


def test_retracted_and_deleted_scores_excluded(store, session, instance, judges):
    submit(store, instance, judges[0], {})
    lifecycle.retract_group(store, instance.id, delete_scores=True)

    results = get_aggregated_results(store, session.id)
    assert all(r.total_score is None and r.judge_count == 0 for r in results)


def test_archived_scores_still_count(store, session, template, instance, judges):
    submit(store, instance, judges[0], {})
    lifecycle.archive_group(store, template.id)

    results = get_aggregated_results(store, session.id)
    assert all(r.judge_count == 1 for r in results)


def test_aggregated_results_two_materials(store, session, dancers, template, materials, judges):
    ballet = lifecycle.push_group(store, template.id, materials[0].id)
    jazz = lifecycle.push_group(store, template.id, materials[1].id)
    submit(store, ballet, judges[0], {dancers[0].id: 4.0})
    submit(store, jazz, judges[0], {dancers[0].id: 2.0})

    results = get_aggregated_results(store, session.id)
    ava = next(r for r in results if r.dancer_number == 101)
    assert isinstance(ava, AggregatedDancerResult)
    assert [mr.material_name for mr in ava.material_results] == ["Ballet", "Jazz"]
    assert ava.total_score == 30
    assert ava.category_totals["technique"] == 6
    assert ava.olympic_average == 30


# ==================== EXPORT ====================

def test_export_renders_missing_as_na(store, session, dancers, materials):
    csv_text = export_csv(get_material_results(store, session.id, materials[0].id))
    rows = list(csv.reader(io.StringIO(csv_text)))

    assert rows[0] == EXPORT_HEADERS
    assert rows[1][:2] == ["101", "Ava Chen"]
    assert rows[1][2:] == ["N/A"] * 7


def test_export_formats_two_decimals(store, session, dancers, instance, judges, materials):
    submit(store, instance, judges[0], {dancers[0].id: 4.5})
    rows = list(csv.reader(io.StringIO(export_csv(get_material_results(store, session.id, materials[0].id)))))

    ava = next(r for r in rows[1:] if r[0] == "101")
    assert ava[2] == "4.50"
    assert ava[-1] == "22.50"


def test_export_material_breakdown_rows(store, session, dancers, template, materials, judges):
    """Dancers scored in several materials get one indented row per material"""
    ballet = lifecycle.push_group(store, template.id, materials[0].id)
    jazz = lifecycle.push_group(store, template.id, materials[1].id)
    submit(store, ballet, judges[0], {})
    submit(store, jazz, judges[0], {})

    rows = results_to_rows(get_aggregated_results(store, session.id))
    assert len(rows) == 9
    assert rows[1][0] == ""
    assert rows[1][1] == "  Ballet"
    assert rows[2][1] == "  Jazz"


def test_rows_for_per_material_results():
    result = DancerResult(
        dancer_id="d1", dancer_number=7, dancer_name="Noor",
        category_averages={"technique": 4.0, "musicality": None, "expression": None,
                           "timing": None, "presentation": None},
        total_score=4.0, olympic_average=4.0, judge_count=1,
    )
    assert results_to_rows([result]) == [["7", "Noor", "4.00", "N/A", "N/A", "N/A", "N/A", "4.00", "4.00"]]
