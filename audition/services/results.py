"""
Results service - assemble rankings and export them
"""
import csv
import io
import logging
from typing import Dict, List, Optional, Tuple, Union

from audition.core.aggregation import (
    calculate_aggregated_results,
    calculate_dancer_results,
    rank_results,
)
from audition.core.store import Store
from audition.errors import NotFoundError
from audition.models import (
    CATEGORY_LABELS,
    SCORE_CATEGORIES,
    AggregatedDancerResult,
    DancerResult,
    InstanceGroup,
)
from audition.utils import format_score


logger = logging.getLogger(__name__)

EXPORT_HEADERS = ["Dancer #", "Name", *(CATEGORY_LABELS[c] for c in SCORE_CATEGORIES),
                  "Total Score", "Olympic Average"]


def _instance_material_map(store: Store, session_id: str) -> Dict[str, Tuple[str, str]]:
    """instance group_id -> (material_id, material_name), archived instances included"""
    names = {m.id: m.name for m in store.list_materials(session_id)}
    return {
        g.id: (g.material_id, names.get(g.material_id, "Unknown"))
        for g in store.list_groups(session_id)
        if isinstance(g, InstanceGroup)
    }


def get_material_results(store: Store, session_id: str, material_id: str) -> List[DancerResult]:
    """
    Ranked results for one material

    Dancers are those pushed in any instance of the material; if there are
    none yet, every dancer of the session is listed (with no data).
    """
    if store.get_session(session_id) is None:
        raise NotFoundError("Session not found")
    material = store.get_material(material_id)
    if material is None or material.session_id != session_id:
        raise NotFoundError("Material not found")

    group_map = _instance_material_map(store, session_id)
    material_groups = {gid for gid, (mid, _) in group_map.items() if mid == material_id}

    pushed_ids = set()
    for group in store.list_groups(session_id):
        if group.id in material_groups:
            pushed_ids.update(group.dancer_ids)
    dancers = store.list_dancers(session_id, sorted(pushed_ids) if pushed_ids else None)

    scores = [s for s in store.list_scores(session_id=session_id) if s.group_id in material_groups]
    results = [
        calculate_dancer_results(d, [s for s in scores if s.dancer_id == d.id])
        for d in dancers
    ]
    return rank_results(results)


def get_aggregated_results(store: Store, session_id: str) -> List[AggregatedDancerResult]:
    """Ranked cross-material results for every dancer of the session"""
    if store.get_session(session_id) is None:
        raise NotFoundError("Session not found")

    dancers = store.list_dancers(session_id)
    scores = store.list_scores(session_id=session_id)
    results = calculate_aggregated_results(dancers, scores, _instance_material_map(store, session_id))
    return rank_results(results)


def get_results(store: Store, session_id: str,
                material_id: Optional[str] = None) -> List[Union[DancerResult, AggregatedDancerResult]]:
    if material_id:
        return get_material_results(store, session_id, material_id)
    return get_aggregated_results(store, session_id)


def _row(number: Union[int, str], name: str, categories: Dict[str, Optional[float]],
         total: Optional[float], olympic: Optional[float]) -> List[str]:
    return [
        str(number),
        name,
        *(format_score(categories[c]) for c in SCORE_CATEGORIES),
        format_score(total),
        format_score(olympic),
    ]


def results_to_rows(results: List[Union[DancerResult, AggregatedDancerResult]]) -> List[List[str]]:
    """
    Flatten results into export rows (header excluded)

    Aggregated results get an indented detail row per material when the
    dancer was scored in more than one material. Missing numbers are "N/A".
    """
    rows = []
    for r in results:
        if isinstance(r, AggregatedDancerResult):
            rows.append(_row(r.dancer_number, r.dancer_name, r.category_totals,
                             r.total_score, r.olympic_average))
            if len(r.material_results) > 1:
                for mr in r.material_results:
                    rows.append(_row("", f"  {mr.material_name}", mr.result.category_averages,
                                     mr.result.total_score, mr.result.olympic_average))
        else:
            rows.append(_row(r.dancer_number, r.dancer_name, r.category_averages,
                             r.total_score, r.olympic_average))
    return rows


def export_csv(results: List[Union[DancerResult, AggregatedDancerResult]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(EXPORT_HEADERS)
    writer.writerows(results_to_rows(results))
    return buffer.getvalue()
