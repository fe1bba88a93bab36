"""
Results and export endpoints
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from audition.api.deps import ensure_same_session, get_store, require_admin
from audition.core.store import Store
from audition.errors import ValidationError
from audition.models import Identity
from audition.services.results import export_csv, get_results


router = APIRouter(prefix="/results", tags=["results"])


@router.get("/{session_id}")
def get_results_data(session_id: str,
                     material_id: Optional[str] = Query(default=None, alias="materialId"),
                     identity: Identity = Depends(require_admin),
                     store: Store = Depends(get_store)):
    """
    Ranked results (olympic average, highest first)

    Without materialId: cross-material rollup with per-material breakdown.
    With materialId: per-material results only.
    """
    ensure_same_session(identity, session_id)
    return get_results(store, session_id, material_id)


@router.get("/{session_id}/export")
def export_results(session_id: str,
                   material_id: Optional[str] = Query(default=None, alias="materialId"),
                   format: str = "csv",
                   identity: Identity = Depends(require_admin),
                   store: Store = Depends(get_store)):
    """Download results as CSV (default) or JSON"""
    ensure_same_session(identity, session_id)
    if format not in ("csv", "json"):
        raise ValidationError("format must be csv or json")

    results = get_results(store, session_id, material_id)
    if format == "json":
        return results

    return Response(
        content=export_csv(results),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="audition-results-{session_id}.csv"'},
    )
