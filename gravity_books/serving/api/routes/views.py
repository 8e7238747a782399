"""
Visualization View Endpoints
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from gravity_books.reporting.views import DEFAULT_COUNTRY, VIEWS, run_view
from gravity_books.serving.api.dependencies import get_session

router = APIRouter()


@router.get("")
def list_views() -> Dict[str, Any]:
    """Names of the available views"""
    return {"views": sorted(VIEWS)}


@router.get("/{name}")
def get_view(
    name: str,
    country: str = DEFAULT_COUNTRY,
    db: Session = Depends(get_session),
) -> Dict[str, Any]:
    """Rows of one visualization view"""
    if name not in VIEWS:
        raise HTTPException(status_code=404, detail=f"Unknown view: {name}")
    
    params = {"country": country} if name == "orders-by-city" else {}
    df = run_view(db, name, **params)
    return {"view": name, "row_count": df.height, "rows": df.to_dicts()}
