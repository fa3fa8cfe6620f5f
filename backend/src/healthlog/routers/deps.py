from fastapi import HTTPException, Request

from healthlog.projector import CompatibilityProjector
from healthlog.utils.validators import is_iso_date


def get_projector(request: Request) -> CompatibilityProjector:
    return request.app.state.projector


def check_date(date: str) -> str:
    if not is_iso_date(date):
        raise HTTPException(status_code=400, detail=f"Invalid date {date!r}, expected YYYY-MM-DD")
    return date
