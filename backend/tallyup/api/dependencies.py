"""
Shared route dependencies.
"""
from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session
from tallyup.core.exceptions import InvalidPeriodKey, ShareAllocationError, ShareMismatch
from tallyup.core.periods import parse_period_key
from tallyup.db.session import get_db
from tallyup.models.group import Group


def get_group_or_404(group_id: int, db: Session = Depends(get_db)) -> Group:
    """Load the group from the path, or fail with 404."""
    group = db.query(Group).filter(Group.id == group_id).first()
    if not group:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Group not found"
        )
    return group


def valid_month_key(month_key: str) -> str:
    """Validate the YYYY-MM month key from the path."""
    try:
        year, month = parse_period_key(month_key)
    except InvalidPeriodKey as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    return f"{year:04d}-{month:02d}"


def share_error(e: ShareAllocationError) -> HTTPException:
    """Translate a rejected split into a 400 carrying the offending totals."""
    detail = {"message": str(e), "error": type(e).__name__}
    if isinstance(e, ShareMismatch):
        detail["total"] = str(e.total)
        detail["expected"] = str(e.expected)
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=detail
    )
