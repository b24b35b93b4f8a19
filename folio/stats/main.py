"""
Site Statistics API

Public read of the key/value stats table and an admin write. The values
are whatever an administrator last stored, not live counts.
"""
import logging

from fastapi import APIRouter, Depends, Path
from pydantic import Field
from sqlalchemy.orm import Session

from folio.shared.auth import CurrentUser, require_roles
from folio.shared.database import get_db
from folio.shared.schemas import ApiResponse, CamelModel
from folio.shared.upsert import atomic_upsert
from folio.stats.models import SiteStats
from folio.users.models import Role

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stats", tags=["stats"])


class StatValue(CamelModel):
    value: str = Field(..., max_length=500)


@router.get("", response_model=ApiResponse[dict[str, str]])
def get_stats(db: Session = Depends(get_db)):
    """Return every stat as a flat {key: value} map."""
    stats = db.query(SiteStats).order_by(SiteStats.key.asc()).all()
    return ApiResponse(data={stat.key: stat.value for stat in stats})


@router.put("/{key}", response_model=ApiResponse[dict[str, str]])
def set_stat(
    payload: StatValue,
    key: str = Path(..., min_length=1, max_length=100, pattern=r"^[a-z0-9_]+$"),
    current_user: CurrentUser = Depends(require_roles(Role.ADMIN)),
    db: Session = Depends(get_db),
):
    """Insert or overwrite a single stat."""
    try:
        atomic_upsert(
            db=db,
            model=SiteStats,
            unique_field="key",
            unique_value=key,
            update_data={"value": payload.value},
        )
        db.commit()
    except Exception:
        # Rollback so the session stays usable for the error handler
        db.rollback()
        raise

    logger.info(f"Stat '{key}' set by {current_user.username}")
    return ApiResponse(data={key: payload.value}, message="Stat updated successfully")
