from fastapi import APIRouter, Depends

from app.api.deps import get_current_user
from app.models.user import User
from app.schemas.common import ok
from app.services.time_slots import time_slot_catalog

router = APIRouter()


@router.get("/timeslots")
def list_time_slots(current_user: User = Depends(get_current_user)) -> dict:
    return ok(time_slot_catalog())
