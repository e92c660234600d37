from typing import Any, Optional

from fastapi import APIRouter
from pydantic import BaseModel

import store
from models.event import ActivityEvent, Category
from models.user import CurrentUser
from tracking.attribution import filter_by_category, filter_for_user, filter_patient_history

router = APIRouter(tags=["activity"])


# ---------- Request / Response schemas ----------

class RecordActivityRequest(BaseModel):
    activity: str
    category: str = Category.APP.value
    details: Optional[Any] = None
    extra: Optional[dict[str, Any]] = None


class RecordGameRequest(BaseModel):
    game_name: str
    action: str           # "Started" | "Completed" | ...
    result: Optional[str] = None


class RecordSettingRequest(BaseModel):
    setting: str
    value: Any


class RecordResponse(BaseModel):
    recorded: bool
    event: Optional[dict[str, Any]] = None


class HistoryRequest(BaseModel):
    user: Optional[CurrentUser] = None
    view: str = "all"


class ClearResponse(BaseModel):
    cleared: bool


def record_response(event: Optional[ActivityEvent]) -> RecordResponse:
    if event is None:
        return RecordResponse(recorded=False)
    return RecordResponse(recorded=True, event=event.to_storage())


# ---------- Endpoints ----------

@router.post("/activity", response_model=RecordResponse)
async def record_activity(body: RecordActivityRequest):
    """
    Appends one activity to the shared log.
    Tracking failures come back as recorded=false, never as an error status.
    """
    event = await store.recorder.record(body.activity, body.category, body.details, body.extra)
    return record_response(event)


@router.post("/activity/game", response_model=RecordResponse)
async def record_game(body: RecordGameRequest):
    event = await store.recorder.record_game(body.game_name, body.action, body.result)
    return record_response(event)


@router.post("/activity/setting", response_model=RecordResponse)
async def record_setting(body: RecordSettingRequest):
    event = await store.recorder.record_setting(body.setting, body.value)
    return record_response(event)


@router.get("/activity")
async def get_activity(view: str = "all"):
    """The whole shared log (newest first), optionally narrowed to one tab."""
    events = await store.activity_log.read()
    return [e.to_storage() for e in filter_by_category(events, view)]


@router.post("/activity/history")
async def get_user_history(body: HistoryRequest):
    """
    The given user's own history. The user context travels in the body
    because it is owned by the client's auth flow, not by this service.
    """
    events = await store.activity_log.read()
    mine = filter_for_user(events, body.user)
    return [e.to_storage() for e in filter_by_category(mine, body.view)]


@router.get("/activity/patient/{email}")
async def get_patient_history(email: str, view: str = "all"):
    """A patient's history as a caregiver sees it."""
    events = await store.activity_log.read()
    history = filter_patient_history(events, email)
    return [e.to_storage() for e in filter_by_category(history, view)]


@router.delete("/activity", response_model=ClearResponse)
async def clear_activity():
    return ClearResponse(cleared=await store.activity_log.clear())
