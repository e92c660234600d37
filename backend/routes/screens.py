from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel

import store
from routes.activity import RecordResponse, record_response

router = APIRouter(tags=["screens"])


# ---------- Request schemas ----------

class ScreenVisitRequest(BaseModel):
    screen_name: str


class AppStateRequest(BaseModel):
    state: Literal["active", "background", "inactive"]


# ---------- Endpoints ----------

@router.post("/screens/visit", response_model=RecordResponse)
async def screen_visit(body: ScreenVisitRequest):
    """
    Reports navigation to a screen. Closes the dwell timer of the previous
    screen and records the visit. recorded=false for auth screens and while
    the app is in the background.
    """
    event = await store.dwell_tracker.on_screen_visit(body.screen_name)
    return record_response(event)


@router.post("/app-state", response_model=RecordResponse)
async def app_state(body: AppStateRequest):
    """
    Reports an app lifecycle change. Going to the background flushes the
    current screen's dwell time; the returned event is that ScreenTime sample.
    """
    event = await store.dwell_tracker.on_app_state_change(body.state)
    return record_response(event)
