from fastapi import APIRouter
from pydantic import BaseModel

import store
from models.screen_time import ScreenTimeStats
from tracking.aggregation import aggregate_screen_time, format_time_spent, total_screen_time
from tracking.attribution import filter_patient_screen_time

router = APIRouter(tags=["screen-time"])


# ---------- Response schema ----------

class ScreenTimeReport(BaseModel):
    screens: dict[str, ScreenTimeStats]
    total_time_seconds: int
    total_time_formatted: str


def _report(stats: dict[str, ScreenTimeStats]) -> ScreenTimeReport:
    total = total_screen_time(stats)
    return ScreenTimeReport(
        screens=stats,
        total_time_seconds=total,
        total_time_formatted=format_time_spent(total),
    )


# ---------- Endpoints ----------

@router.get("/screen-time", response_model=ScreenTimeReport)
async def get_screen_time():
    """Per-screen totals over every ScreenTime sample on this device."""
    events = await store.activity_log.read()
    return _report(aggregate_screen_time(events))


@router.get("/screen-time/patient/{email}", response_model=ScreenTimeReport)
async def get_patient_screen_time(email: str):
    """Per-screen totals restricted to one patient's samples."""
    events = await store.activity_log.read()
    return _report(aggregate_screen_time(filter_patient_screen_time(events, email)))
