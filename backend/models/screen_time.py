from pydantic import BaseModel


class ScreenTimeStats(BaseModel):
    total_time_seconds: int
    visits: int
    average_time_seconds: int
    total_time_formatted: str
    average_time_formatted: str
