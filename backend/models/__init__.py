from models.event import ActivityEvent, Category
from models.user import CurrentUser
from models.screen_time import ScreenTimeStats

__all__ = ["ActivityEvent", "Category", "CurrentUser", "ScreenTimeStats"]
