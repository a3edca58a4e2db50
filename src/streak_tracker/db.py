from __future__ import annotations

from streak_tracker.db_models import ActivityEntry, DayStatus, TrackerSettings
from streak_tracker.db_repo import ActivityMixin, BaseDatabase, DayStatusMixin, SettingsMixin


class Database(BaseDatabase, ActivityMixin, DayStatusMixin, SettingsMixin):
    pass


__all__ = ["Database", "ActivityEntry", "DayStatus", "TrackerSettings"]
