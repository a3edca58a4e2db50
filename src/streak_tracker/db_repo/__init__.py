from .base import BaseDatabase
from .activities import ActivityMixin
from .day_status import DayStatusMixin
from .settings import SettingsMixin

__all__ = [
    "BaseDatabase",
    "ActivityMixin",
    "DayStatusMixin",
    "SettingsMixin",
]
