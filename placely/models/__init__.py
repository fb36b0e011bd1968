from .base import Base
from .reminder import Reminder
from .alert import Alert

__all__ = ["Base", "Reminder", "Alert"]
