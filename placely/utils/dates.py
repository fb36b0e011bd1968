from datetime import datetime, timezone
from zoneinfo import ZoneInfo

UTC = timezone.utc


def now_utc() -> datetime:
    return datetime.now(tz=UTC)


def now_ms() -> int:
    """Текущее время в миллисекундах с эпохи — единица времени напоминаний."""
    return int(now_utc().timestamp() * 1000)


def ms_to_dt(ms: int) -> datetime:
    return datetime.fromtimestamp(ms / 1000, tz=UTC)


def dt_to_ms(dt: datetime) -> int:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return int(dt.timestamp() * 1000)


def format_event_time(ms: int, tz: str = "UTC") -> str:
    """Пример: "Dec 25, 2024 at 02:30 PM"."""
    if ms <= 0:
        return "No date set"
    return ms_to_dt(ms).astimezone(ZoneInfo(tz)).strftime("%b %d, %Y at %I:%M %p")


def relative_time(ms: int, now: int) -> str:
    """Человекочитаемое «через сколько»: "In 3 days", "Yesterday", "Just now"."""
    diff = ms - now
    # усечение к нулю, а не floor: -90 с это "-1 минута", а не "-2"
    seconds = int(diff / 1000)
    minutes = int(seconds / 60)
    hours = int(minutes / 60)
    days = int(hours / 24)

    if days > 1:
        return f"In {days} days"
    if days == 1:
        return "Tomorrow"
    if hours > 1:
        return f"In {hours} hours"
    if hours == 1:
        return "In 1 hour"
    if minutes > 1:
        return f"In {minutes} minutes"
    if minutes == 1:
        return "In 1 minute"
    if seconds > 0:
        return "In a few seconds"
    if days < -1:
        return f"{-days} days ago"
    if days == -1:
        return "Yesterday"
    if hours < -1:
        return f"{-hours} hours ago"
    return "Just now"
