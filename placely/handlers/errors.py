from aiogram import Router
from aiogram.types import ErrorEvent
import logging

from placely.errors import ReminderError

router = Router(name="errors")
logger = logging.getLogger(__name__)

@router.error()
async def on_error(event: ErrorEvent):
    if isinstance(event.exception, ReminderError):
        logger.warning("Reminder error in handler: %s", event.exception)
        return
    logger.exception("Error in handler: %s", event.exception)
