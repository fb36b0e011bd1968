# placely/web/routes.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from placely.db import get_session
from placely.repositories.reminder_repo import ReminderRepo
from placely.services.reminder_service import ReminderService
from placely.web.schemas import ReminderIn, ReminderOut

router = APIRouter()


async def get_reminder_service(
    request: Request,
    session: AsyncSession = Depends(get_session),
) -> ReminderService:
    scheduling = getattr(request.app.state, "scheduling", None)
    if scheduling is None:
        # без живого планировщика сохранять нельзя: запись разойдётся с джобами
        raise HTTPException(status_code=503, detail="scheduler is not running")
    return ReminderService(ReminderRepo(session), scheduling)


@router.get("/health")
async def health():
    return {"status": "ok"}


@router.get("/reminders", response_model=list[ReminderOut])
async def list_reminders(
    upcoming: bool = False,
    now: Optional[int] = None,
    svc: ReminderService = Depends(get_reminder_service),
):
    items = await (svc.upcoming(now) if upcoming else svc.list_all())
    return [ReminderOut.of(r) for r in items]


@router.get("/reminders/{reminder_id}", response_model=ReminderOut)
async def get_reminder(reminder_id: int, svc: ReminderService = Depends(get_reminder_service)):
    return ReminderOut.of(await svc.get(reminder_id))


@router.post("/reminders", response_model=ReminderOut, status_code=201)
async def create_reminder(body: ReminderIn, svc: ReminderService = Depends(get_reminder_service)):
    return ReminderOut.of(await svc.save(body.to_draft()))


@router.put("/reminders/{reminder_id}", response_model=ReminderOut)
async def update_reminder(
    reminder_id: int,
    body: ReminderIn,
    svc: ReminderService = Depends(get_reminder_service),
):
    return ReminderOut.of(await svc.save(body.to_draft(reminder_id)))


@router.delete("/reminders/{reminder_id}", status_code=204)
async def delete_reminder(reminder_id: int, svc: ReminderService = Depends(get_reminder_service)):
    await svc.delete(reminder_id)
