"""CRUD endpoints for daily log entries, plus CSV export."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Path
from fastapi.responses import PlainTextResponse

from src.dependencies import Tracker
from src.models.base import ErrorDetail
from src.models.cycle import GamificationResultRead, LogSaveResponse
from src.models.tracking import LogEntry, LogEntryBody, LogEntryUpdate, check_iso_date

router = APIRouter(prefix="/logs", tags=["logs"])


def valid_log_date(
    log_date: Annotated[
        str, Path(pattern=r"^\d{4}-\d{2}-\d{2}$", description="Local calendar day, YYYY-MM-DD")
    ],
) -> str:
    try:
        return check_iso_date(log_date)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


LogDate = Annotated[str, Depends(valid_log_date)]
_NOT_FOUND = {404: {"model": ErrorDetail}}


@router.get("", response_model=list[LogEntry])
def list_logs(tracker: Tracker) -> Any:
    return tracker.logs.get_all()


@router.get("/export.csv", response_class=PlainTextResponse)
def export_logs(tracker: Tracker) -> PlainTextResponse:
    return PlainTextResponse(
        tracker.export_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="lunaloop_logs.csv"'},
    )


@router.get("/{log_date}", response_model=LogEntry, responses=_NOT_FOUND)
def get_log(log_date: LogDate, tracker: Tracker) -> Any:
    entry = tracker.logs.get_by_date(log_date)
    if entry is None:
        raise HTTPException(status_code=404, detail="Log entry not found")
    return entry


@router.put("/{log_date}", response_model=LogSaveResponse)
def save_log(log_date: LogDate, tracker: Tracker, body: LogEntryBody) -> Any:
    """Save the full entry for a day (creates or replaces)."""
    entry = body.for_date(log_date)
    result = tracker.save_log(entry)
    return LogSaveResponse(
        log=entry,
        gamification=GamificationResultRead.model_validate(result),
    )


@router.patch("/{log_date}", response_model=LogSaveResponse, responses=_NOT_FOUND)
def update_log(log_date: LogDate, tracker: Tracker, body: LogEntryUpdate) -> Any:
    if not body.model_fields_set:
        raise HTTPException(status_code=400, detail="No fields to update")
    outcome = tracker.update_log(log_date, body)
    if outcome is None:
        raise HTTPException(status_code=404, detail="Log entry not found")
    entry, result = outcome
    return LogSaveResponse(
        log=entry,
        gamification=GamificationResultRead.model_validate(result),
    )


@router.delete("/{log_date}", status_code=204, responses=_NOT_FOUND)
def delete_log(log_date: LogDate, tracker: Tracker) -> None:
    if not tracker.delete_log(log_date):
        raise HTTPException(status_code=404, detail="Log entry not found")
