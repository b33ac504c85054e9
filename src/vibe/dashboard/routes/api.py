"""JSON API over the orchestrator: score, refresh, mood, location, history."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from vibe.exceptions import UnknownLocationError
from vibe.logging import get_logger
from vibe.models import Mood
from vibe.orchestrator import Orchestrator

log = get_logger(__name__)

router = APIRouter()


class MoodUpdate(BaseModel):
    mood: Mood


class LocationUpdate(BaseModel):
    location_id: str


def _orchestrator(request: Request) -> Orchestrator:
    return request.app.state.orchestrator


def _superseded() -> JSONResponse:
    return JSONResponse(
        status_code=409,
        content={"detail": "fetch cycle superseded by a newer one"},
    )


@router.get("/score")
async def get_score(request: Request) -> JSONResponse:
    """Latest fetch cycle result; runs a cycle first if none has completed."""
    orchestrator = _orchestrator(request)
    result = orchestrator.last_result
    if result is None:
        result = await orchestrator.refresh()
    if result is None:
        return _superseded()
    return JSONResponse(content=result.to_dict())


@router.post("/refresh")
async def refresh(request: Request) -> JSONResponse:
    """Run a fetch cycle now (manual retry)."""
    result = await _orchestrator(request).refresh()
    if result is None:
        return _superseded()
    return JSONResponse(content=result.to_dict())


@router.post("/mood")
async def set_mood(request: Request, body: MoodUpdate) -> JSONResponse:
    """Set today's mood and return the recomputed day score."""
    day_score = _orchestrator(request).set_mood(body.mood)
    if day_score is None:
        raise HTTPException(status_code=409, detail="scores are still loading")
    log.info("mood_set_via_api", mood=body.mood.value, total=day_score.total)
    return JSONResponse(content=day_score.to_dict())


@router.get("/locations")
async def get_locations(request: Request) -> JSONResponse:
    orchestrator = _orchestrator(request)
    return JSONResponse(content={
        "current": orchestrator.location.id,
        "locations": [loc.to_dict() for loc in orchestrator.get_locations()],
    })


@router.post("/location")
async def change_location(request: Request, body: LocationUpdate) -> JSONResponse:
    """Switch location; flushes the cache and runs a fresh cycle."""
    try:
        result = await _orchestrator(request).change_location(body.location_id)
    except UnknownLocationError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    if result is None:
        return _superseded()
    return JSONResponse(content=result.to_dict())


@router.get("/history")
async def get_history(request: Request) -> JSONResponse:
    entries = _orchestrator(request).get_history()
    return JSONResponse(content=[entry.to_dict() for entry in entries])


@router.get("/status")
async def get_status(request: Request) -> JSONResponse:
    return JSONResponse(content=_orchestrator(request).get_status())
