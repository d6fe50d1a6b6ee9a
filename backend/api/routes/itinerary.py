"""
api/routes/itinerary.py
------------------------
POST /v1/itinerary/generate

Schedules a trip (dates, home, overnight stays, POIs) into day plans and
returns them together with a short summary. The request body is the trip
as the planner UI stores it; camelCase keys are accepted.

Fatal input problems come back as HTTP 422 with one readable message.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException

from main import render, run_pipeline
from modules.planning import SchedulingError
from schemas.requests import GenerateRequest

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/generate", summary="Generate a day-by-day itinerary")
def generate_itinerary(req: GenerateRequest) -> dict:
    """
    Runs the scheduling pipeline:
      1. Precondition checks (dates, home, overnight stays, coordinates)
      2. Day budget (travel feasibility of the first and last day)
      3. POI grouping, clustering and bin packing into tour days
      4. Nearest-neighbour ordering within each day
    """
    try:
        days = run_pipeline(req)
    except SchedulingError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception("Unexpected itinerary generation failure")
        raise HTTPException(status_code=500, detail=f"Itinerary generation error: {exc}") from exc

    return render(days)
