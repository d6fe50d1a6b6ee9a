"""
main.py
--------
Tour Planner pipeline entry point.

  Stage 1: Request parsing (pydantic GenerateRequest)
  Stage 2: Caller-side precondition checks (modules.validation)
  Stage 3: Itinerary scheduling (modules.planning)
  Stage 4: Output — JSON on stdout or into --output

Run:
  python main.py --input trip.json
  python main.py --input trip.json --output itinerary.json --session sess_01
  python main.py --input trip.json --places places.json

The trip file uses the same shape as POST /v1/itinerary/generate.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

import config
from modules.observability.logger import GENERATION_FAILED, StructuredLogger
from modules.planning import InvalidTripRequest, ItineraryScheduler, SchedulingError
from modules.tool_usage.geocoder import GazetteerGeocoder, Geocoder, resolve_trip
from modules.validation import ensure_trip_request, validate_trip_request
from schemas.itinerary import DayPlan, itinerary_summary, itinerary_to_dicts
from schemas.requests import GenerateRequest

logger = logging.getLogger(__name__)

_events = StructuredLogger()


def run_pipeline(
    request: GenerateRequest,
    scheduler: ItineraryScheduler | None = None,
    geocoder: Geocoder | None = None,
) -> list[DayPlan]:
    """
    Validate *request*, fill in coordinates the client did not send (when a
    geocoder is given) and schedule it.

    Raises a SchedulingError subclass on any fatal input problem; the caller
    keeps whatever itinerary it had before.
    """
    try:
        if not request.start_date or not request.end_date:
            raise InvalidTripRequest("start_date and end_date are required")

        trip = ensure_trip_request(request.to_trip())

        result = validate_trip_request(request.model_dump())
        if not result.valid:
            raise InvalidTripRequest("; ".join(result.errors))
        if geocoder is not None:
            trip = resolve_trip(trip, geocoder)

        return (scheduler or ItineraryScheduler()).generate(trip, session_id=request.session_id)
    except SchedulingError as exc:
        _events.log(request.session_id, GENERATION_FAILED, {"error": str(exc)})
        logger.warning("Itinerary generation failed: %s", exc)
        raise


def render(days: list[DayPlan]) -> dict:
    return {"itinerary": itinerary_to_dicts(days), "summary": itinerary_summary(days)}


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate a day-by-day tour itinerary.")
    parser.add_argument("--input", "-i", required=True, help="Trip JSON file")
    parser.add_argument("--output", "-o", help="Write itinerary JSON here instead of stdout")
    parser.add_argument("--session", default=None, help="Session id for the JSONL event log")
    parser.add_argument("--places", help="JSON gazetteer {label: {latitude, longitude}} for ungeocoded places")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=config.LOG_LEVEL, format="%(levelname)s %(name)s: %(message)s")
    args = _parse_args(argv)

    payload = json.loads(Path(args.input).read_text(encoding="utf-8"))
    if args.session:
        payload["session_id"] = args.session
    request = GenerateRequest.model_validate(payload)
    geocoder = GazetteerGeocoder.from_file(args.places) if args.places else None

    try:
        days = run_pipeline(request, geocoder=geocoder)
    except SchedulingError as exc:
        print(f"  ✗  {exc}", file=sys.stderr)
        return 2

    text = json.dumps(render(days), indent=2, ensure_ascii=False)
    if args.output:
        Path(args.output).write_text(text + "\n", encoding="utf-8")
        print(f"  ✓  {len(days)}-day itinerary written to {args.output}")
    else:
        print(text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
