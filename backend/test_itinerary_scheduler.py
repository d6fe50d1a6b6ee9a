"""
test_itinerary_scheduler.py
----------------------------
End-to-end scheduling: day types, routes, overnight stays, pins, packing
guarantees and the timing breakdown.
"""

from __future__ import annotations

from collections import Counter
from unittest.mock import MagicMock

import pytest

from modules.planning import (
    ClusterPacker,
    DayBudgetCalculator,
    ItineraryScheduler,
    InvalidTripWindow,
    NoOvernightStays,
    generate_itinerary,
)
from modules.observability.logger import ITINERARY_GENERATED, PERFORMANCE, StructuredLogger
from schemas.itinerary import (
    Coordinates,
    DayType,
    OvernightStay,
    TravelType,
    TripRequest,
    itinerary_summary,
    itinerary_to_dicts,
)

MUSEUM = (48.8606, 2.3376)
CAFE = (48.8610, 2.3380)


def day_of(days, poi_id):
    hits = [d.day_number for d in days for p in d.pois if p.id == poi_id]
    assert len(hits) == 1, f"{poi_id} scheduled {len(hits)} times"
    return hits[0]


# ── Basic trips ──────────────────────────────────────────────────────────────

def test_three_day_trip_without_pois(scheduler, make_trip):
    days = scheduler.generate(make_trip("2024-01-01", "2024-01-03"))

    assert [d.day_type for d in days] == [DayType.TRAVEL, DayType.TOUR, DayType.TRAVEL]
    assert [d.day_number for d in days] == [1, 2, 3]
    assert [d.date.isoformat() for d in days] == ["2024-01-01", "2024-01-02", "2024-01-03"]

    first, middle, last = days
    assert first.route.from_.label == "Home" and first.route.to.label == "Hotel A"
    assert last.route.from_.label == "Hotel A" and last.route.to.label == "Home"
    assert middle.route is None and middle.pois == ()
    assert middle.overnight_stay.label == "Hotel A"
    assert first.overnight_stay.label == "Hotel A"
    assert last.overnight_stay is None
    assert [d.estimated_duration_minutes for d in days] == [180, 0, 180]
    assert first.title == "Travel Day - Departure"
    assert last.title == "Travel Day - Return"


def test_single_poi_goes_to_the_tour_day(scheduler, make_trip, make_poi):
    museum = make_poi("Museum", coords=MUSEUM)

    days = scheduler.generate(make_trip("2024-01-01", "2024-01-03", [museum]))

    assert day_of(days, "museum") == 2
    assert days[1].estimated_duration_minutes == 210 + 60
    assert days[0].day_type is DayType.TRAVEL


def test_secondary_is_adjacent_to_its_main(scheduler, make_trip, make_poi):
    pois = [
        make_poi("Cafe", "quick", CAFE, secondary_of="Museum"),
        make_poi("Park", "quick", (48.8462, 2.3372)),
        make_poi("Museum", coords=MUSEUM),
    ]

    days = scheduler.generate(make_trip("2024-01-01", "2024-01-03", pois))

    assert day_of(days, "cafe") == day_of(days, "museum")
    ordered = [p.name for p in days[day_of(days, "museum") - 1].pois]
    assert ordered[ordered.index("Museum") + 1] == "Cafe"


def test_pinned_group_lands_on_first_day(scheduler, make_trip, make_poi):
    pois = [
        make_poi("Museum", coords=MUSEUM, pinned_day=1),
        make_poi("Cafe", "quick", CAFE, secondary_of="Museum"),
    ]

    days = scheduler.generate(make_trip("2024-01-01", "2024-01-03", pois))

    assert [p.name for p in days[0].pois] == ["Museum", "Cafe"]
    assert days[0].day_type is DayType.MIXED
    assert days[0].title == "Departure & First Activities"
    assert days[1].pois == ()
    assert days[0].estimated_duration_minutes == 180 + 210 + 90


def test_same_named_mains_on_one_day_keep_their_own_secondaries(scheduler, make_trip, make_poi):
    pois = [
        make_poi("Tower", coords=(0.0, 0.0), poi_id="tower-1"),
        make_poi("Cafe", "quick", (0.0, 0.1), secondary_of="Tower"),
        make_poi("Tower", "quick", (0.0, 5.0), pinned_day=2, poi_id="tower-2"),
    ]

    days = scheduler.generate(make_trip("2024-01-01", "2024-01-03", pois))

    assert [p.id for p in days[1].pois] == ["tower-2", "tower-1", "cafe"]
    assert days[0].pois == () and days[2].pois == ()


def test_day_trip_overflow_keeps_every_poi(scheduler, make_trip, make_poi):
    pois = [
        make_poi("North", coords=(49.8, 2.0)),
        make_poi("South", coords=(48.0, 2.0)),
    ]

    (day,) = scheduler.generate(make_trip("2024-05-01", "2024-05-01", pois))

    assert {p.name for p in day.pois} == {"North", "South"}
    assert day.day_type is DayType.MIXED
    assert day.title == "Day Trip"
    assert day.overnight_stay is None
    assert day.route.from_.label == day.route.to.label == "Home"
    assert day.timing.travel_type is TravelType.ROUND_TRIP
    assert day.timing.travel_minutes == 360
    assert day.estimated_duration_minutes == 360 + 420
    assert day.estimated_duration_minutes > 8 * 60


def test_overflow_on_the_only_tour_day(make_trip, make_poi, quiet_events):
    scheduler = ItineraryScheduler(
        day_budget=DayBudgetCalculator(max_travel_minutes=100, default_travel_minutes=180,
                                       travel_estimate_mode="flat"),
        packer=ClusterPacker(8.0, 20.0, 6.0),
        local_travel_minutes=60,
        local_travel_mode="flat",
        events=quiet_events,
    )
    pois = [make_poi(f"Site {i}", coords=(45.0 + i, 2.0)) for i in range(3)]

    days = scheduler.generate(make_trip("2024-01-01", "2024-01-03", pois))

    assert [len(d.pois) for d in days] == [0, 3, 0]
    assert sum(p.hours for p in days[1].pois) == pytest.approx(10.5)
    assert [d.day_type for d in days] == [DayType.TRAVEL, DayType.TOUR, DayType.TRAVEL]


# ── Properties ───────────────────────────────────────────────────────────────

@pytest.fixture
def busy_trip(make_trip, make_poi):
    pois = [
        make_poi("Louvre", coords=(48.8606, 2.3376), pinned_day=3),
        make_poi("Cafe Marly", "quick", (48.8612, 2.3355), secondary_of="Louvre", pinned_day=1),
        make_poi("Versailles", "full-day", (48.8049, 2.1204)),
        make_poi("Orsay", coords=(48.8600, 2.3266)),
        make_poi("Lookout", "quick", secondary_of="Nowhere"),
        make_poi("Eiffel", "quick", (48.8584, 2.2945), pinned_day=9),
        make_poi("Catacombs", "quick"),
    ]
    stays = [
        OvernightStay("a", "Hotel A", Coordinates(48.8566, 2.3522)),
        OvernightStay("b", "Hotel B", Coordinates(48.8738, 2.2950)),
    ]
    return make_trip("2024-03-01", "2024-03-04", pois, stays)


def test_every_poi_appears_exactly_once(scheduler, busy_trip):
    days = scheduler.generate(busy_trip)
    scheduled = Counter(p.id for d in days for p in d.pois)
    assert scheduled == Counter(p.id for p in busy_trip.pois)


def test_groups_stay_together(scheduler, busy_trip):
    days = scheduler.generate(busy_trip)
    assert day_of(days, "cafe-marly") == day_of(days, "louvre")


def test_pins_are_respected(scheduler, busy_trip):
    days = scheduler.generate(busy_trip)
    assert day_of(days, "louvre") == 3


def test_out_of_range_pin_is_clamped_to_last_day(scheduler, busy_trip):
    days = scheduler.generate(busy_trip)
    assert day_of(days, "eiffel") == 4
    assert days[3].day_type is DayType.MIXED
    assert days[3].title == "Final Activities & Return"


def test_pin_below_range_is_clamped_to_first_day(scheduler, make_trip, make_poi):
    days = scheduler.generate(make_trip("2024-01-01", "2024-01-03", [make_poi("Zoo", pinned_day=0)]))
    assert day_of(days, "zoo") == 1


def test_no_day_exceeds_capacity_when_total_fits(scheduler, make_trip, make_poi):
    durations = ["full-day"] * 2 + ["half-day"] * 4 + ["quick"] * 4      # 34h over 5 days
    pois = [
        make_poi(f"Spot {i}", duration, (40.0 + i, 2.0))
        for i, duration in enumerate(durations)
    ]

    days = scheduler.generate(make_trip("2024-07-01", "2024-07-05", pois))

    assert sum(len(d.pois) for d in days) == len(pois)
    for day in days:
        assert sum(p.hours for p in day.pois) <= 8.0 + 1e-9


def test_identical_input_identical_output(scheduler, busy_trip):
    first = itinerary_to_dicts(scheduler.generate(busy_trip))
    second = itinerary_to_dicts(scheduler.generate(busy_trip))
    assert first == second


# ── Day assembly ─────────────────────────────────────────────────────────────

def test_middle_days_cycle_overnight_stays(scheduler, make_trip):
    stays = [OvernightStay(s, f"Hotel {s.upper()}") for s in "abc"]
    days = scheduler.generate(make_trip("2024-01-01", "2024-01-06", stays=stays))

    assert [d.overnight_stay.id for d in days[1:-1]] == ["a", "b", "c", "a"]
    assert days[0].overnight_stay.id == "a"
    assert days[-1].route.from_.id == stays[(6 - 2) % 3].id
    assert days[-1].start_location.id == days[-1].route.from_.id


def test_two_day_trip_has_no_tour_day(scheduler, make_trip, make_poi):
    days = scheduler.generate(make_trip("2024-01-01", "2024-01-02", [make_poi("Museum", coords=MUSEUM)]))

    assert len(days) == 2
    assert days[0].timing.travel_type is TravelType.DEPARTURE
    assert days[1].timing.travel_type is TravelType.RETURN
    assert day_of(days, "museum") == 1
    assert [d.day_type for d in days] == [DayType.MIXED, DayType.TRAVEL]


def test_single_day_trip_without_pois(scheduler, make_trip):
    (day,) = scheduler.generate(make_trip("2024-01-01", "2024-01-01"))
    assert day.day_type is DayType.TRAVEL
    assert day.title == "Travel Day - Round Trip"
    assert day.estimated_duration_minutes == 360


def test_pois_spread_over_all_days_when_no_day_is_free(make_trip, make_poi, quiet_events):
    scheduler = ItineraryScheduler(
        day_budget=DayBudgetCalculator(max_travel_minutes=60, default_travel_minutes=180,
                                       travel_estimate_mode="flat"),
        packer=ClusterPacker(8.0, 20.0, 6.0),
        events=quiet_events,
        local_travel_mode="flat",
    )
    pois = [make_poi("A", coords=(45.0, 2.0)), make_poi("B", coords=(47.0, 2.0))]

    days = scheduler.generate(make_trip("2024-01-01", "2024-01-02", pois))

    assert sum(len(d.pois) for d in days) == 2


def test_timing_breakdown_adds_up(scheduler, busy_trip):
    for day in scheduler.generate(busy_trip):
        assert day.timing.total_minutes == day.estimated_duration_minutes
        assert day.timing.activity_minutes == sum(p.minutes for p in day.pois)


def test_walking_mode_measures_the_loop(make_trip, make_poi, quiet_events):
    scheduler = ItineraryScheduler(local_travel_mode="walking", events=quiet_events)
    museum = make_poi("Museum", coords=MUSEUM)

    days = scheduler.generate(make_trip("2024-01-01", "2024-01-03", [museum]))

    hotel = days[1].overnight_stay
    legs = scheduler.walking_leg_minutes((museum,), hotel)
    assert legs == pytest.approx(2 * scheduler.distance_tool.walking_minutes(hotel.coordinates, museum.coordinates))
    assert days[1].timing.local_travel_minutes == round(legs)


def test_walking_mode_falls_back_without_coordinates(make_trip, make_poi, quiet_events):
    scheduler = ItineraryScheduler(local_travel_mode="walking", local_travel_minutes=60,
                                   events=quiet_events)
    stays = [OvernightStay("x", "Unknown Inn")]

    days = scheduler.generate(make_trip("2024-01-01", "2024-01-03", [make_poi("Museum")], stays))

    assert days[1].timing.local_travel_minutes == 60


# ── Failures & events ────────────────────────────────────────────────────────

def test_inverted_window_raises(scheduler, make_trip):
    with pytest.raises(InvalidTripWindow):
        scheduler.generate(make_trip("2024-01-05", "2024-01-01"))


def test_no_overnight_stays_raises(scheduler, make_trip):
    trip = make_trip("2024-01-01", "2024-01-03")
    bare = TripRequest(trip.start_date, trip.end_date, trip.home_location, ())
    with pytest.raises(NoOvernightStays):
        scheduler.generate(bare)


def test_generation_emits_events(make_trip):
    events = MagicMock(spec=StructuredLogger)
    scheduler = ItineraryScheduler(events=events)

    days = scheduler.generate(make_trip("2024-01-01", "2024-01-03"), session_id="sess_01")

    events.timed.assert_called_once_with("sess_01", "ItineraryScheduler.generate")
    events.log.assert_called_once()
    session_id, event_type, payload = events.log.call_args.args
    assert (session_id, event_type) == ("sess_01", ITINERARY_GENERATED)
    assert payload["days"] == len(days) == 3


def test_timed_block_writes_performance_record(tmp_path, make_trip):
    events = StructuredLogger(logs_dir=tmp_path, enabled=True)
    ItineraryScheduler(events=events).generate(make_trip("2024-01-01", "2024-01-02"), session_id="s1")
    events.close()

    lines = (tmp_path / "s1.jsonl").read_text(encoding="utf-8").splitlines()
    assert [line for line in lines if PERFORMANCE in line]
    assert [line for line in lines if ITINERARY_GENERATED in line]


def test_summary_counts(scheduler, busy_trip):
    days = scheduler.generate(busy_trip)
    summary = itinerary_summary(days)
    assert summary["days"] == 4
    assert summary["pois"] == len(busy_trip.pois)
    assert summary["total_minutes"] == sum(d.estimated_duration_minutes for d in days)


def test_module_shortcut_uses_configured_defaults(make_trip, make_poi):
    days = generate_itinerary(make_trip("2024-01-01", "2024-01-03", [make_poi("Museum", coords=MUSEUM)]))
    assert len(days) == 3
    assert day_of(days, "museum") == 2
