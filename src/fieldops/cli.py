"""Command-line interface for the fieldops duty scheduling tool."""

import argparse
import logging
import sys
from datetime import date, datetime, timedelta
from typing import Optional

from fieldops.domain.models import (
    CurrentConditions,
    HourBlock,
    OperationTask,
    RouteSequence,
    RoutineScheduleDefinition,
    SequenceType,
    WeatherSnapshot,
    WorkerRoute,
)
from fieldops.domain.policies import ServiceConfig
from fieldops.output.pdf_generator import PDFGenerator
from fieldops.output.sheet_generator import DutySheet, DutySheetGenerator
from fieldops.persistence.json_store import JsonScheduleStore
from fieldops.persistence.memory import InMemoryScheduleStore
from fieldops.persistence.ports import ScheduleLookupError, ScheduleStore
from fieldops.scheduling.route_sequencer import DependencyRouteSequencer
from fieldops.scheduling.service import ScheduleService
from fieldops.validation.validator import ScheduleValidator

logger = logging.getLogger(__name__)

SAMPLE_WORKER_ID = "4"


def create_sample_definitions(worker_id: str = SAMPLE_WORKER_ID) -> list[RoutineScheduleDefinition]:
    """Create a week of sample routines for one worker."""
    rows = [
        # id, building, name, category, rule, minutes, weather
        ("r-sweep", "10", "Sidewalk Sweep", "Cleaning", "FREQ=DAILY;BYHOUR=6", 30, True),
        ("r-trash", "10", "Trash Room", "Sanitation", "FREQ=WEEKLY;BYDAY=MO,WE,FR;BYHOUR=7", 60, False),
        ("r-mop", "14", "Hallway Mop", "Cleaning", "FREQ=WEEKLY;BYDAY=TU,TH;BYHOUR=9,14", 120, False),
        ("r-lobby", "14", "Lobby Check", "Operations", "FREQ=DAILY;BYHOUR=10;BYMINUTE=30", 20, False),
        ("r-roof", "21", "Roof Drain Check", "Maintenance", "FREQ=WEEKLY;BYDAY=SA;BYHOUR=11", 45, True),
        ("r-boiler", "21", "Boiler Inspection", "Inspection", "FREQ=MONTHLY;BYHOUR=13", 90, False),
    ]
    buildings = {"10": "12 West 18th", "14": "135 West 17th", "21": "68 Perry St"}

    return [
        RoutineScheduleDefinition.from_rule_text(
            rule,
            id=routine_id,
            worker_id=worker_id,
            building_id=building_id,
            building_name=buildings[building_id],
            name=name,
            category=category,
            estimated_duration_minutes=minutes,
            weather_dependent=weather,
        )
        for routine_id, building_id, name, category, rule, minutes, weather in rows
    ]


def create_sample_route(on_date: date, worker_id: str = SAMPLE_WORKER_ID) -> WorkerRoute:
    """Create a sample morning route placed on ``on_date``."""

    def at(hour: int, minute: int = 0) -> datetime:
        return datetime.combine(on_date, datetime.min.time()).replace(hour=hour, minute=minute)

    sweep = OperationTask(id="op-sweep", name="Sweep sidewalk", category="Cleaning", is_weather_sensitive=True)
    hose = OperationTask(id="op-hose", name="Hose courtyard", category="Cleaning", is_weather_sensitive=True)
    mop = OperationTask(id="op-mop", name="Mop stairwell", category="Cleaning")
    trash = OperationTask(id="op-trash", name="Pull trash", category="Sanitation", requires_photo=True)
    walk = OperationTask(id="op-walk", name="Walkthrough", category="Inspection")

    sequences = (
        RouteSequence(
            id="s-open", building_id="10", building_name="12 West 18th",
            arrival_time=at(6), estimated_duration_minutes=30,
            operations=(walk,), is_flexible=False,
        ),
        RouteSequence(
            id="s-sweep", building_id="10", building_name="12 West 18th",
            arrival_time=at(6, 30), estimated_duration_minutes=45,
            operations=(sweep,), sequence_type=SequenceType.OUTDOOR_CLEANING,
        ),
        RouteSequence(
            id="s-mop", building_id="14", building_name="135 West 17th",
            arrival_time=at(7, 30), estimated_duration_minutes=60,
            operations=(mop,), dependencies=frozenset({"s-open"}),
            sequence_type=SequenceType.INDOOR_CLEANING,
        ),
        RouteSequence(
            id="s-courtyard", building_id="14", building_name="135 West 17th",
            arrival_time=at(8, 30), estimated_duration_minutes=40,
            operations=(hose,), dependencies=frozenset({"s-sweep"}),
            sequence_type=SequenceType.OUTDOOR_CLEANING,
        ),
        RouteSequence(
            id="s-trash", building_id="21", building_name="68 Perry St",
            arrival_time=at(9, 30), estimated_duration_minutes=30,
            operations=(trash,), sequence_type=SequenceType.SANITATION,
        ),
    )
    return WorkerRoute(
        id=f"route-{worker_id}-{on_date.weekday()}",
        worker_id=worker_id,
        day_of_week=on_date.weekday(),
        sequences=sequences,
        route_name=f"{on_date.strftime('%A')} Morning",
    )


def build_weather(rain: Optional[float], wind: Optional[float], now: datetime) -> Optional[WeatherSnapshot]:
    """Build a flat forecast from command-line values, or None if neither is given."""
    if rain is None and wind is None:
        return None
    rain = rain or 0.0
    wind = wind or 0.0
    condition = "Rain" if rain > 0.5 else "Clear"
    hourly = tuple(
        HourBlock(time=now + timedelta(hours=h), precip_prob=rain, wind_mph=wind)
        for h in range(12)
    )
    return WeatherSnapshot(
        current=CurrentConditions(temp_f=60.0, condition=condition, wind_mph=wind),
        hourly=hourly,
    )


def _build_store(args: argparse.Namespace, on_date: date) -> ScheduleStore:
    if args.data:
        return JsonScheduleStore(args.data)
    worker_id = args.worker
    routes = [create_sample_route(on_date + timedelta(days=i), worker_id) for i in range(7)]
    return InMemoryScheduleStore(create_sample_definitions(worker_id), routes)


def _parse_now(value: Optional[str]) -> datetime:
    return datetime.fromisoformat(value) if value else datetime.now()


def run_day(args: argparse.Namespace) -> int:
    now = _parse_now(args.now)
    on_date = date.fromisoformat(args.date) if args.date else now.date()
    store = _build_store(args, on_date)
    service = ScheduleService.from_config(store, ServiceConfig(), clock=lambda: now)

    instances = service.get_schedule_for_date(
        args.worker, on_date, skip_relevance_filter=args.all
    )
    logger.info("Showing %d duties for worker %s on %s", len(instances), args.worker, on_date)

    result = ScheduleValidator().validate_instances(
        [i for i in instances if i.schedule_date == on_date], on_date
    )
    if not result.is_valid:
        for error in result.errors:
            print(f"  ERROR: {error}")

    sheet = DutySheet(
        worker_id=args.worker,
        schedule_date=on_date,
        instances=instances,
        route=store.fetch_route(args.worker, on_date),
    )
    print(DutySheetGenerator().generate_to_string(sheet))

    if args.pdf:
        PDFGenerator().generate(sheet, args.pdf)
        print(f"PDF saved to: {args.pdf}")
    return 0


def run_week(args: argparse.Namespace) -> int:
    now = _parse_now(args.now)
    start = date.fromisoformat(args.date) if args.date else now.date()
    store = _build_store(args, start)
    service = ScheduleService.from_config(store, ServiceConfig(), clock=lambda: now)

    duties = service.get_weekly_duties(args.worker, start)
    summary = duties.get_weekly_summary()
    logger.info(
        "Week from %s: %d days loaded, %d skipped",
        start, summary["days_loaded"], summary["days_skipped"],
    )

    print(f"\nWeek of {start.strftime('%A, %B %d, %Y')} for worker {args.worker}")
    print("=" * 60)
    for day in duties.schedule_dates:
        day_instances = duties.day_instances.get(day)
        if day_instances is None:
            print(f"{day.strftime('%a %m/%d')}: unavailable")
            continue
        print(f"{day.strftime('%a %m/%d')}: {len(day_instances)} duties")
        for instance in day_instances:
            print(
                f"    {instance.start_time.strftime('%H:%M')}-"
                f"{instance.end_time.strftime('%H:%M')}  {instance.title}"
            )
    print("-" * 60)
    print(f"Total duties: {summary['total_instances']}")
    print(f"Total hours:  {summary['total_hours']:.1f}")
    for category, count in sorted(summary["by_category"].items()):
        print(f"  {category}: {count}")
    return 0


def run_route(args: argparse.Namespace) -> int:
    now = _parse_now(args.now)
    on_date = date.fromisoformat(args.date) if args.date else now.date()
    store = _build_store(args, on_date)
    weather = build_weather(args.rain, args.wind, now)

    route = store.fetch_route(args.worker, on_date)
    if route is None:
        print(f"No route for worker {args.worker} on {on_date}")
        return 0

    sequencer = DependencyRouteSequencer()
    optimized, stats = sequencer.optimize_with_stats(route, weather)

    print(f"\nOriginal: {route.route_name}")
    for i, sequence in enumerate(route.sequences, 1):
        print(f"  {i}. {sequence.arrival_time.strftime('%H:%M')} {sequence.id}")
    print(f"\nReordered: {optimized.route_name}")
    for i, sequence in enumerate(optimized.sequences, 1):
        print(f"  {i}. {sequence.arrival_time.strftime('%H:%M')} {sequence.id}")

    if not stats["weather_available"]:
        print("\nNo weather data; route left unchanged.")
    elif stats["protected_first"]:
        print("\nBad weather ahead: indoor visits first.")
    else:
        print("\nGood weather: outdoor visits first.")
    forced = stats.get("forced_placements", 0)
    if forced:
        print(f"Forced placements (unsatisfiable dependencies): {forced}")

    result = ScheduleValidator().validate_reordered_route(route, optimized)
    print(f"Validation: {'PASSED' if result.is_valid else 'FAILED'}")
    for error in result.errors:
        print(f"  ERROR: {error}")
    for warning in result.warnings:
        print(f"  WARNING: {warning}")

    if args.pdf:
        sheet = DutySheet(
            worker_id=args.worker,
            schedule_date=on_date,
            route=optimized,
            weather=weather,
        )
        PDFGenerator().generate(sheet, args.pdf)
        print(f"PDF saved to: {args.pdf}")
    return 0 if result.is_valid else 1


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Field-service duty scheduling tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Today's live duties for the sample worker
  fieldops day

  # Every duty on a date, from a JSON export
  fieldops day --data schedule.json --worker 4 --date 2024-01-15 --all

  # Seven days starting Monday
  fieldops week --date 2024-01-15

  # Reorder today's route for a rainy morning and save a PDF
  fieldops route --rain 0.8 --pdf route.pdf
        """,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--data", "-d",
        type=str,
        default=None,
        help="JSON schedule export (default: built-in sample data)",
    )
    common.add_argument(
        "--worker", "-w",
        type=str,
        default=SAMPLE_WORKER_ID,
        help=f"Worker id (default: {SAMPLE_WORKER_ID})",
    )
    common.add_argument(
        "--date",
        type=str,
        default=None,
        help="Date as YYYY-MM-DD (default: today)",
    )
    common.add_argument(
        "--now",
        type=str,
        default=None,
        help="Current moment as an ISO datetime (default: system clock)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    day_parser = subparsers.add_parser("day", parents=[common], help="Show a day's duties")
    day_parser.add_argument(
        "--all", "-a",
        action="store_true",
        help="Show every duty of the date instead of the live view",
    )
    day_parser.add_argument("--pdf", "-o", type=str, default=None, help="Output PDF file path")

    subparsers.add_parser("week", parents=[common], help="Show seven days of duties")

    route_parser = subparsers.add_parser(
        "route", parents=[common], help="Reorder a day's route for the weather"
    )
    route_parser.add_argument(
        "--rain", "-r",
        type=float,
        default=None,
        help="Precipitation probability (0-1) for the next hours",
    )
    route_parser.add_argument("--wind", type=float, default=None, help="Wind speed in mph")
    route_parser.add_argument("--pdf", "-o", type=str, default=None, help="Output PDF file path")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    commands = {"day": run_day, "week": run_week, "route": run_route}
    if args.command not in commands:
        parser.print_help()
        return 1

    try:
        return commands[args.command](args)
    except ScheduleLookupError as exc:
        logger.error("Schedule lookup failed: %s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
