"""
Command-line interface for the placement log.

Reads and appends to the placement log named in the configuration and
renders rotation signals with rich.

Example: site-rotation log left_thigh --note "slight bruise"
"""

import argparse
from datetime import date, datetime, timedelta

from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from adapters.storage.placement_log import JsonlPlacementLog
from rotation.config import AppConfig, config_summary, get_config
from rotation.domain.models import SiteState, TrendGranularity
from rotation.domain.sites import SiteCatalog, SiteCatalogError
from rotation.observability import configure_logging
from rotation.services.clock import LocalCalendar, SystemClock
from rotation.services.rotation_service import RotationService
from rotation.services.scoring import rating

console = Console()

STATE_STYLES = {
    SiteState.NEVER_USED: "dim",
    SiteState.RESTING: "yellow",
    SiteState.READY: "green",
}

RATING_STYLES = {
    "excellent": "green",
    "good": "green",
    "fair": "yellow",
    "poor": "red",
}


def build_service(config: AppConfig) -> RotationService:
    """Wire the rotation service to the configured log, time zone and wall clock."""
    return RotationService(
        repository=JsonlPlacementLog(config.storage.placement_log_path),
        catalog=SiteCatalog(),
        settings=config.rotation.to_settings(),
        calendar=LocalCalendar(config.rotation.timezone),
        clock=SystemClock(),
        starting_site=config.rotation.default_starting_site,
    )


def _range(service: RotationService, days: int) -> tuple[date, date]:
    today = service.calendar.local_date(service.clock.now())
    return today - timedelta(days=days - 1), today


def cmd_log(service: RotationService, args: argparse.Namespace) -> None:
    placed_at = datetime.fromisoformat(args.at) if args.at else None
    if placed_at is not None and placed_at.tzinfo is None:
        placed_at = placed_at.replace(tzinfo=service.calendar.tz)
    record = service.log_placement(args.site, placed_at=placed_at, note=args.note)
    console.print(
        f"Logged [cyan]{service.catalog.display_name(record.site_key)}[/cyan] "
        f"at {record.placed_at.isoformat()}",
        style="green",
    )


def cmd_next(service: RotationService, args: argparse.Namespace) -> None:
    recommendation = service.recommendation()
    if recommendation is None:
        console.print("No sites are enabled; enable a site to get a recommendation.", style="red")
        return
    console.print(
        Panel(
            f"[bold]{service.catalog.display_name(recommendation.site_key)}[/bold]\n"
            f"{recommendation.explanation} ({recommendation.reason})",
            title="Next site",
            style="blue",
        )
    )


def cmd_status(service: RotationService, args: argparse.Namespace) -> None:
    table = Table(title=f"Site status (rest {service.settings.minimum_rest_days} days)")
    table.add_column("Site", style="cyan")
    table.add_column("Days since use", justify="right")
    table.add_column("Status")

    for status in service.statuses(include_disabled=args.all):
        days = "-" if status.days_since_use is None else str(status.days_since_use)
        table.add_row(
            service.catalog.display_name(status.site_key),
            days,
            f"[{STATE_STYLES[status.state]}]{status.description}[/]",
        )
    console.print(table)


def cmd_heatmap(service: RotationService, args: argparse.Namespace) -> None:
    start, end = _range(service, args.days)
    table = Table(title=f"Site usage {start} to {end}")
    table.add_column("Site", style="cyan")
    table.add_column("Uses", justify="right")
    table.add_column("Share", justify="right")
    table.add_column("Intensity")
    table.add_column("Last used")

    visible = {site.key for site in service.history_sites()}
    entries = [e for e in service.heatmap(start, end) if e.site_key in visible]
    for entry in sorted(entries, key=lambda e: e.usage_count, reverse=True):
        table.add_row(
            service.catalog.display_name(entry.site_key),
            str(entry.usage_count),
            f"{entry.percentage_of_total:.1f}%",
            "#" * round(entry.intensity * 10),
            service.calendar.local_date(entry.last_used).isoformat() if entry.last_used else "-",
        )
    console.print(table)


def cmd_score(service: RotationService, args: argparse.Namespace) -> None:
    start, end = _range(service, args.days)
    score = service.rotation_score(start, end)
    style = RATING_STYLES[rating(score.score)]
    console.print(
        Panel(
            f"[bold]{score.score}/100[/bold]\n"
            f"Distribution: {score.distribution_score}/50  "
            f"Rest compliance: {score.rest_compliance_score}/50\n\n"
            f"{score.explanation}",
            title=f"Rotation score {start} to {end}",
            style=style,
        )
    )


def cmd_trend(service: RotationService, args: argparse.Namespace) -> None:
    start, end = _range(service, args.days)
    granularity = TrendGranularity(args.granularity) if args.granularity else None

    if args.by_site:
        for key, points in service.trend_by_site(start, end, granularity).items():
            counts = " ".join(str(p.count) for p in points)
            console.print(f"[cyan]{service.catalog.display_name(key):>20}[/cyan] {counts}")
        return

    table = Table(title=f"Placements {start} to {end}")
    table.add_column("Period start")
    table.add_column("Placements", justify="right")
    for point in service.trend(start, end, granularity):
        table.add_row(point.period_start.isoformat(), str(point.count))
    console.print(table)


def cmd_streak(service: RotationService, args: argparse.Namespace) -> None:
    days = service.streak()
    console.print(f"Current streak: [bold]{days}[/bold] day{'s' if days != 1 else ''}")


def cmd_summary(service: RotationService, args: argparse.Namespace) -> None:
    summary = service.weekly_summary()
    table = Table(title=f"Week of {summary.week_start}")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Placements", str(summary.total_placements))
    table.add_row("Sites used", str(summary.unique_sites))
    table.add_row(
        "Most used", service.catalog.display_name(summary.top_site) if summary.top_site else "-"
    )
    table.add_row(
        "Avg days between",
        f"{summary.average_days_between:.1f}" if summary.average_days_between is not None else "-",
    )
    table.add_row("Streak", str(summary.streak_days))
    console.print(table)


def cmd_config(service: RotationService, args: argparse.Namespace) -> None:
    for section, values in config_summary(get_config()).items():
        table = Table(title=section.title())
        table.add_column("Setting", style="cyan")
        table.add_column("Value", style="green")
        for name, value in values.items():
            table.add_row(name, str(value))
        console.print(table)


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="site-rotation",
        description="Track device placement sites and get rotation recommendations.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    log = sub.add_parser("log", help="Log a placement")
    log.add_argument("site", help="Site key, e.g. abdomen_right")
    log.add_argument("--at", help="ISO timestamp (default: now)")
    log.add_argument("--note", help="Optional note")
    log.set_defaults(handler=cmd_log)

    sub.add_parser("next", help="Recommend the next site").set_defaults(handler=cmd_next)

    status = sub.add_parser("status", help="Show rest status per site")
    status.add_argument("--all", action="store_true", help="Include disabled sites")
    status.set_defaults(handler=cmd_status)

    for name, handler, default_days in (
        ("heatmap", cmd_heatmap, 30),
        ("score", cmd_score, 30),
        ("trend", cmd_trend, 30),
    ):
        command = sub.add_parser(name, help=f"Show {name} for the last N days")
        command.add_argument("--days", type=int, default=default_days)
        command.set_defaults(handler=handler)
        if name == "trend":
            command.add_argument("--granularity", choices=[g.value for g in TrendGranularity])
            command.add_argument("--by-site", action="store_true")

    sub.add_parser("streak", help="Show the logging streak").set_defaults(handler=cmd_streak)
    sub.add_parser("summary", help="Summarize this week").set_defaults(handler=cmd_summary)
    sub.add_parser("config", help="Show configuration").set_defaults(handler=cmd_config)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = create_parser().parse_args(argv)

    try:
        config = get_config()
        configure_logging(config.logging)
        service = build_service(config)
        args.handler(service, args)
    except (SiteCatalogError, ValidationError) as e:
        console.print(f"Error: {e}", style="red")
        return 1
    except ValueError as e:
        console.print(f"Invalid input: {e}", style="red")
        return 1
    except OSError as e:
        console.print(f"File error: {e}", style="red")
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
