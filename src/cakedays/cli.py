"""Typer CLI for the Cake Days Scheduler."""

from __future__ import annotations

import csv
import io
import json
import logging
import pathlib
import sys

import typer

from cakedays.holidays import PRESETS, get_preset, holiday_label, resolve_closure_dates
from cakedays.scheduler import (
    BirthdayRecord,
    CakeDay,
    ScheduleConfig,
    compute_schedule,
    format_schedule,
)

app = typer.Typer(
    name="cakedays",
    help="Cake Days Scheduler: work out when the office provides birthday cakes.",
    add_completion=False,
)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _collect_holidays(preset: str, holiday: list[str] | None) -> list[str]:
    """Preset specs followed by any extra ``--holiday`` specs."""
    try:
        specs = get_preset(preset)
    except KeyError as exc:
        typer.echo(f"Error: {exc.args[0]}", err=True)
        raise typer.Exit(code=1) from None
    if holiday:
        specs.extend(holiday)
    return specs


# ---------------------------------------------------------------------------
# CSV helpers
# ---------------------------------------------------------------------------


def _read_birthdays(path: pathlib.Path) -> list[BirthdayRecord]:
    """Read ``name,birthdate`` rows.  Blank lines are skipped."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        text = ""

    if not text.strip():
        typer.echo(
            f"Error: Problem with input file {str(path)!r}. Make sure it exists, "
            "is readable and contains birthdays.",
            err=True,
        )
        raise typer.Exit(code=1)

    records: list[BirthdayRecord] = []
    for row in csv.reader(io.StringIO(text)):
        if not row or not any(field.strip() for field in row):
            continue
        name = row[0]
        birthdate = row[1] if len(row) > 1 else ""
        records.append(BirthdayRecord(birthdate=birthdate, name=name))
    return records


def _write_cake_days(path: pathlib.Path, schedule: list[CakeDay]) -> None:
    """Write ``date,small,large,names`` rows, names space-separated."""
    try:
        with path.open("w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            for entry in schedule:
                writer.writerow(
                    [entry.date.isoformat(), entry.small, entry.large, " ".join(entry.names)]
                )
    except OSError as exc:
        typer.echo(f"Error: Problem writing output file {str(path)!r}: {exc}", err=True)
        raise typer.Exit(code=1) from None


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def schedule(
    birthdays: pathlib.Path = typer.Argument(
        ...,
        help="CSV file of name,birthdate (YYYY-MM-DD) rows.",
    ),
    output: pathlib.Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the schedule as date,small,large,names CSV rows to this file.",
    ),
    year: int = typer.Option(
        None,
        "--year",
        "-y",
        help="Target year (1970-2999). Defaults to the current year.",
    ),
    preset: str = typer.Option(
        "office",
        "--preset",
        "-p",
        help=f"Holiday preset ({', '.join(sorted(PRESETS))}).",
    ),
    holiday: list[str] | None = typer.Option(  # noqa: B008
        None,
        "--holiday",
        "-H",
        help="Additional holiday as 'day Month', e.g. '17 March'. Repeatable.",
    ),
    output_json: bool = typer.Option(
        False,
        "--json",
        help="Print the schedule as JSON.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log progress to stderr.",
    ),
) -> None:
    """Compute the cake day schedule for a birthdays CSV file."""
    configure_logging(verbose)

    records = _read_birthdays(birthdays)
    config = ScheduleConfig.create(year=year, holidays=_collect_holidays(preset, holiday))
    result = compute_schedule(records, config)

    if result.error is not None:
        typer.echo(
            f"Error: Problem with input ({result.error.value}). "
            "Unique names and valid YYYY-MM-DD birthdays are required.",
            err=True,
        )
        raise typer.Exit(code=1)

    if output is not None:
        _write_cake_days(output, result.schedule)

    if output_json:
        payload = {
            "year": config.year,
            "holidays": list(config.holidays),
            "cake_days": [entry.as_dict() for entry in result.schedule],
        }
        json.dump(payload, sys.stdout, indent=2)
        typer.echo()
    else:
        typer.echo(format_schedule(result.schedule, config.year))


@app.command()
def closures(
    year: int = typer.Option(
        None,
        "--year",
        "-y",
        help="Target year. Defaults to the current year.",
    ),
    preset: str = typer.Option(
        "office",
        "--preset",
        "-p",
        help=f"Holiday preset ({', '.join(sorted(PRESETS))}).",
    ),
    holiday: list[str] | None = typer.Option(  # noqa: B008
        None,
        "--holiday",
        "-H",
        help="Additional holiday as 'day Month'. Repeatable.",
    ),
) -> None:
    """List office closures for the target year and its neighbours."""
    config = ScheduleConfig.create(year=year, holidays=_collect_holidays(preset, holiday))

    typer.echo(f"  Office closures {config.year - 1}-{config.year + 1}")
    typer.echo()
    for d, spec in resolve_closure_dates(config.holidays, config.year):
        typer.echo(f"    {d.strftime('%a, %b %d %Y'):>17}  {holiday_label(spec)}")


def main() -> None:
    """Entry point for the CLI."""
    app()
