"""Command-line interface for scorebook stat reports."""

from __future__ import annotations

import argparse
import csv
import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence

from pyscorer.analysis import (
    aggregate_batting,
    aggregate_pitching,
    filter_records,
    player_batting_trend,
    player_pitching_trend,
    rank,
    scatter,
    sorted_batting,
    sorted_pitching,
    team_summary,
)
from pyscorer.analysis.aggregate import as_batting_records, as_pitching_records
from pyscorer.analysis.ranking import top_entries
from pyscorer.config import METRICS
from pyscorer.config_loader import FilterProfile
from pyscorer.ingest import import_paths, load_sample_data


logger = logging.getLogger(__name__)

_DEFAULT_METRIC = "avg"


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Summarise scorer CSV game logs")
    parser.add_argument(
        "files",
        type=Path,
        nargs="*",
        help="Batting (*_b.csv) and pitching (*_p.csv) exports; bundled sample data when omitted",
    )
    parser.add_argument("--start-date", default=None, help="First game date to include (YYYY-MM-DD)")
    parser.add_argument("--end-date", default=None, help="Last game date to include (whole day)")
    parser.add_argument("--team", default=None, help="Keep games whose away or home team contains this text")
    parser.add_argument("--category", default=None, help="Keep games with this tournament title")
    parser.add_argument(
        "--metric",
        default=None,
        choices=sorted(METRICS),
        help="Leaderboard metric (default avg)",
    )
    parser.add_argument(
        "--min-sample",
        type=float,
        default=None,
        help="Minimum plate appearances (batting) or innings (pitching metrics)",
    )
    parser.add_argument("--top", type=int, default=10, help="Leaderboard rows to print")
    parser.add_argument(
        "--scatter",
        nargs=2,
        metavar=("X", "Y"),
        default=None,
        help="Print paired batting metrics per player",
    )
    parser.add_argument("--player", default=None, help="Print the cumulative trend of one player ID or name")
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("batting_stats.csv"),
        help="Aggregated batting table CSV; pitching goes beside it with a _pitching suffix",
    )
    parser.add_argument("--report", type=Path, default=None, help="Optional path to write a summary JSON")
    parser.add_argument("--load-filters", type=Path, default=None, help="Load a filter profile JSON")
    parser.add_argument("--save-filters", type=Path, default=None, help="Save the effective filters as JSON")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    return parser.parse_args(argv)


def _write_table(path: Path, rows: Iterable[Mapping[str, Any]]) -> int:
    rows = list(rows)
    with path.open("w", newline="", encoding="utf-8") as f:
        if not rows:
            return 0
        writer = csv.DictWriter(f, fieldnames=list(rows[0].keys()))
        writer.writeheader()
        writer.writerows(rows)
    return len(rows)


def _format_value(value: float) -> str:
    if isinstance(value, int):
        return str(value)
    return f"{value:.3f}"


def main(argv: Sequence[str] | None = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    profile = FilterProfile(
        start_date=args.start_date,
        end_date=args.end_date,
        team_keyword=args.team,
        category=args.category or "all",
        metric=args.metric,
        min_sample=args.min_sample,
    )
    if args.load_filters:
        profile = FilterProfile.load(args.load_filters).merged(profile)
    if args.save_filters:
        profile.save(args.save_filters)
        print(f"Saved filter profile to {args.save_filters}")

    if args.files:
        result = import_paths(args.files)
        print(result.message)
        if result.skipped_files:
            print(f"Skipped unrecognised files: {', '.join(result.skipped_files)}")
        batting_rows, pitching_rows = result.batting, result.pitching
    else:
        batting_rows, pitching_rows = load_sample_data()
        print("Using bundled sample data")

    criteria = profile.criteria()
    batting_records = filter_records(as_batting_records(batting_rows), criteria)
    pitching_records = filter_records(as_pitching_records(pitching_rows), criteria)
    batting = aggregate_batting(batting_records)
    pitching = aggregate_pitching(pitching_records)
    print(f"Filtered {len(batting_records)} batting and {len(pitching_records)} pitching rows")

    summary = team_summary(batting_records, batting, pitching)
    if summary is None:
        print("No batting rows match the filters")
    else:
        print(
            "Team: {games} games, avg {avg:.3f}, {runs} runs, {hr} HR, ERA {era:.2f}".format(
                games=summary.total_games,
                avg=summary.team_avg,
                runs=summary.total_runs,
                hr=summary.total_hr,
                era=summary.team_era,
            )
        )

    metric = profile.metric or _DEFAULT_METRIC
    min_sample = profile.min_sample or 0
    try:
        leaders = top_entries(rank(batting, pitching, metric, min_sample), args.top)
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc
    label = METRICS[metric].label if metric in METRICS else metric
    print(f"Leaders by {label}:")
    for position, entry in enumerate(leaders, start=1):
        print(f"{position:>3}. {entry.name} {_format_value(entry.value)}")

    if args.scatter:
        x_metric, y_metric = args.scatter
        try:
            points = scatter(batting, x_metric, y_metric, min_sample)
        except ValueError as exc:
            raise SystemExit(str(exc)) from exc
        print(f"{x_metric} vs {y_metric}:")
        for point in points:
            print(f"  {point.name}: {_format_value(point.x)}, {_format_value(point.y)} ({point.z} PA)")

    if args.player:
        trend = player_batting_trend(batting_records, args.player)
        pitching_trend = player_pitching_trend(pitching_records, args.player)
        if not trend and not pitching_trend:
            print(f"No games found for player {args.player}")
        for point in trend:
            print(
                f"  {point.date} vs {point.opponent}: avg {point.totals.avg:.3f} ops {point.totals.ops:.3f}"
            )
        for point in pitching_trend:
            print(
                f"  {point.date} vs {point.opponent}: era {point.totals.era:.2f} "
                f"{point.innings} IP {point.strike_rate}% strikes"
            )

    written = _write_table(args.output, (agg.to_dict() for agg in sorted_batting(batting)))
    print(f"Wrote {written} batting rows to {args.output}")
    if pitching:
        pitching_output = args.output.with_name(f"{args.output.stem}_pitching{args.output.suffix}")
        written = _write_table(pitching_output, (agg.to_dict() for agg in sorted_pitching(pitching)))
        print(f"Wrote {written} pitching rows to {pitching_output}")

    if args.report:
        report_payload = {
            "filters": asdict(criteria),
            "batting_rows": len(batting_records),
            "pitching_rows": len(pitching_records),
            "team": asdict(summary) if summary is not None else None,
            "metric": metric,
            "leaders": [asdict(entry) for entry in leaders],
        }
        args.report.write_text(json.dumps(report_payload, indent=2, ensure_ascii=False), encoding="utf-8")
        print(f"Wrote summary report to {args.report}")


if __name__ == "__main__":
    main()
