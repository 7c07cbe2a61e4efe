"""Lightweight REST client for the pyscorer API."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

import httpx


def build_params(args: argparse.Namespace) -> dict[str, str]:
    params = {
        "start_date": args.start_date,
        "end_date": args.end_date,
        "team": args.team,
        "category": args.category,
    }
    return {key: value for key, value in params.items() if value}


def main() -> None:
    parser = argparse.ArgumentParser(description="Interact with the pyscorer REST API")
    parser.add_argument("base_url", help="Base URL of the API, e.g. http://localhost:8000")
    parser.add_argument("files", type=Path, nargs="*", help="Scorer CSV exports to import")
    parser.add_argument("--start-date", default="", help="Filter start date")
    parser.add_argument("--end-date", default="", help="Filter end date")
    parser.add_argument("--team", default="", help="Team keyword")
    parser.add_argument("--category", default="", help="Tournament title")
    parser.add_argument("--metric", default="avg", help="Leaderboard metric")
    parser.add_argument("--limit", type=int, default=10, help="Leaderboard rows")
    parser.add_argument("--player", metavar="KEY", help="Fetch the cumulative trend of one player and exit")
    parser.add_argument("--kind", choices=["batting", "pitching"], default="batting", help="Trend kind for --player")
    parser.add_argument("--reset", action="store_true", help="Clear imported data and fall back to the sample set")
    parser.add_argument("--list-states", action="store_true", help="List saved seating states and exit")
    args = parser.parse_args()

    with httpx.Client(base_url=args.base_url) as client:
        if args.list_states:
            resp = client.get("/states")
            resp.raise_for_status()
            print(json.dumps(resp.json(), indent=2, ensure_ascii=False))
            return

        if args.reset:
            resp = client.delete("/data")
            resp.raise_for_status()
            print("Reset:", json.dumps(resp.json(), indent=2))

        if args.files:
            files = [("files", (path.name, path.read_bytes(), "text/csv")) for path in args.files]
            resp = client.post("/import", files=files)
            resp.raise_for_status()
            print(resp.json()["message"])

        params = build_params(args)
        if args.player:
            resp = client.get(f"/players/{args.player}/trend", params={**params, "kind": args.kind})
            if resp.status_code == 404:
                raise SystemExit(f"player {args.player} not found")
            resp.raise_for_status()
            print(json.dumps(resp.json(), indent=2, ensure_ascii=False))
            return

        resp = client.get("/dashboard", params=params)
        resp.raise_for_status()
        team = resp.json()["team"]
        print("Team summary:", json.dumps(team, indent=2))

        resp = client.get("/ranking", params={**params, "metric": args.metric, "limit": args.limit})
        if resp.status_code == 400:
            raise SystemExit(resp.json()["detail"])
        resp.raise_for_status()
        for position, entry in enumerate(resp.json(), start=1):
            print(f"{position:>3}. {entry['name']} {entry['value']}")


if __name__ == "__main__":
    main()
