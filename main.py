#!/usr/bin/env python3
"""
Challonge CLI
=============

Inspect tournaments on a Challonge account.

Usage:
    python main.py tournaments --state in_progress
    python main.py tournament my_bracket --include all
    python main.py participants 1086875
    python main.py matches 1086875 --state open
    python main.py attachments 1086875 23575258

Credentials are read from CHALLONGE_USERNAME and CHALLONGE_API_KEY.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, List

# Ensure project root is in path
sys.path.insert(0, str(Path(__file__).parent))

from rich.console import Console
from rich.table import Table

from api import Challonge
from core.errors import ChallongeError
from infra.logging import configure_logging, get_logger
from models import MatchState, TournamentIncludes, TournamentState, TournamentType


console = Console()

INCLUDES = {
    "none": TournamentIncludes.NONE,
    "participants": TournamentIncludes.PARTICIPANTS,
    "matches": TournamentIncludes.MATCHES,
    "all": TournamentIncludes.ALL,
}


def print_json(records: Any) -> None:
    """Dump one model or a list of models as JSON."""
    if isinstance(records, list):
        payload = [record.model_dump(mode="json") for record in records]
    else:
        payload = records.model_dump(mode="json")
    console.print_json(json.dumps(payload))


def print_tournaments(tournaments: List) -> None:
    table = Table(title="Tournaments")
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_column("URL")
    table.add_column("Type")
    table.add_column("State")
    table.add_column("Players", justify="right")

    for t in tournaments:
        table.add_row(str(t.id), t.name, t.url, str(t.tournament_type), t.state, str(t.participants_count))

    console.print(table)


def print_tournament(tournament) -> None:
    console.print(f"[bold cyan]{tournament.name}[/bold cyan] [dim]#{tournament.id}[/dim]")
    console.print(f"{tournament.tournament_type} | state: {tournament.state or '-'} | "
                  f"participants: {tournament.participants_count} | progress: {tournament.progress_meter}%")
    if tournament.full_challonge_url:
        console.print(f"[dim]{tournament.full_challonge_url}[/dim]")
    if tournament.participants:
        print_participants(tournament.participants)
    if tournament.matches:
        print_matches(tournament.matches)


def print_participants(participants: List) -> None:
    table = Table(title="Participants")
    table.add_column("Seed", justify="right")
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_column("Checked in")
    table.add_column("Rank", justify="right")

    for p in sorted(participants, key=lambda p: p.seed):
        table.add_row(
            str(p.seed),
            str(p.id),
            p.display_name,
            "✓" if p.checked_in else "",
            str(p.final_rank) if p.final_rank is not None else "",
        )

    console.print(table)


def print_matches(matches: List) -> None:
    table = Table(title="Matches")
    table.add_column("ID", justify="right")
    table.add_column("Round", justify="right")
    table.add_column("Match")
    table.add_column("State")
    table.add_column("Player 1", justify="right")
    table.add_column("Player 2", justify="right")
    table.add_column("Scores")
    table.add_column("Winner", justify="right")

    for m in matches:
        table.add_row(
            str(m.id),
            str(m.round),
            m.identifier,
            str(m.state),
            str(m.player1_id or ""),
            str(m.player2_id or ""),
            str(m.scores),
            str(m.winner_id or ""),
        )

    console.print(table)


def print_attachments(attachments: List) -> None:
    table = Table(title="Attachments")
    table.add_column("ID", justify="right")
    table.add_column("Description")
    table.add_column("URL")
    table.add_column("File")

    for a in attachments:
        table.add_row(str(a.id), a.description or "", a.url or a.asset.url or "", a.asset.file_name or "")

    console.print(table)


async def run(args: argparse.Namespace) -> None:
    challonge = Challonge.from_config(args.config)

    if args.command == "tournaments":
        records = await challonge.tournament_index(
            state=TournamentState(args.state) if args.state else None,
            tournament_type=TournamentType.parse(args.type) if args.type else None,
            subdomain=args.subdomain,
        )
        printer = print_tournaments
    elif args.command == "tournament":
        records = await challonge.get_tournament(args.tournament, INCLUDES[args.include])
        printer = print_tournament
    elif args.command == "participants":
        records = await challonge.participant_index(args.tournament)
        printer = print_participants
    elif args.command == "matches":
        records = await challonge.match_index(
            args.tournament,
            state=MatchState(args.state) if args.state else None,
            participant_id=args.participant,
        )
        printer = print_matches
    else:
        records = await challonge.attachments_index(args.tournament, args.match)
        printer = print_attachments

    if args.json:
        print_json(records)
    else:
        printer(records)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Challonge REST API client",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config", "-c",
        default="challonge.yaml",
        help="Path to configuration file"
    )
    parser.add_argument(
        "--log-level", "-l",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level"
    )
    parser.add_argument(
        "--log-file",
        action="store_true",
        help="Also write JSON logs to ./logs"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print raw records as JSON"
    )

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("tournaments", help="List tournaments")
    p.add_argument("--state", choices=[s.value for s in TournamentState])
    p.add_argument("--type", help="single_elimination, double_elimination, round_robin, swiss")
    p.add_argument("--subdomain")

    p = sub.add_parser("tournament", help="Show one tournament")
    p.add_argument("tournament", help="Tournament id or url (subdomain-url)")
    p.add_argument("--include", choices=list(INCLUDES), default="none")

    p = sub.add_parser("participants", help="List participants")
    p.add_argument("tournament")

    p = sub.add_parser("matches", help="List matches")
    p.add_argument("tournament")
    p.add_argument("--state", choices=[s.value for s in MatchState])
    p.add_argument("--participant", type=int)

    p = sub.add_parser("attachments", help="List match attachments")
    p.add_argument("tournament")
    p.add_argument("match", type=int)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    configure_logging(level=getattr(logging, args.log_level), file=args.log_file)
    logger = get_logger("main")

    try:
        asyncio.run(run(args))
        return 0
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        return 130
    except ChallongeError as e:
        logger.debug("Request failed", exc_info=True)
        console.print(f"[bold red]Error:[/bold red] {e}")
        return 1
    except ValueError as e:
        console.print(f"[bold red]Invalid argument:[/bold red] {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
