#!/usr/bin/env python3
"""
Ballclub admin CLI

Runs club commands against the JSON data directory, acting as one user.

Usage:
    python club_admin.py seed
    python club_admin.py --as manager@baseball.com games --team 1
    python club_admin.py --as manager@baseball.com complete 4
    python club_admin.py --as manager@baseball.com assign-points 4 3:1 2:5 1:2
    python club_admin.py --as mike@baseball.com vote 3 --fielder 3 --batter 5
    python club_admin.py --as admin@baseball.com leaderboard --metric fielder
    python club_admin.py --as admin@baseball.com export club.xlsx
"""

import argparse
import sys
from pathlib import Path

from ballclub import ClubError, ClubService, JsonFileStorage, write_template
from ballclub.config import get_data_dir
from ballclub.constants import LEADERBOARD_METRICS
from ballclub.logging_config import get_logger, setup_logging

logger = get_logger('cli')


def parse_points(values: list[str]) -> list[dict]:
    """Parse 'points:player_id' pairs, e.g. ['3:1', '2:5']."""
    entries = []
    for value in values:
        points, sep, player_id = value.partition(':')
        if not sep or not points.isdigit():
            raise argparse.ArgumentTypeError(f"Expected POINTS:PLAYER_ID, got '{value}'")
        entries.append({'player_id': player_id, 'points': int(points)})
    return entries


def print_games(service: ClubService, team_id: str | None) -> None:
    games = service.engine.get_games_by_team(team_id) if team_id else service.engine.games
    teams = {t.id: t.name for t in service.roster.teams}

    print(f"{'ID':<16} {'Date':<20} {'Team':<14} {'Opponent':<18} Phase")
    print("-" * 80)
    for game in sorted(games, key=lambda g: g.date):
        team = teams.get(game.team_id, game.team_id)
        print(f"{game.id:<16} {game.date:<20} {team:<14} {game.opponent:<18} {game.phase.value}")


def print_leaderboard(service: ClubService, caller, metric: str) -> None:
    rows = service.leaderboard(caller, metric)

    print("\n" + "=" * 50)
    print(f"LEADERBOARD: {LEADERBOARD_METRICS[metric].upper()}")
    print("=" * 50)
    for rank, (player, value) in enumerate(rows, 1):
        print(f"  {rank}. {player.name} ({player.position}): {value}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Ballclub games, points and voting admin")
    parser.add_argument(
        "--as", "-u",
        dest="email",
        default=None,
        help="Email of the user to act as",
    )
    parser.add_argument(
        "--data-dir", "-d",
        default=None,
        help="Path to data directory (defaults to the configured data_dir)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log debug output",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("seed", help="Write the mock club to an empty data directory")
    sub.add_parser("audit", help="Report inconsistencies in stored data")

    games = sub.add_parser("games", help="List games")
    games.add_argument("--team", default=None, help="Only games for this team id")

    for name, help_text in (
        ("complete", "Mark a game as played"),
        ("open-voting", "Open voting for a completed game"),
        ("close-voting", "Close voting for a game"),
        ("results", "Show points and vote tallies for a game"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("game_id")

    points = sub.add_parser("assign-points", help="Award 3/2/1 points for a game")
    points.add_argument("game_id")
    points.add_argument("entries", nargs="*", help="POINTS:PLAYER_ID pairs, e.g. 3:1 2:5 1:2")

    vote = sub.add_parser("vote", help="Cast or edit your vote for a game")
    vote.add_argument("game_id")
    vote.add_argument("--fielder", default=None, help="Best fielder player id")
    vote.add_argument("--batter", default=None, help="Best batter player id")

    board = sub.add_parser("leaderboard", help="Rank players")
    board.add_argument("--metric", "-m", choices=list(LEADERBOARD_METRICS), default="points")

    export = sub.add_parser("export", help="Export scores, votes and leaderboards to Excel")
    export.add_argument("output", help="Output .xlsx path")

    template = sub.add_parser("template", help="Write a blank import workbook")
    template.add_argument("kind", choices=["games", "players"])
    template.add_argument("output", help="Output .xlsx path")

    for kind in ("games", "players"):
        imp = sub.add_parser(f"import-{kind}", help=f"Import {kind} from an Excel sheet")
        imp.add_argument("path", help="Input .xlsx path")

    return parser


def run(args: argparse.Namespace) -> None:
    data_dir = Path(args.data_dir) if args.data_dir else get_data_dir()
    storage = JsonFileStorage(data_dir)

    if args.command == "template":
        path = write_template(args.output, args.kind)
        print(f"Template written: {path}")
        return

    service = ClubService.open(storage)

    if args.command == "seed":
        service.flush()
        print(f"Club data written to {data_dir}")
        return

    if args.command == "audit":
        warnings = service.audit()
        for warning in warnings:
            print(f"⚠️  {warning}")
        print(f"{len(warnings)} issue(s) found")
        return

    if args.command == "games":
        print_games(service, args.team)
        return

    if not args.email:
        print("❌ This command needs --as EMAIL")
        sys.exit(1)
    caller = service.login(args.email)

    if args.command == "complete":
        game = service.complete_game(caller, args.game_id)
        print(f"Game {game.id} vs {game.opponent} completed")
    elif args.command == "open-voting":
        service.open_voting(caller, args.game_id)
        print(f"Voting opened for game {args.game_id}")
    elif args.command == "close-voting":
        service.close_voting(caller, args.game_id)
        print(f"Voting closed for game {args.game_id}")
    elif args.command == "assign-points":
        scores = service.assign_points(caller, args.game_id, parse_points(args.entries))
        players = {p.id: p.name for p in service.roster.players}
        print(f"Points assigned for game {args.game_id}:")
        for score in sorted(scores, key=lambda s: s.points, reverse=True):
            print(f"  {score.points} pts: {players.get(score.player_id, score.player_id)}")
    elif args.command == "vote":
        vote = service.submit_vote(caller, args.game_id, args.fielder, args.batter)
        print(f"Vote {vote.id} saved (fielder: {vote.best_fielder_id}, batter: {vote.best_batter_id})")
    elif args.command == "results":
        results = service.game_results(caller, args.game_id)
        print(f"Game {args.game_id} points:")
        for score in results['scores']:
            print(f"  {score.points} pts: {score.player_id}")
        for category, tally in results['votes'].items():
            print(f"Best {category}:")
            for player_id, count in tally:
                print(f"  {player_id}: {count}")
    elif args.command == "leaderboard":
        print_leaderboard(service, caller, args.metric)
    elif args.command == "export":
        path = service.export(caller, args.output)
        print(f"Exported to {path}")
    elif args.command == "import-games":
        games = service.import_games_workbook(caller, args.path)
        print(f"Imported {len(games)} games")
    elif args.command == "import-players":
        players = service.import_players_workbook(caller, args.path)
        print(f"Imported {len(players)} players")


def main():
    parser = build_parser()
    args = parser.parse_args()
    setup_logging(level="DEBUG" if args.verbose else None)

    try:
        run(args)
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))
    except ClubError as e:
        logger.debug(f"{args.command} failed: {e!r}")
        print(f"❌ {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
