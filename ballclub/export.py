"""Excel export of scores, votes and leaderboards, and Excel import of games and players.

The export side only reads collections. Import sheets use a header row with
the columns below; id lists are ';'-separated ("t1;t2").

    Games:   teamId | opponent | date | location | participants
    Players: name | position | number | email | phone | image | teamIds
"""

import logging
from pathlib import Path
from typing import Any, Iterable, Mapping

import openpyxl
from openpyxl.styles import Font
from pydantic import ValidationError as SchemaValidationError

from .aggregation import leaderboard
from .constants import LEADERBOARD_METRICS, UNKNOWN_PLAYER, UNKNOWN_VOTER
from .errors import ValidationError
from .models import Player, Score, Vote
from .schemas import GameSheetRow, PlayerSheetRow

logger = logging.getLogger('ballclub.export')

GAME_SHEET_HEADERS = ['teamId', 'opponent', 'date', 'location', 'participants']
PLAYER_SHEET_HEADERS = ['name', 'position', 'number', 'email', 'phone', 'image', 'teamIds']
REQUIRED_GAME_HEADERS = ['teamId', 'opponent', 'date', 'location']
REQUIRED_PLAYER_HEADERS = ['name', 'position']


def format_scores_for_export(scores: Iterable[Score], players: Mapping[str, Player]) -> list[dict]:
    """Flat score rows with the player's name resolved."""
    return [
        {
            'gameId': s.game_id,
            'playerId': s.player_id,
            'playerName': players[s.player_id].name if s.player_id in players else UNKNOWN_PLAYER,
            'points': s.points,
        }
        for s in scores
    ]


def format_votes_for_export(votes: Iterable[Vote], players: Mapping[str, Player]) -> list[dict]:
    """Flat vote rows with voter and pick names resolved; empty picks stay blank."""

    def pick_name(player_id):
        if not player_id:
            return ''
        return players[player_id].name if player_id in players else UNKNOWN_PLAYER

    return [
        {
            'gameId': v.game_id,
            'voterId': v.voter_id,
            'voterName': players[v.voter_id].name if v.voter_id in players else UNKNOWN_VOTER,
            'bestFielderId': v.best_fielder_id or '',
            'bestFielderName': pick_name(v.best_fielder_id),
            'bestBatterId': v.best_batter_id or '',
            'bestBatterName': pick_name(v.best_batter_id),
        }
        for v in votes
    ]


def format_leaderboard_for_export(
    players: Iterable[Player],
    scores: Iterable[Score],
    votes: Iterable[Vote],
    metric: str = 'points',
) -> list[dict]:
    """Ranked rows for one leaderboard metric."""
    label = LEADERBOARD_METRICS[metric]
    return [
        {'rank': rank, 'playerId': p.id, 'playerName': p.name, 'position': p.position, label: value}
        for rank, (p, value) in enumerate(leaderboard(players, scores, votes, metric), start=1)
    ]


def write_workbook(path: str | Path, sheets: Mapping[str, list[dict]]) -> Path:
    """
    Write one sheet per entry of ``sheets``, headers taken from the first row.

    Args:
        path: Destination .xlsx file
        sheets: Sheet name -> list of row dicts

    Returns:
        Path of the saved workbook
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    wb = openpyxl.Workbook()
    wb.remove(wb.active)

    for sheet_name, rows in sheets.items():
        ws = wb.create_sheet(sheet_name)
        if not rows:
            continue

        headers = list(rows[0].keys())
        for col_idx, header in enumerate(headers, start=1):
            cell = ws.cell(row=1, column=col_idx, value=header)
            cell.font = Font(bold=True)

        for row_idx, row in enumerate(rows, start=2):
            for col_idx, header in enumerate(headers, start=1):
                ws.cell(row=row_idx, column=col_idx, value=row.get(header))

    if not wb.sheetnames:
        wb.create_sheet('Empty')

    wb.save(str(path))
    wb.close()
    logger.info(f'Exported {len(sheets)} sheets to {path}')
    return path


def export_club(
    path: str | Path,
    players: Iterable[Player],
    scores: Iterable[Score],
    votes: Iterable[Vote],
) -> Path:
    """Scores, votes and all three leaderboards in one workbook."""
    players = list(players)
    scores = list(scores)
    votes = list(votes)
    by_id = {p.id: p for p in players}

    sheets: dict[str, list[dict]] = {
        'Scores': format_scores_for_export(scores, by_id),
        'Votes': format_votes_for_export(votes, by_id),
    }
    for metric in LEADERBOARD_METRICS:
        sheets[f'Leaderboard {metric}'] = format_leaderboard_for_export(players, scores, votes, metric)
    return write_workbook(path, sheets)


def write_template(path: str | Path, kind: str) -> Path:
    """Blank import workbook for 'games' or 'players' with example rows."""
    if kind == 'games':
        rows = [
            {'teamId': 'team1', 'opponent': 'Rival Team', 'date': '2023-06-15T18:00:00',
             'location': 'Home Field', 'participants': 'player1;player2;player3'},
            {'teamId': 'team1', 'opponent': 'Away Team', 'date': '2023-06-22T19:30:00',
             'location': 'Away Field', 'participants': ''},
        ]
    elif kind == 'players':
        rows = [
            {'name': 'John Smith', 'position': 'Pitcher', 'number': 42, 'email': 'john.smith@example.com',
             'phone': '555-123-4567', 'image': '', 'teamIds': 'team1;team2'},
            {'name': 'Jane Doe', 'position': 'Catcher', 'number': 7, 'email': 'jane.doe@example.com',
             'phone': '555-987-6543', 'image': '', 'teamIds': 'team1'},
        ]
    else:
        raise ValueError(f'Unknown template kind: {kind}')
    return write_workbook(path, {kind.capitalize(): rows})


def _read_rows(path: str | Path, required: list[str]) -> list[tuple[int, dict[str, Any]]]:
    """(row number, {header: value}) for every non-empty data row of the first sheet."""
    wb = openpyxl.load_workbook(str(path), read_only=True, data_only=True)
    try:
        ws = wb.worksheets[0]
        rows = list(ws.iter_rows(values_only=True))
    finally:
        wb.close()

    if len(rows) < 2:
        raise ValidationError('Import sheet is empty or invalid')

    headers = [str(h).strip() if h is not None else '' for h in rows[0]]
    missing = [h for h in required if h not in headers]
    if missing:
        raise ValidationError(f'Missing required headers: {", ".join(missing)}')

    parsed = []
    for row_number, values in enumerate(rows[1:], start=2):
        if all(v is None or str(v).strip() == '' for v in values):
            continue
        record = {}
        for header, value in zip(headers, values):
            if not header:
                continue
            record[header] = '' if value is None else (value.strip() if isinstance(value, str) else value)
        parsed.append((row_number, record))
    return parsed


def _validate_rows(rows, schema, label):
    result = []
    errors = []
    for row_number, record in rows:
        try:
            result.append(schema.model_validate(record))
        except SchemaValidationError as e:
            for err in e.errors():
                field = err['loc'][0] if err['loc'] else label
                errors.append(f'Row {row_number}: {field}: {err["msg"]}')
    if errors:
        raise ValidationError(errors)
    return result


def read_game_rows(path: str | Path) -> list[GameSheetRow]:
    """
    Parse a games import workbook.

    Raises:
        ValidationError: Missing headers, or any row with a blank field or bad date
    """
    rows = _read_rows(path, REQUIRED_GAME_HEADERS)
    for _, record in rows:
        # openpyxl hands back datetimes for date-formatted cells
        if hasattr(record.get('date'), 'isoformat'):
            record['date'] = record['date'].isoformat()
    games = _validate_rows(rows, GameSheetRow, 'game')
    logger.info(f'Read {len(games)} game rows from {path}')
    return games


def read_player_rows(path: str | Path) -> list[PlayerSheetRow]:
    """
    Parse a players import workbook.

    Raises:
        ValidationError: Missing headers, or any row without name or position
    """
    rows = _read_rows(path, REQUIRED_PLAYER_HEADERS)
    players = _validate_rows(rows, PlayerSheetRow, 'player')
    logger.info(f'Read {len(players)} player rows from {path}')
    return players
