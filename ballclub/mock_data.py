"""Seed data for a fresh club: teams, players, games, scores, votes and users.

Each function returns new objects so callers can mutate them freely.
"""

from .models import Game, Player, Score, Team, User, Vote

_TEAMS = [
    ('1', '1st Team', 'Premier division team', '#1E5CB3'),
    ('2', '2nd Team', 'Reserve team', '#3A7AC8'),
    ('3', '3rd Team', 'Development team', '#5696DE'),
    ('4', 'Womens Blue', "Women's first team", '#0D47A1'),
    ('5', 'Womens Red', "Women's second team", '#E63946'),
    ('6', 'U17', 'Under 17 youth team', '#F9A826'),
    ('7', 'U15', 'Under 15 youth team', '#2A9D8F'),
    ('8', 'U13', 'Under 13 youth team', '#6A4C93'),
]

# (id, name, position, number, total_points, best_fielder, best_batter, team_ids)
_PLAYERS = [
    ('1', 'Mike Trout', 'Outfield', 27, 12, 3, 5, ['1', '2']),
    ('2', 'Aaron Judge', 'Outfield', 99, 9, 1, 4, ['1']),
    ('3', 'Shohei Ohtani', 'Pitcher/DH', 17, 15, 2, 7, ['1']),
    ('4', 'Mookie Betts', 'Outfield', 50, 7, 4, 2, ['2']),
    ('5', 'Fernando Tatis Jr.', 'Shortstop', 23, 11, 5, 3, ['1', '3']),
    ('6', 'Jessica Martinez', 'Pitcher', 14, 8, 2, 3, ['4']),
    ('7', 'Sarah Johnson', 'Catcher', 22, 6, 3, 1, ['4', '5']),
    ('8', 'Tyler Williams', 'First Base', 34, 4, 1, 2, ['6']),
    ('9', 'Emma Davis', 'Second Base', 7, 3, 1, 1, ['5']),
    ('10', 'Jake Thompson', 'Third Base', 12, 5, 2, 1, ['7']),
]

# (id, date, opponent, location, result, is_completed, voting_open, points_assigned, participants, team_id)
_GAMES = [
    ('1', '2023-06-01', 'Yankees', 'Home', 'W 5-3', True, False, True, ['1', '2', '3', '4', '5'], '1'),
    ('2', '2023-06-08', 'Red Sox', 'Away', 'L 2-4', True, False, True, ['1', '3', '4', '5'], '1'),
    ('3', '2023-06-15', 'Cubs', 'Home', 'W 7-2', True, True, False, ['1', '2', '3', '5'], '1'),
    ('4', '2023-06-22', 'Dodgers', 'Away', None, False, False, False, [], '1'),
    ('5', '2023-06-29', 'Giants', 'Home', None, False, False, False, [], '1'),
    ('6', '2023-06-05', 'Marlins', 'Home', 'W 4-2', True, False, True, ['6', '7', '9'], '4'),
    ('7', '2023-06-12', 'Cardinals', 'Away', 'L 1-3', True, False, True, ['6', '7', '9'], '4'),
    ('8', '2023-06-19', 'Braves', 'Home', None, False, False, False, [], '4'),
]

# (game_id, player_id, points)
_SCORES = [
    ('1', '3', 3),
    ('1', '1', 2),
    ('1', '5', 1),
    ('2', '2', 3),
    ('2', '3', 2),
    ('2', '4', 1),
]

# (game_id, voter_id, best_fielder_id, best_batter_id)
_VOTES = [
    ('1', '1', '3', '1'),
    ('1', '2', '3', '5'),
    ('1', '3', '5', '1'),
    ('1', '4', '3', '1'),
    ('1', '5', '3', '1'),
    ('2', '1', '4', '2'),
    ('2', '2', '4', '2'),
    ('2', '3', '4', '3'),
    ('2', '4', '1', '2'),
    ('2', '5', '4', '2'),
]

# (id, email, name, role, player_id, created_at)
_USERS = [
    ('1', 'admin@baseball.com', 'Admin User', 'masterAdmin', None, '2023-01-01T00:00:00.000Z'),
    ('2', 'manager@baseball.com', 'Team Manager', 'manager', None, '2023-01-02T00:00:00.000Z'),
    ('3', 'mike@baseball.com', 'Mike Trout', 'player', '1', '2023-01-03T00:00:00.000Z'),
    ('4', 'aaron@baseball.com', 'Aaron Judge', 'player', '2', '2023-01-04T00:00:00.000Z'),
]


def mock_teams() -> list[Team]:
    return [Team(id=i, name=n, description=d, color=c) for i, n, d, c in _TEAMS]


def mock_players() -> list[Player]:
    return [
        Player(
            id=pid,
            name=name,
            position=position,
            number=number,
            total_points=points,
            best_fielder=fielder,
            best_batter=batter,
            team_ids=list(team_ids),
        )
        for pid, name, position, number, points, fielder, batter, team_ids in _PLAYERS
    ]


def mock_games() -> list[Game]:
    return [
        Game(
            id=gid,
            date=date,
            opponent=opponent,
            location=location,
            result=result,
            is_completed=completed,
            voting_open=voting_open,
            points_assigned=assigned,
            participants=list(participants),
            team_id=team_id,
        )
        for gid, date, opponent, location, result, completed, voting_open, assigned, participants, team_id in _GAMES
    ]


def mock_scores() -> list[Score]:
    return [Score(id=f'{g}-{p}', game_id=g, player_id=p, points=pts) for g, p, pts in _SCORES]


def mock_votes() -> list[Vote]:
    return [
        Vote(id=f'{g}-{v}', game_id=g, voter_id=v, best_fielder_id=f, best_batter_id=b)
        for g, v, f, b in _VOTES
    ]


def mock_users() -> list[User]:
    return [
        User(id=uid, email=email, name=name, role=role, player_id=player_id, created_at=created)
        for uid, email, name, role, player_id, created in _USERS
    ]
