"""Constants for the ballclub roster and voting app."""

from pathlib import Path

PROJECT_DIR = Path(__file__).parent.parent
DATA_DIR = PROJECT_DIR / 'data'
CONFIG_PATH = DATA_DIR / 'club_config.json'

# Placement points: 3 = best, 2 = second, 1 = third
POINT_VALUES = (3, 2, 1)
POINT_LABELS = {3: '1st', 2: '2nd', 1: '3rd'}

# Fallbacks used by bulk imports
UNKNOWN_OPPONENT = 'Unknown Opponent'
UNKNOWN_LOCATION = 'Unknown Location'
UNKNOWN_PLAYER = 'Unknown Player'
UNKNOWN_POSITION = 'Unknown Position'
UNKNOWN_VOTER = 'Unknown Voter'

# Persisted collections, one JSON file each
COLLECTIONS = ('teams', 'players', 'games', 'scores', 'votes', 'users')

# Leaderboard metrics
LEADERBOARD_METRICS = {
    'points': 'Points',
    'fielder': 'Best Fielder Votes',
    'batter': 'Best Batter Votes',
}

# Accepted game dates: YYYY-MM-DD or YYYY-MM-DDTHH:MM[:SS]
DATE_PATTERN = r'^\d{4}-\d{2}-\d{2}(T\d{2}:\d{2}(:\d{2})?)?$'

# Separator for id lists in import sheets ("t1;t2")
ID_LIST_SEPARATOR = ';'
