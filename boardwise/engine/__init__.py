"""
BoardWise game engine.
Pure state machine for board configuration, turns, pawn movement, quizzes and scoring.
"""

MIN_TILES = 10
MAX_TILES = 100

MIN_PLAYERS = 1
MAX_PLAYERS = 10

# Event log keeps the most recent entries only
MAX_LOG_ENTRIES = 50
