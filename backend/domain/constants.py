"""
Game constants for the snake arcade engine.
"""

# Movement directions
UP = "UP"
DOWN = "DOWN"
LEFT = "LEFT"
RIGHT = "RIGHT"
VALID_MOVES = {UP, DOWN, LEFT, RIGHT}

OPPOSITE_MOVES = {UP: DOWN, DOWN: UP, LEFT: RIGHT, RIGHT: LEFT}

# Unit vectors in pixel space (y grows downward)
MOVE_VECTORS = {
    UP: (0, -1),
    DOWN: (0, 1),
    LEFT: (-1, 0),
    RIGHT: (1, 0),
}

# Game phases
MENU = "MENU"
PLAYING = "PLAYING"
GAME_OVER = "GAME_OVER"

# Death reasons
WALL = "wall"
SELF = "self"
BOSS = "boss"

# Power-up kinds
SPEED_BOOST = "SPEED_BOOST"
SLOW_MOTION = "SLOW_MOTION"
GHOST_MODE = "GHOST_MODE"
MAGNET = "MAGNET"
POWER_UP_KINDS = (SPEED_BOOST, SLOW_MOTION, GHOST_MODE, MAGNET)
SPEED_POWER_UPS = {SPEED_BOOST, SLOW_MOTION}

# Challenge goal types
SURVIVE = "SURVIVE"
EAT_TARGET = "EAT_TARGET"
AVOID_ZONE = "AVOID_ZONE"
BOSS_ESCAPE = "BOSS_ESCAPE"
SCORE_RUSH = "SCORE_RUSH"
SPECIAL_MISSION = "SPECIAL_MISSION"
GOAL_TYPES = {SURVIVE, EAT_TARGET, AVOID_ZONE, BOSS_ESCAPE, SCORE_RUSH, SPECIAL_MISSION}

# Grid and board
DEFAULT_GRID_SIZE = 20
DEFAULT_BOARD_WIDTH = 800
DEFAULT_BOARD_HEIGHT = 600
START_CELL = (5, 5)

# Game speed (milliseconds per cell, smaller is faster)
INITIAL_GAME_SPEED = 100
MIN_GAME_SPEED = 50
SPEED_BOOST_SPEED = 50
SLOW_MOTION_SPEED = 150
SPEED_INCREMENT_PER_FOOD = 1
SCORE_PER_SPEED_STEP = 100

# Scoring
POINTS_PER_FOOD = 10
POINTS_PER_POWERUP = 50
CHALLENGE_REWARD_POINTS = 500

# Spawning
FOOD_SPAWN_ATTEMPTS = 100

# Power-ups
POWERUP_DURATION_MS = 10000
POWERUP_DESPAWN_TIME_MS = 8000
POWERUP_SPAWN_CHANCE = 0.005
MAGNET_RADIUS_CELLS = 1

# Boss mode
BOSS_SPAWN_SCORE_THRESHOLD = 500
BOSS_MOVE_INTERVAL_MS = 150
BOSS_INITIAL_LENGTH = 3
BOSS_SPAWN_OFFSET_CELLS = 5

# Close call detection
CLOSE_CALL_DEBOUNCE_MS = 2000
CLOSE_CALL_IGNORED_SEGMENTS = 3

# Challenge timing
CHALLENGE_INITIAL_DELAY_MS = 2000
MIN_CHALLENGE_TIME_SECONDS = 10
MAX_CHALLENGE_TIME_SECONDS = 30

# Themes used for trivia requests
THEMES = ("neon", "jungle", "lava")
DEFAULT_THEME = "neon"
