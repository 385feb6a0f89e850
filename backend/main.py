import argparse
import json
import logging
import random
from typing import Callable, Dict, List, Optional

from dotenv import load_dotenv

from domain.constants import (
    BOSS,
    BOSS_ESCAPE,
    BOSS_INITIAL_LENGTH,
    BOSS_MOVE_INTERVAL_MS,
    BOSS_SPAWN_OFFSET_CELLS,
    BOSS_SPAWN_SCORE_THRESHOLD,
    CLOSE_CALL_DEBOUNCE_MS,
    CLOSE_CALL_IGNORED_SEGMENTS,
    DEFAULT_BOARD_HEIGHT,
    DEFAULT_BOARD_WIDTH,
    DEFAULT_GRID_SIZE,
    DEFAULT_THEME,
    DOWN,
    EAT_TARGET,
    FOOD_SPAWN_ATTEMPTS,
    GAME_OVER,
    GHOST_MODE,
    INITIAL_GAME_SPEED,
    LEFT,
    MAGNET,
    MAGNET_RADIUS_CELLS,
    MENU,
    MIN_GAME_SPEED,
    MOVE_VECTORS,
    PLAYING,
    POINTS_PER_FOOD,
    POINTS_PER_POWERUP,
    POWER_UP_KINDS,
    POWERUP_DESPAWN_TIME_MS,
    POWERUP_DURATION_MS,
    POWERUP_SPAWN_CHANCE,
    RIGHT,
    SCORE_PER_SPEED_STEP,
    SCORE_RUSH,
    SELF,
    SLOW_MOTION,
    SLOW_MOTION_SPEED,
    SPEED_BOOST,
    SPEED_BOOST_SPEED,
    SPEED_INCREMENT_PER_FOOD,
    SPEED_POWER_UPS,
    START_CELL,
    SURVIVE,
    THEMES,
    UP,
    WALL,
)
from domain.challenge import Challenge
from domain.events import (
    BossSpawned,
    ChallengeIssued,
    ChallengeResolved,
    CloseCall,
    FoodEaten,
    FoodStolen,
    GameEvent,
    PlayerDied,
    PowerUpActivated,
    PowerUpCollected,
    PowerUpExpired,
)
from domain.game_state import GameState
from domain.grid import Grid, Point
from domain.power_ups import ActiveEffect, PowerUpItem
from domain.snake import Snake

load_dotenv()

logger = logging.getLogger(__name__)

Listener = Callable[[GameEvent], None]

FRAMES_PER_SECOND = 60


class SnakeGame:
    """
    Manages:
      - Board geometry (Grid)
      - The player snake and its buffered direction
      - Food, power-up items and the active power-up effect
      - Score and speed
      - The boss snake
      - The active challenge
      - Close-call telemetry

    The engine owns no clock. Every time-dependent call receives the current
    time in milliseconds, and real movement is gated by game_speed.
    """
    def __init__(
        self,
        width: int = DEFAULT_BOARD_WIDTH,
        height: int = DEFAULT_BOARD_HEIGHT,
        grid_size: int = DEFAULT_GRID_SIZE,
        rng: Optional[random.Random] = None,
    ):
        self.grid = Grid(width, height, grid_size)
        self.width = width
        self.height = height
        self.grid_size = grid_size
        self.rng = rng or random.Random()
        self.phase = MENU
        self._listeners: List[Listener] = []
        self._reset(0.0)

    def _reset(self, current_time: float):
        self.snake = Snake([self.grid.to_pixel(*START_CELL)], direction=RIGHT)
        self.score = 0
        self.game_speed = INITIAL_GAME_SPEED
        self.now = current_time
        self.last_move_time = current_time
        self.death_reason: Optional[str] = None

        self.active_effect: Optional[ActiveEffect] = None
        self.power_up: Optional[PowerUpItem] = None

        self.boss: Optional[Snake] = None
        self.last_boss_move_time = current_time

        self.active_challenge: Optional[Challenge] = None
        self._challenge_score_baseline = 0

        self.close_calls = 0
        self.last_close_call_time: Optional[float] = None

        self.food = self.spawn_food()

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------
    def subscribe(self, listener: Listener):
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, event: GameEvent):
        for listener in list(self._listeners):
            listener(event)

    # ------------------------------------------------------------------
    # Read surface
    # ------------------------------------------------------------------
    @property
    def direction(self) -> str:
        return self.snake.direction

    @property
    def next_direction(self) -> str:
        return self.snake.next_direction

    @property
    def active_power_up(self) -> Optional[str]:
        return self.active_effect.kind if self.active_effect else None

    @property
    def boss_active(self) -> bool:
        return self.boss is not None

    @property
    def boss_snake(self) -> List[Point]:
        return self.boss.segments() if self.boss else []

    def challenge_snapshot(self) -> Optional[Dict]:
        return self.active_challenge.to_dict() if self.active_challenge else None

    def get_current_state(self) -> GameState:
        """
        Return a snapshot of the current board as a GameState.
        """
        power_up_item = None
        if self.power_up:
            power_up_item = {
                "position": self.power_up.position,
                "kind": self.power_up.kind,
                "spawn_time": self.power_up.spawn_time,
            }

        return GameState(
            phase=self.phase,
            score=self.score,
            snake_positions=self.snake.segments(),
            boss_positions=self.boss_snake,
            food=self.food,
            power_up_item=power_up_item,
            active_power_up=self.active_power_up,
            direction=self.direction,
            game_speed=self.game_speed,
            death_reason=self.death_reason,
            challenge=self.challenge_snapshot(),
            close_calls=self.close_calls,
            width=self.width,
            height=self.height,
            grid_size=self.grid_size,
        )

    # ------------------------------------------------------------------
    # Write surface
    # ------------------------------------------------------------------
    def start(self, current_time: float = 0.0):
        """Reset every per-session field and enter PLAYING."""
        self._reset(current_time)
        self.phase = PLAYING
        logger.info("Game started at t=%.0fms on %r", current_time, self.grid)

    def change_direction(self, direction: str) -> bool:
        """Buffer a direction; reversals and unknown directions are ignored."""
        return self.snake.queue_direction(direction)

    def update(self, current_time: float):
        """
        Advance the simulation for one frame:
          1) Expire power-ups and despawn stale power-up items
          2) Check the challenge deadline
          3) If the speed timer allows, move one cell and resolve collisions
          4) Handle food / power-up pickup and the power-up spawn roll
             (skipped when ghost mode blocked the move)
          5) Close-call telemetry
          6) Boss update, on every frame against the boss's own timer

        Steps 3 to 5 only run on movement ticks.
        """
        if self.phase != PLAYING:
            return
        self.now = current_time

        self._expire_power_ups(current_time)
        self._check_challenge_deadline(current_time)

        if current_time - self.last_move_time >= self.game_speed:
            self.last_move_time = current_time
            ate = self._step_player()
            if self.phase != PLAYING:
                return
            # None: a ghost-suppressed collision, the snake stayed put
            if ate is not None:
                self._handle_pickups(ate, current_time)
            self.check_close_call(self.snake.head, current_time)

        self._update_boss(current_time)

    # ------------------------------------------------------------------
    # Movement & collision
    # ------------------------------------------------------------------
    def _step_player(self) -> Optional[bool]:
        """
        Move the player one cell. Returns whether food was reached, or None
        when the move was blocked by a (possibly suppressed) death.
        """
        direction = self.snake.commit_direction()
        dx, dy = MOVE_VECTORS[direction]
        new_head = self.grid.offset(self.snake.head, dx, dy)

        if not self.grid.contains(new_head):
            self.handle_death(WALL)
            return None

        if self.snake.occupies(new_head):
            self.handle_death(SELF)
            return None

        ate = self._food_reached(new_head)
        self.snake.advance(new_head, grow=ate)
        return ate

    def _food_reached(self, head: Point) -> bool:
        if head == self.food:
            return True
        if self.active_power_up == MAGNET:
            distance = abs(head.x - self.food[0]) + abs(head.y - self.food[1])
            return distance <= MAGNET_RADIUS_CELLS * self.grid_size
        return False

    def handle_death(self, reason: str) -> bool:
        """
        Single entry point for every death. Returns True if the player died,
        False if GHOST_MODE suppressed it.
        """
        if self.active_power_up == GHOST_MODE:
            logger.debug("Death by %s suppressed by ghost mode", reason)
            return False

        self.phase = GAME_OVER
        self.death_reason = reason
        logger.info("Game over: %s (score %d)", reason, self.score)

        if self.active_challenge:
            self.complete_challenge(False)

        self._emit(PlayerDied(reason=reason, score=self.score, close_calls=self.close_calls))
        return True

    def speed_for_score(self) -> int:
        return max(MIN_GAME_SPEED, INITIAL_GAME_SPEED - self.score // SCORE_PER_SPEED_STEP)

    def _add_score(self, points: int):
        self.score += points
        challenge = self.active_challenge
        if challenge and challenge.goal_type == SCORE_RUSH:
            challenge.progress = self.score - self._challenge_score_baseline
            if challenge.progress >= challenge.target_value:
                self.complete_challenge(True)

    # ------------------------------------------------------------------
    # Food & power-up spawner
    # ------------------------------------------------------------------
    def _occupied_cells(self) -> set:
        occupied = set(self.snake.positions)
        if self.boss:
            occupied.update(self.boss.positions)
        return occupied

    def _random_free_cell(self, occupied: set) -> Optional[Point]:
        """
        Rejection-sample a free cell. When the retry budget runs out, pick
        from the remaining free cells; None if the board is full.
        """
        # A full board cannot succeed by sampling; go straight to the scan
        if len(occupied) < self.grid.cell_count:
            for _ in range(FOOD_SPAWN_ATTEMPTS):
                cell = self.grid.random_cell(self.rng)
                if cell not in occupied:
                    return cell

        free = [
            self.grid.to_pixel(col, row)
            for row in range(self.grid.rows)
            for col in range(self.grid.cols)
            if self.grid.to_pixel(col, row) not in occupied
        ]
        return self.rng.choice(free) if free else None

    def spawn_food(self) -> Point:
        cell = self._random_free_cell(self._occupied_cells())
        if cell is None:
            logger.warning("No free cell left for food, falling back to the origin")
            return Point(0, 0)
        return cell

    def spawn_power_up(self, current_time: Optional[float] = None) -> Optional[PowerUpItem]:
        if current_time is None:
            current_time = self.now
        occupied = self._occupied_cells()
        occupied.add(self.food)
        cell = self._random_free_cell(occupied)
        if cell is None:
            return None
        self.power_up = PowerUpItem(
            position=cell,
            kind=self.rng.choice(POWER_UP_KINDS),
            spawn_time=current_time,
        )
        logger.debug("Spawned %s at %s", self.power_up.kind, cell)
        return self.power_up

    def _handle_pickups(self, ate: bool, current_time: float):
        if ate:
            self._eat_food()

        head = self.snake.head
        if self.power_up and self.power_up.position == head:
            kind = self.power_up.kind
            self.power_up = None
            self._add_score(POINTS_PER_POWERUP)
            self._emit(PowerUpCollected(kind=kind, score=self.score))
            self.activate_power_up(kind, current_time)
        elif self.power_up is None and self.rng.random() < POWERUP_SPAWN_CHANCE:
            self.spawn_power_up(current_time)

    def _eat_food(self):
        eaten = self.food
        self._add_score(POINTS_PER_FOOD)
        self.food = self.spawn_food()

        if self.active_power_up not in SPEED_POWER_UPS:
            self.game_speed = max(MIN_GAME_SPEED, self.game_speed - SPEED_INCREMENT_PER_FOOD)

        self._emit(FoodEaten(position=eaten, score=self.score))

        challenge = self.active_challenge
        if challenge and challenge.goal_type == EAT_TARGET:
            challenge.progress += 1
            if challenge.progress >= challenge.target_value:
                self.complete_challenge(True)

    # ------------------------------------------------------------------
    # Power-up effect engine
    # ------------------------------------------------------------------
    def activate_power_up(self, kind: str, current_time: Optional[float] = None) -> bool:
        if kind not in POWER_UP_KINDS:
            logger.warning("Ignoring unknown power-up kind %r", kind)
            return False
        if current_time is None:
            current_time = self.now

        previous = self.active_power_up
        self.active_effect = ActiveEffect(kind=kind, expiry_time=current_time + POWERUP_DURATION_MS)

        if kind == SPEED_BOOST:
            self.game_speed = SPEED_BOOST_SPEED
        elif kind == SLOW_MOTION:
            self.game_speed = SLOW_MOTION_SPEED
        elif previous in SPEED_POWER_UPS:
            self.game_speed = self.speed_for_score()

        logger.info("Power-up %s active until t=%.0fms", kind, self.active_effect.expiry_time)
        self._emit(PowerUpActivated(kind=kind, expiry_time=self.active_effect.expiry_time))
        return True

    def deactivate_power_up(self):
        if self.active_effect is None:
            return
        kind = self.active_effect.kind
        self.active_effect = None
        if kind in SPEED_POWER_UPS:
            # Re-derived from score, not restored
            self.game_speed = self.speed_for_score()
        self._emit(PowerUpExpired(kind=kind))

    def _expire_power_ups(self, current_time: float):
        if self.active_effect and self.active_effect.expired(current_time):
            self.deactivate_power_up()

        if self.power_up and self.power_up.age(current_time) >= POWERUP_DESPAWN_TIME_MS:
            logger.debug("Power-up %s despawned", self.power_up.kind)
            self.power_up = None

    # ------------------------------------------------------------------
    # Challenge state machine
    # ------------------------------------------------------------------
    def issue_challenge(self, challenge: Challenge, current_time: Optional[float] = None) -> bool:
        """
        Start tracking an externally generated challenge. Refused unless the
        game is PLAYING and no other challenge is active.
        """
        if self.phase != PLAYING:
            logger.info("Ignoring challenge %r: game is %s", challenge.title, self.phase)
            return False
        if self.active_challenge is not None:
            logger.info("Ignoring challenge %r: another challenge is active", challenge.title)
            return False
        if current_time is None:
            current_time = self.now

        challenge.start_time = current_time
        challenge.active = True
        challenge.progress = 0
        self.active_challenge = challenge
        self._challenge_score_baseline = self.score

        logger.info("Challenge issued: %s (%s)", challenge.title, challenge.goal_type)
        self._emit(ChallengeIssued(challenge_id=challenge.id, goal_type=challenge.goal_type))
        return True

    def _check_challenge_deadline(self, current_time: float):
        challenge = self.active_challenge
        if challenge is None or not challenge.active:
            return
        if challenge.elapsed_seconds(current_time) >= challenge.time_limit_seconds:
            # Surviving until the deadline is the win condition for SURVIVE
            self.complete_challenge(challenge.goal_type == SURVIVE)

    def complete_challenge(self, success: bool):
        challenge = self.active_challenge
        if challenge is None:
            return

        challenge.active = False
        self.active_challenge = None

        if success:
            self._add_score(challenge.reward.points)
            if challenge.reward.power_up:
                self.activate_power_up(challenge.reward.power_up)

        logger.info(
            "Challenge %s %s (progress %d/%d)",
            challenge.title,
            "completed" if success else "failed",
            challenge.progress,
            challenge.target_value,
        )
        self._emit(ChallengeResolved(
            challenge_id=challenge.id,
            goal_type=challenge.goal_type,
            success=success,
            reward_points=challenge.reward.points if success else 0,
            reward_power_up=challenge.reward.power_up if success else None,
        ))

    # ------------------------------------------------------------------
    # Close-call telemetry
    # ------------------------------------------------------------------
    def _is_near_miss(self, head: Point) -> bool:
        g = self.grid_size
        x, y = head
        if x < g or y < g or x >= self.width - g or y >= self.height - g:
            return True

        for segment in list(self.snake.positions)[CLOSE_CALL_IGNORED_SEGMENTS:]:
            if abs(segment.x - x) + abs(segment.y - y) <= g:
                return True
        return False

    def check_close_call(self, head: Point, current_time: Optional[float] = None) -> bool:
        if current_time is None:
            current_time = self.now
        if (
            self.last_close_call_time is not None
            and current_time - self.last_close_call_time < CLOSE_CALL_DEBOUNCE_MS
        ):
            return False
        if not self._is_near_miss(head):
            return False

        self.close_calls += 1
        self.last_close_call_time = current_time
        self._emit(CloseCall(count=self.close_calls, score=self.score))
        return True

    # ------------------------------------------------------------------
    # Boss subsystem
    # ------------------------------------------------------------------
    def _boss_should_spawn(self) -> bool:
        if self.score > BOSS_SPAWN_SCORE_THRESHOLD:
            return True
        return bool(self.active_challenge and self.active_challenge.goal_type == BOSS_ESCAPE)

    def spawn_boss(self, current_time: Optional[float] = None):
        if current_time is None:
            current_time = self.now
        row = self.grid.rows // 2
        head = Point(self.width - BOSS_SPAWN_OFFSET_CELLS * self.grid_size, row * self.grid_size)
        # Body trails to the right of a left-moving head
        positions = [self.grid.offset(head, i, 0) for i in range(BOSS_INITIAL_LENGTH)]
        self.boss = Snake(positions, direction=LEFT)
        self.last_boss_move_time = current_time
        logger.info("Boss spawned at %s (score %d)", head, self.score)
        self._emit(BossSpawned(head=head))

    def _boss_direction(self) -> str:
        hx, hy = self.boss.head
        fx, fy = self.food
        if fx < hx:
            return LEFT
        if fx > hx:
            return RIGHT
        if fy < hy:
            return UP
        if fy > hy:
            return DOWN
        return self.boss.direction

    def _move_boss(self):
        direction = self._boss_direction()
        self.boss.direction = self.boss.next_direction = direction
        dx, dy = MOVE_VECTORS[direction]
        new_head = self.grid.offset(self.boss.head, dx, dy)
        self.boss.advance(new_head)

        half = self.grid_size / 2
        if abs(new_head.x - self.food[0]) < half and abs(new_head.y - self.food[1]) < half:
            stolen = self.food
            self.food = self.spawn_food()
            logger.debug("Boss stole the food at %s", stolen)
            self._emit(FoodStolen(position=stolen))

    def _update_boss(self, current_time: float):
        if self.boss is None:
            if not self._boss_should_spawn():
                return
            self.spawn_boss(current_time)
        elif current_time - self.last_boss_move_time >= BOSS_MOVE_INTERVAL_MS:
            self.last_boss_move_time = current_time
            self._move_boss()

        if self.phase == PLAYING and self.boss.occupies(self.snake.head):
            self.handle_death(BOSS)

    def __repr__(self):
        return f"<SnakeGame phase={self.phase}, score={self.score}, length={len(self.snake)}>"


# -------------------------------
# Simulation Function
# -------------------------------

def run_simulation(game_params: argparse.Namespace) -> Dict:
    """
    Runs a headless session on a simulated clock with an autopilot player.

    Args:
        game_params: An object (like argparse.Namespace) containing game settings
                     (width, height, grid_size, max_frames, seed, theme, player).

    Returns:
        A dictionary summarizing the session (score, death reason, challenges, ...).
    """
    # Imported here so the engine module stays importable without the service layer
    from players import get_player_class
    from services.analytics import AnalyticsService
    from services.game_session import GameSession
    from services.objective_generator import create_objective_generator

    seed = getattr(game_params, 'seed', None)
    game = SnakeGame(
        width=game_params.width,
        height=game_params.height,
        grid_size=game_params.grid_size,
        rng=random.Random(seed),
    )
    session = GameSession(
        game,
        create_objective_generator(rng=random.Random(seed)),
        analytics=AnalyticsService(),
        theme=getattr(game_params, 'theme', DEFAULT_THEME),
    )
    player = get_player_class(getattr(game_params, 'player', None))()

    frame_ms = 1000 / FRAMES_PER_SECOND
    now = 0.0
    frames = 0
    session.start(now)
    try:
        while game.phase == PLAYING and frames < game_params.max_frames:
            if now - game.last_move_time >= game.game_speed:
                game.change_direction(player.get_move(game.get_current_state()))
            session.tick(now)
            now += frame_ms
            frames += 1
    finally:
        session.close()

    summary = session.summary()
    summary["frames"] = frames
    summary["simulated_ms"] = round(now)
    summary["player"] = player.name
    return summary


# -------------------------------
# Example Usage (Main Entry Point)
# -------------------------------
def main():
    parser = argparse.ArgumentParser(
        description="Run a headless snake arcade session with an autopilot player."
    )
    parser.add_argument("--width", type=int, required=False, default=DEFAULT_BOARD_WIDTH,
                        help="Board width in pixels")
    parser.add_argument("--height", type=int, required=False, default=DEFAULT_BOARD_HEIGHT,
                        help="Board height in pixels")
    parser.add_argument("--grid-size", dest="grid_size", type=int, required=False,
                        default=DEFAULT_GRID_SIZE, help="Cell size in pixels")
    parser.add_argument("--max-frames", dest="max_frames", type=int, required=False,
                        default=FRAMES_PER_SECOND * 120, help="Stop after this many frames")
    parser.add_argument("--seed", type=int, required=False, default=None,
                        help="Seed for food, power-up and challenge randomness")
    parser.add_argument("--theme", type=str, required=False, default=DEFAULT_THEME,
                        choices=THEMES, help="Theme used for trivia requests")
    parser.add_argument("--player", type=str, required=False, default="greedy",
                        help="Autopilot variant (random, greedy)")
    parser.add_argument("--log-level", dest="log_level", type=str, required=False,
                        default="INFO", help="Logging level")

    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    result = run_simulation(args)

    print("\nSimulation Result Summary:")
    print(json.dumps(result, indent=2))


if __name__ == "__main__":
    main()
