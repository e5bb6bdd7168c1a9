from dataclasses import dataclass
from typing import Dict, Tuple, List, Set, Optional
import logging
import random

import numpy as np

from decision_engine import FREE, MOVE_VECTORS, Direction, Position

logger = logging.getLogger(__name__)

VALID_MOVES = {d.value for d in Direction}


@dataclass(frozen=True)
class Player:
    name: str
    player_id: int
    position: Position


@dataclass(frozen=True)
class GameState:
    grid_width: int
    grid_height: int
    grid: np.ndarray                # occupancy, shape (height, width), 0 = free
    players: Tuple[Player, ...]     # alive players
    you: str
    turn: int
    max_turns: int

    def is_inside_grid(self, position: Position) -> bool:
        x, y = position
        return 0 <= x < self.grid_width and 0 <= y < self.grid_height

    def get_grid_cell(self, position: Position) -> int:
        x, y = position
        return int(self.grid[y, x])


class CyclesArena:
    """
    Turn-based light-cycle arena with simultaneous moves.

    Rules:
    - Every agent rides a cycle that leaves a solid trail behind it; each cell
      it has ever occupied stays marked with its player id.
    - Each turn, every ALIVE agent chooses one of: UP, DOWN, LEFT, RIGHT.
    - Leaving the grid eliminates the agent.
    - Moving onto any trail cell (including its own) eliminates the agent.
    - If multiple agents move into the same cell, all of them are eliminated.
    - An agent that sends no move (or an unknown one) is eliminated.
    - Score is the number of cells claimed. Trails of eliminated agents stay.
    """
    def __init__(
        self,
        grid_width: int = 20,
        grid_height: int = 20,
        agents: Optional[List[str]] = None,
        max_turns: int = 200,
        seed: Optional[int] = None,
    ):
        if grid_width <= 0 or grid_height <= 0:
            raise ValueError(f"grid must be at least 1x1, got {grid_width}x{grid_height}")
        self.grid_width = grid_width
        self.grid_height = grid_height
        self.agent_names = list(agents or [])
        self.max_turns = max_turns
        self.rng = random.Random(seed)

        # dynamic state
        self.turn = 0
        self.grid = np.zeros((grid_height, grid_width), dtype=int)
        self.player_ids: Dict[str, int] = {}
        self.positions: Dict[str, Position] = {}
        self.alive: Set[str] = set()
        self.retired: Set[str] = set()
        self.scores: Dict[str, int] = {}
        self.eliminated_at: Dict[str, int] = {}

    # ----------------- Initialization -----------------
    def reset(self, agents: List[str]):
        if len(agents) > self.grid_width * self.grid_height:
            raise ValueError(f"{len(agents)} agents do not fit on a {self.grid_width}x{self.grid_height} grid")
        self.agent_names = list(agents)
        self.turn = 0
        self.grid = np.zeros((self.grid_height, self.grid_width), dtype=int)
        self.player_ids = {a: i + 1 for i, a in enumerate(self.agent_names)}
        self.alive = set(self.agent_names)
        self.retired = set()
        self.eliminated_at = {}
        self.scores = {a: 1 for a in self.agent_names}

        # place agents in distinct random free cells
        self.positions = {}
        for a in self.agent_names:
            pos = self._random_free_cell()
            self.positions[a] = pos
            self.grid[pos[1], pos[0]] = self.player_ids[a]

    def _random_free_cell(self) -> Position:
        while True:
            x = self.rng.randrange(self.grid_width)
            y = self.rng.randrange(self.grid_height)
            if self.grid[y, x] == FREE:
                return (x, y)

    def _inside(self, position: Position) -> bool:
        x, y = position
        return 0 <= x < self.grid_width and 0 <= y < self.grid_height

    # ----------------- Turn Mechanics -----------------
    def retire(self, name: str):
        """Mark an agent that stopped playing; it is eliminated on the next step."""
        if name in self.alive:
            self.retired.add(name)

    def step(self, moves: Dict[str, str]) -> Dict[str, str]:
        """
        Apply one simultaneous-move step.
        'moves' should contain a move for each currently ALIVE agent.
        Returns a dict of final outcomes for agents this turn:
            'OK', 'ELIMINATED_NO_MOVE', 'ELIMINATED_WALL',
            'ELIMINATED_TRAIL', 'ELIMINATED_COLLISION'
        """
        self.turn += 1
        outcomes: Dict[str, str] = {a: "OK" for a in self.agent_names}
        eliminated: Set[str] = set()

        # 1) Missing, unknown or retired moves
        intended: Dict[str, Position] = {}
        for a in sorted(self.alive):
            mv = moves.get(a, None)
            if a in self.retired or mv not in VALID_MOVES:
                eliminated.add(a)
                outcomes[a] = "ELIMINATED_NO_MOVE"
                continue
            x, y = self.positions[a]
            dx, dy = MOVE_VECTORS[Direction(mv)]
            intended[a] = (x + dx, y + dy)

        # 2) Walls and trails
        for a, cell in intended.items():
            if not self._inside(cell):
                eliminated.add(a)
                outcomes[a] = "ELIMINATED_WALL"
            elif self.grid[cell[1], cell[0]] != FREE:
                eliminated.add(a)
                outcomes[a] = "ELIMINATED_TRAIL"

        # 3) Head-on collisions: same free target cell by multiple agents
        cell_to_agents: Dict[Position, List[str]] = {}
        for a, cell in intended.items():
            if a in eliminated:
                continue
            cell_to_agents.setdefault(cell, []).append(a)
        for cell, agents in cell_to_agents.items():
            if len(agents) > 1:
                for a in agents:
                    eliminated.add(a)
                    outcomes[a] = "ELIMINATED_COLLISION"

        # 4) Survivors advance and extend their trail
        survivors = set(self.alive) - eliminated
        for a in survivors:
            cell = intended[a]
            self.positions[a] = cell
            self.grid[cell[1], cell[0]] = self.player_ids[a]
            self.scores[a] += 1

        # 5) Mark eliminated
        for a in eliminated:
            self.eliminated_at[a] = self.turn
            logger.debug("Turn %d: %s %s", self.turn, a, outcomes[a])
        self.alive -= eliminated
        self.retired -= eliminated

        return outcomes

    # ----------------- State Exposure -----------------
    def get_game_state_for(self, you: str) -> GameState:
        """Return a read-only snapshot of the game for agent 'you'."""
        grid = self.grid.copy()
        grid.setflags(write=False)
        players = tuple(
            Player(name=a, player_id=self.player_ids[a], position=self.positions[a])
            for a in self.agent_names
            if a in self.alive
        )
        return GameState(
            grid_width=self.grid_width,
            grid_height=self.grid_height,
            grid=grid,
            players=players,
            you=you,
            turn=self.turn,
            max_turns=self.max_turns,
        )

    # ----------------- Utility -----------------
    def survival_turns(self, name: str) -> int:
        return self.eliminated_at.get(name, self.turn)

    def is_over(self) -> bool:
        if self.turn >= self.max_turns:
            return True
        if not self.alive:
            return True
        if len(self.agent_names) > 1 and len(self.alive) <= 1:
            return True
        return False

    def winner(self):
        """Winner = alive agent with the longest trail; if all dead, longest survivor(s)."""
        if len(self.alive) > 0:
            alive_scores = {a: self.scores[a] for a in self.alive}
            max_score = max(alive_scores.values())
            return sorted(a for a, s in alive_scores.items() if s == max_score)
        elif not self.eliminated_at:
            return []
        else:
            last_turn = max(self.eliminated_at.values())
            return sorted(a for a, t in self.eliminated_at.items() if t == last_turn)
