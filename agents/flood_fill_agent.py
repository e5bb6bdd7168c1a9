import random
from typing import Optional

from decision_engine import Direction, Position, decide_move, find_player_position


class Agent:
    """Light-cycle bot that always heads for the biggest open region.

    The tie-break generator is private to the instance. Without a seed it is
    seeded from OS entropy, so two runs rarely play the same game.
    """

    def __init__(self, name: str, seed: Optional[int] = None, rng: Optional[random.Random] = None):
        self.name = name
        self.rng = rng if rng is not None else random.Random(seed)
        self.position: Optional[Position] = None

    def decide_move(self, game_state) -> Direction:
        # Replaced every tick; never carried over from the previous snapshot.
        self.position = find_player_position(game_state.players, self.name)
        return decide_move(game_state, self.position, self.rng)
