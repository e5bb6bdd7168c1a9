import random

# Participants edit only this file.
# Implement the decide_move() method to control your agent.
# Valid moves: 'UP', 'DOWN', 'LEFT', 'RIGHT'

class Agent:
    def __init__(self, name: str):
        self.name = name

    def decide_move(self, game_state) -> str:
        """
        Decide next move based on the provided game_state (GameState dataclass).
        Accessible fields:
            - game_state.grid_width, game_state.grid_height (int)
            - game_state.grid (numpy array [y, x]; 0 = free, otherwise a player id)
            - game_state.players (tuple of Player(name, player_id, position))
            - game_state.you (your agent's name, str)
            - game_state.turn (int)
            - game_state.max_turns (int)
        Helpers:
            - game_state.is_inside_grid((x, y)) -> bool
            - game_state.get_grid_cell((x, y)) -> int
        Positions are (x, y); UP decreases y.
        Return one of: 'UP', 'DOWN', 'LEFT', 'RIGHT'
        Raise decision_engine.NoLegalMove when boxed in to leave the game.
        """
        # STARTER LOGIC (random). Replace with your strategy!
        return random.choice(['UP', 'DOWN', 'LEFT', 'RIGHT'])
