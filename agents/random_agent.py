import random

from decision_engine import NoLegalMove, find_player_position, valid_moves


class Agent:
    def __init__(self, name: str):
        self.name = name

    def decide_move(self, game_state):
        # Any move that does not crash right away
        my_pos = find_player_position(game_state.players, self.name)
        good = valid_moves(game_state, my_pos)
        if not good:
            raise NoLegalMove(my_pos)
        return random.choice(good)
