"""
Tournament mode for the light-cycle grid.
Runs multiple rounds with different random seeds and reports how long each
agent survived and how much of the grid it claimed on average.
"""

import argparse
import logging
import random
import numpy as np
from statistics import mean
from cycles_arena import CyclesArena
from run_battle import collect_moves, load_agents

logger = logging.getLogger(__name__)


def run_single_match(agent_objs, agent_names, width=20, height=20, turns=200, seed=None):
    """Run one game and return (survival turns, trail lengths) per agent."""
    arena = CyclesArena(
        grid_width=width,
        grid_height=height,
        agents=agent_names,
        max_turns=turns,
        seed=seed,
    )
    arena.reset(agent_names)
    rng = random.Random(seed)

    while not arena.is_over():
        arena.step(collect_moves(arena, agent_objs, rng))

    survival = {n: arena.survival_turns(n) for n in agent_names}
    logger.debug("Seed %s finished on turn %d, winners %s", seed, arena.turn, arena.winner())
    return survival, dict(arena.scores)


def run_tournament(
    agents_dir="agents",
    rounds=10,
    width=20,
    height=20,
    turns=200,
):
    """Run several seeded matches and print averaged leaderboard."""
    agent_objs = load_agents(agents_dir)
    if not agent_objs:
        print("❌ No agents found in:", agents_dir)
        return None

    agent_names = list(agent_objs)
    survival_log = {name: [] for name in agent_names}
    trail_log = {name: [] for name in agent_names}

    print(f"🏁 Starting tournament: {len(agent_names)} agents × {rounds} rounds\n")
    for round_idx in range(1, rounds + 1):
        seed = round_idx
        survival, trails = run_single_match(agent_objs, agent_names, width, height, turns, seed)
        print(f" Round {round_idx:2d} | Seed {seed:4d} |", end=" ")
        for n in agent_names:
            print(f"{n}:{survival[n]:3d}", end="  ")
            survival_log[n].append(survival[n])
            trail_log[n].append(trails[n])
        print("")

    print("\n📊 Average survival (turns) and trail length across all rounds:")
    leaderboard = sorted(
        [(n, mean(survival_log[n]), mean(trail_log[n])) for n in agent_names],
        key=lambda x: (x[1], x[2]),
        reverse=True,
    )
    print("-" * 48)
    for rank, (name, avg_turns, avg_trail) in enumerate(leaderboard, start=1):
        print(f"{rank:2d}. {name:18s}  turns={avg_turns:6.2f}  trail={avg_trail:6.2f}")
    print("-" * 48)

    top = leaderboard[0][0] if leaderboard else None
    if top:
        print(f"🏆 Winner of tournament: {top}")
    else:
        print("No winner detected.")
    return leaderboard


def main(argv=None):
    parser = argparse.ArgumentParser(description="Run a seeded light-cycle tournament.")
    parser.add_argument("--agents-dir", default="agents", help="Directory with agent .py files.")
    parser.add_argument("--rounds", type=int, default=10, help="Number of matches.")
    parser.add_argument("--width", type=int, default=20, help="Grid width.")
    parser.add_argument("--height", type=int, default=20, help="Grid height.")
    parser.add_argument("--turns", type=int, default=200, help="Max number of turns per match.")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, ...).")
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    random.seed(42)
    np.random.seed(42)
    return run_tournament(
        agents_dir=args.agents_dir,
        rounds=args.rounds,
        width=args.width,
        height=args.height,
        turns=args.turns,
    )


if __name__ == "__main__":
    main()
