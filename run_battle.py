import importlib.util
import logging
import os
import shutil
import sys
import random
from typing import Dict, List
import argparse

import numpy as np
import matplotlib.pyplot as plt
import matplotlib.animation as animation
import matplotlib.patches as mpatches
import matplotlib.colors as mcolors

from cycles_arena import CyclesArena
from decision_engine import Direction, NoLegalMove

logger = logging.getLogger(__name__)

MOVES = [d.value for d in Direction]


# -------------------- Agent Loader --------------------
def load_agent_from_file(filepath: str, name: str):
    spec = importlib.util.spec_from_file_location(name, filepath)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)  # type: ignore
    AgentClass = getattr(module, "Agent", None)
    if AgentClass is None:
        raise ValueError(f"No Agent class found in {filepath}")
    return AgentClass(name)


def find_agent_files(agents_dir: str) -> List[str]:
    py_files = []
    for fname in os.listdir(agents_dir):
        if fname.endswith(".py") and not fname.startswith("_"):
            py_files.append(os.path.join(agents_dir, fname))
    py_files.sort()
    return py_files


# -------------------- Turn Loop --------------------
def collect_moves(arena: CyclesArena, agent_objs, rng=random) -> Dict[str, str]:
    """
    Ask every alive agent for its move this turn.
    An agent raising NoLegalMove is boxed in and gets retired from the arena.
    Any other agent failure is logged and replaced by a random move.
    """
    moves = {}
    for name, agent in agent_objs.items():
        if name not in arena.alive or name in arena.retired:
            continue
        gs = arena.get_game_state_for(name)
        try:
            mv = agent.decide_move(gs)
        except NoLegalMove:
            logger.info("%s: no legal move on turn %d, leaving the game", name, arena.turn)
            arena.retire(name)
            continue
        except Exception:
            logger.warning("%s: decide_move failed, playing a random move", name, exc_info=True)
            mv = rng.choice(MOVES)
        moves[name] = str(mv)
    return moves


# -------------------- Visualization Helpers --------------------
def make_board_image(arena: CyclesArena) -> np.ndarray:
    """
    Produce a 2D array of IDs:
        0    = empty cell
        1..N = trail of agent i
        N+1  = head of an alive agent
    """
    board = arena.grid.copy()
    head_value = len(arena.agent_names) + 1
    for name in arena.alive:
        x, y = arena.positions[name]
        board[y, x] = head_value
    return board


# -------------------- Animation --------------------
def animate_battle(arena: CyclesArena, agent_objs, fps=6, seed=None):
    random.seed(seed)
    name_to_id = dict(arena.player_ids)  # 1..N
    N = len(name_to_id)

    fig, ax = plt.subplots(figsize=(6, 6))
    plt.subplots_adjust(top=0.88, bottom=0.15)

    # ---- Unified color palette ----
    base_cmap = plt.colormaps["Set1"]
    agent_colors = base_cmap(np.linspace(0, 1, N, endpoint=False))  # N trail colors
    background = np.array([[0.93, 0.93, 0.93, 1.0]])  # light gray
    head_color = np.array([[0.1, 0.1, 0.1, 1.0]])  # near black
    # 0=bg, 1..N=trails, N+1=heads
    colors = np.vstack([background, agent_colors, head_color])
    cmap = mcolors.ListedColormap(colors)
    bounds = np.arange(-0.5, (N + 1) + 1.5, 1)  # integer bins
    norm = mcolors.BoundaryNorm(bounds, cmap.N)

    # ---- Initial grid ----
    img = ax.imshow(
        make_board_image(arena),
        cmap=cmap,
        norm=norm,
        interpolation="nearest",
        animated=True,
    )
    ax.set_xticks(np.arange(-0.5, arena.grid_width, 1))
    ax.set_yticks(np.arange(-0.5, arena.grid_height, 1))
    ax.set_xticklabels([])
    ax.set_yticklabels([])
    ax.grid(True, which="both", linestyle="-", linewidth=0.5)

    # ---- Legend ----
    patches = []
    for name, i in name_to_id.items():
        patches.append(mpatches.Patch(color=colors[i], label=name))
    patches.append(mpatches.Patch(color=colors[N + 1], label="Head"))
    ax.legend(
        handles=patches,
        loc="upper right",
        bbox_to_anchor=(1.35, 1.0),
        fontsize=9,
        frameon=False,
    )

    # ---- Scoreboard ----
    score_text = ax.text(
        0.02, -0.08, "", transform=ax.transAxes, ha="left", va="top", fontsize=10
    )

    # ---- Frame update ----
    def update_frame(_):
        if arena.is_over():
            return (img, score_text)

        arena.step(collect_moves(arena, agent_objs))

        img.set_data(make_board_image(arena))

        alive_names = sorted(list(arena.alive))
        scoreboard = " | ".join(
            f"{n}:{arena.scores.get(n,0)}" for n in sorted(arena.agent_names)
        )
        ax.set_title(
            f"Turn {arena.turn}/{arena.max_turns}   Alive: {len(alive_names)}   {', '.join(alive_names)}",
            fontsize=11,
        )
        score_text.set_text(f"Trail length: {scoreboard}")
        return (img, score_text)

    interval = int(1000 / max(1, fps))
    ani = animation.FuncAnimation(
        fig, update_frame, interval=interval, blit=False, cache_frame_data=False
    )

    plt.tight_layout()
    plt.show()
    return ani


# -------------------- Main --------------------
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run a light-cycle battle on the grid.")
    parser.add_argument("--agents-dir", default="agents", help="Directory with agent .py files.")
    parser.add_argument("--width", type=int, default=20, help="Grid width.")
    parser.add_argument("--height", type=int, default=20, help="Grid height.")
    parser.add_argument("--turns", type=int, default=200, help="Max number of turns.")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for the arena.")
    parser.add_argument("--fps", type=int, default=6, help="Animation frames per second.")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, ...).")
    return parser


def load_agents(agents_dir: str):
    agent_objs = {}
    for fp in find_agent_files(agents_dir):
        stem = os.path.splitext(os.path.basename(fp))[0]
        agent_objs[stem] = load_agent_from_file(fp, stem)
    return agent_objs


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    agents_dir = args.agents_dir
    if not os.path.isdir(agents_dir):
        print(f"Creating '{agents_dir}' directory with an example agent_template.py")
        os.makedirs(agents_dir, exist_ok=True)
        template = os.path.join(os.path.dirname(os.path.abspath(__file__)), "agent_template.py")
        shutil.copy(template, os.path.join(agents_dir, "agent_template.py"))

    if not find_agent_files(agents_dir):
        print("No agent .py files found in the agents directory.")
        print("Add one or more agent files implementing class Agent(name) with decide_move(game_state).")
        sys.exit(1)

    # Load agents dynamically
    agent_objs = load_agents(agents_dir)
    agent_names = list(agent_objs)

    # Initialize arena
    arena = CyclesArena(
        grid_width=args.width,
        grid_height=args.height,
        agents=agent_names,
        max_turns=args.turns,
        seed=args.seed,
    )
    arena.reset(agent_names)

    ani = animate_battle(arena, agent_objs, fps=args.fps, seed=args.seed)

    print("Winner(s):", arena.winner())
    print("Trail lengths:", arena.scores)
    print("Survived turns:", {n: arena.survival_turns(n) for n in agent_names})


if __name__ == "__main__":
    main()
