"""
Command line entry point.

Usage: monksearch <graph_file> [-bf] [-linear] [-replay] [-export] [-d]
                               [-pos <positions_file>] [-load <strategy_json>]

    -bf       exhaustive search (simple selector, exact dedup, linear outer search)
    -linear   linear instead of binary search over the pursuer count
    -replay   open the interactive replay once a strategy is found
    -export   cache the strategy as JSON and the verifier states as .npz
    -d        debug logging
    -pos      'x,y' node positions for the replay layout
    -load     skip the search and check a strategy cached by -export
"""

import os
import sys
import time
import logging

from .config import OuterSearch, SolverConfig
from .errors import MonkSearchError
from .io import export_states, export_strategy, load_graph, load_positions, load_strategy
from .solver import Solver
from .verifier import Verifier

FLAGS = {"-bf", "-linear", "-replay", "-export", "-d"}
OPTIONS = {"-pos", "-load"}


def _usage():
    print("Usage: monksearch <graph_file> [-bf] [-linear] [-replay] [-export] [-d]")
    print("                  [-pos <positions_file>] [-load <strategy_json>]")
    print("Example: monksearch graphs/ring10.txt -linear")
    print("Example: monksearch graphs/ring10.txt -load cached_solutions/ring10_1pursuers_strategy.json -replay")


def _parse_args(args):
    """Split argv into positional files, flags and valued options. Returns None on bad input."""
    files, flags, options = [], set(), {}
    i = 0
    while i < len(args):
        arg = args[i]
        if arg in OPTIONS:
            if i + 1 >= len(args):
                print(f"Error: {arg} needs a file name.")
                return None
            options[arg] = args[i + 1]
            i += 2
            continue
        if arg.startswith('-'):
            if arg not in FLAGS:
                print(f"Error: Unknown option {arg}.")
                return None
            flags.add(arg)
        else:
            files.append(arg)
        i += 1
    if len(files) != 1:
        return None
    return files[0], flags, options


def main(argv=None):
    args = sys.argv[1:] if argv is None else list(argv)
    parsed = _parse_args(args)
    if parsed is None:
        _usage()
        sys.exit(1)
    filename, flags, options = parsed

    logging.basicConfig(
        level=logging.DEBUG if "-d" in flags else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    for path in [filename] + list(options.values()):
        if not os.path.exists(path):
            print(f"Error: File '{path}' not found.")
            print("Please check the path and try again.")
            sys.exit(1)

    try:
        graph = load_graph(filename)
        positions = None
        if "-pos" in options:
            positions = load_positions(options["-pos"], graph.vertex_count)

        start_time = time.time()
        if "-load" in options:
            print(f"Loading cached strategy from: {options['-load']}")
            strategy = load_strategy(options["-load"])
        else:
            overrides = {}
            if "-linear" in flags:
                overrides["outer_search"] = OuterSearch.LINEAR
            if "-bf" in flags:
                config = SolverConfig.brute_force(**overrides)
            else:
                config = SolverConfig.from_env(**overrides)
            strategy = Solver(config).solve(graph)
        elapsed = time.time() - start_time

        print("\n--- RESULT ---")
        print(strategy)
        print(f"Number of pursuers: {strategy.pursuer_count}")
        print(f"Solution length: {strategy.length}")

        winning = None
        verifier = Verifier(graph)
        if strategy.length:
            winning = verifier.check(strategy.pursuer_count, strategy.length, strategy.days).winning
            print(f"Win: {winning}")
            if not winning:
                print(verifier.states_string())
        print(f"--- Finished in {elapsed:.4f} seconds ---")
    except (MonkSearchError, ValueError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    if "-export" in flags and strategy.length:
        json_file = export_strategy(strategy, filename, verified=winning)
        states_file = export_states(verifier.states, filename)
        print(f"Success! Strategy cached to: {json_file}")
        print(f"Success! Verifier states saved to: {states_file}")

    if "-replay" in flags and strategy.length:
        # Imported here so that solving never needs a display backend
        from .replay import replay

        print("Launching interactive replay...")
        replay(graph, strategy, pos_dict=positions)

    return 0


if __name__ == "__main__":
    sys.exit(main())
