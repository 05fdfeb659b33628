import argparse
import logging
import sys

from .config import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_SPEED, DEFAULT_START_NODE
from .engine import trace
from .graph import sample_graph


def format_trace(graph, start_node):
    lines = []
    for i, snap in enumerate(trace(graph, start_node)):
        current = snap.current if snap.current is not None else "-"
        lines.append(
            f"step={i}; current={current}; stack={list(snap.stack)}; visited={list(snap.visited)}"
        )
    lines.append(f"done; visited={list(snap.visited)}")
    return lines


def build_parser():
    parser = argparse.ArgumentParser(
        prog="dfs-stepper",
        description="Step-by-step depth-first search visualization (mark visited on pop).",
    )
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("--start", default=DEFAULT_START_NODE, help="start node id")
    parser.add_argument("--speed", type=int, default=DEFAULT_SPEED,
                        help="milliseconds between automatic steps")
    parser.add_argument("--debug", action="store_true", help="run Dash in debug mode")
    parser.add_argument("--log-level", default=None,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--trace", action="store_true",
                        help="print the run on the sample graph instead of serving the app")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    level = args.log_level or ("DEBUG" if args.debug else "WARNING")
    logging.basicConfig(level=getattr(logging, level), format="%(levelname)s: %(message)s")

    graph = sample_graph()
    if args.trace:
        for line in format_trace(graph, args.start):
            print(line)
        return 0

    # imported late so --trace works without the web stack loaded
    from .app import create_app

    app = create_app(graph, start_node=args.start, speed=args.speed)
    app.run(host=args.host, port=args.port, debug=args.debug)
    return 0


if __name__ == "__main__":
    sys.exit(main())
