"""
Main entry point for QuadWorld
"""
import argparse
import logging
import os

from quadworld.constants import WorldSettings
from quadworld.logging_setup import setup_logging
from quadworld.store import Store


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="quadworld", description="Grow grass on an endless tile world")
    parser.add_argument("--root", default=os.path.join(os.path.expanduser("~"), ".quadworld", "qtree"),
                        help="directory holding the world")
    parser.add_argument("--seed", type=int, default=None, help="random seed")
    parser.add_argument("--generate", type=int, metavar="N", default=None,
                        help="place N grass cells without opening a window")
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug messages")
    return parser.parse_args(argv)


def main(argv=None):
    """Open a world and either show it or grow it headless"""
    args = parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)
    store = Store(args.root, WorldSettings(seed=args.seed))

    if args.generate is not None:
        store.get_block(store.start_path)
        for _ in range(args.generate):
            if store.generate_vertex() is None:
                break
        return

    # Imported here so headless runs don't need a display
    from quadworld.viewer import Viewer
    Viewer(store).run()


if __name__ == "__main__":
    main()
