import logging
import sys


def setup_logging(level: int = logging.INFO) -> None:
    """
    Configure the root logger for the command-line entry point.
    - Timestamped messages on stdout.
    - Our package at the requested level, pygame kept quiet.
    """
    logging.basicConfig(
        level=level,
        format="%(asctime)s.%(msecs)03d [%(levelname)s] %(name)s:%(lineno)d | %(message)s",
        datefmt="%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
    logging.getLogger("quadworld").setLevel(level)
    logging.getLogger("pygame").setLevel(logging.WARNING)
