"""Main entry point for EcoSim.

Runs the simulation in a window, or headless with --headless.
"""

import argparse
import logging
from typing import List, Optional

from ecosim.config import SimConfig
from ecosim.core.engine import Engine

def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="ecosim", description="Day/night farm ecosystem simulation.")
    parser.add_argument("--headless", action="store_true", help="run without a window")
    parser.add_argument("--seed", type=int, default=None, help="random seed for scenery and behavior")
    parser.add_argument("--ticks", type=int, default=None, help="stop after this many frames")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args(argv)

def main(argv: Optional[List[str]] = None) -> None:
    """Initializes and runs the EcoSim engine."""
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    config = SimConfig(headless_mode=args.headless)
    if args.seed is not None:
        config.seed = args.seed

    print("Initializing EcoSim Engine...")
    engine = Engine(config)
    print("Starting EcoSim Engine...")
    try:
        engine.run(max_ticks=args.ticks)
    except KeyboardInterrupt:
        print("Interrupted, stopping...")
    finally:
        engine.shutdown()
    print("EcoSim Engine finished.")

if __name__ == "__main__":
    main()
