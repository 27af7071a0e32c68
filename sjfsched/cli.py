#!/usr/bin/env python3
"""
sjfsched Command-Line Interface.

Starts the process manager and reads commands from standard input:
- run <path> [args...] <runtime>: Spawn a worker with a runtime budget
- stop <pid>: Suspend a worker
- resume <pid>: Make a stopped worker schedulable again
- kill <pid>: Terminate a worker
- list: Show "<pid>, <status>" for every known worker
- exit: Terminate all workers and quit
"""

import argparse
import logging
import math
import os
import sys

from decologr import Logger as log

from sjfsched.core.clock import RuntimeClock
from sjfsched.core.errors import SetupFailed
from sjfsched.core.scheduler import SjfScheduler
from sjfsched.core.service import DEFAULT_POLL_INTERVAL, ManagerService
from sjfsched.core.table import MAX_PROCESSES, ProcessTable
from sjfsched.source import DEFAULT_PROMPT, ConsoleCommandSource


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="sjfsched - Preemptive Shortest-Job-First process manager",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        default=os.getenv("SJFSCHED_POLL_INTERVAL", str(DEFAULT_POLL_INTERVAL)),
        help="Seconds between control loop passes",
    )
    parser.add_argument(
        "--max-processes",
        type=int,
        default=os.getenv("SJFSCHED_MAX_PROCESSES", str(MAX_PROCESSES)),
        help="Capacity of the process table",
    )
    parser.add_argument(
        "--prompt",
        default=os.getenv("SJFSCHED_PROMPT", DEFAULT_PROMPT),
        help="Prompt shown on interactive terminals",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "--verbose", "-v", action="store_true", help="Log scheduling decisions"
    )
    verbosity.add_argument(
        "--quiet", "-q", action="store_true", help="Only log errors"
    )
    return parser


def main(argv=None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    if args.quiet:
        logging.getLogger().setLevel(logging.ERROR)
    elif args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    else:
        logging.getLogger().setLevel(logging.WARNING)

    if args.max_processes < 1:
        print("Error: --max-processes must be at least 1", file=sys.stderr)
        sys.exit(2)
    if args.poll_interval < 0 or not math.isfinite(args.poll_interval):
        print(
            "Error: --poll-interval must be a non-negative number",
            file=sys.stderr,
        )
        sys.exit(2)

    scheduler = SjfScheduler(
        table=ProcessTable(capacity=args.max_processes),
        clock=RuntimeClock(),
    )
    source = ConsoleCommandSource(prompt=args.prompt)
    service = ManagerService(
        source,
        scheduler=scheduler,
        poll_interval=args.poll_interval,
    )

    try:
        source.start()
        service.start()
    except SetupFailed as ex:
        log.error(f"Process manager setup failed: {ex}")
        print(f"Error: {ex}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    main()
