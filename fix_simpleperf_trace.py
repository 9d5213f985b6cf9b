#!/usr/bin/env python3

import argparse
import logging
import sys

from simpleperf_cleanup.errors import TraceFixError
from simpleperf_cleanup.fix_trace import fix_detached_main_samples

logger = logging.getLogger("simpleperf_cleanup")


def destination_path(source):
    """Inserts `-fixed` before the extension of `source`, or appends it."""
    before_extension, dot, extension = source.rpartition(".")
    if not dot:
        return f"{source}-fixed"
    return f"{before_extension}-fixed.{extension}"


def init_logging(level=logging.INFO):
    """Sends the progress messages to stdout."""
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)


def run(filename):
    return fix_detached_main_samples(filename, destination_path(filename))


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Reattach detached main thread samples of a simpleperf trace."
    )
    parser.add_argument("filename", type=str, help="The filename of the simpleperf trace")
    args = parser.parse_args(argv)

    init_logging()
    try:
        run(args.filename)
    except (TraceFixError, OSError) as e:
        logger.error("Failed to fix %s: %s", args.filename, e)
        sys.exit(1)


if __name__ == "__main__":
    main()
