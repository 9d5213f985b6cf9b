import logging
import os

from simpleperf_cleanup.dto import FixStats
from simpleperf_cleanup.main_thread import read_main_thread_metadata
from simpleperf_cleanup.parse_bin_trace import load_trace, parse_bin_trace, read_header
from simpleperf_cleanup.stitch import stitch_frames
from simpleperf_cleanup.trace_writer import TraceWriter

logger = logging.getLogger(__name__)


def fix_detached_main_samples(source, destination):
    """Writes to `destination` a copy of the `source` trace where main thread
    samples whose call chain doesn't reach the main thread root are
    reattached to it.

    Returns the counters of the fix. On failure, no destination file is left.
    """
    logger.info("Copying %s to %s", source, destination)
    buffer = load_trace(source)
    version, _ = read_header(buffer)
    metadata = read_main_thread_metadata(parse_bin_trace(buffer))

    if os.path.exists(destination):
        logger.info("Deleting pre existing %s", destination)
        os.remove(destination)

    stats = FixStats()
    with TraceWriter(destination, version) as writer:
        for item in stitch_frames(parse_bin_trace(buffer), metadata, stats):
            writer.add(item)

    logger.info(
        "Done fixing trace, fixed %d / %d main thread samples",
        stats.broken_samples,
        stats.main_thread_samples,
    )
    return stats
