import logging

from simpleperf_cleanup.dto import MainThreadMetadata, RecordKind
from simpleperf_cleanup.errors import (
    EmptyCallChainError,
    MultipleOrNoMainThreadError,
    NoMainThreadSampleError,
)

logger = logging.getLogger(__name__)


def read_main_thread_metadata(frames):
    """Finds the main thread and the root of its call stacks.

    The root is the outermost frame of the first main thread sample in the trace.
    """
    threads = {}  # thread_id -> Thread
    first_samples = {}  # thread_id -> first Sample of the thread

    for frame in frames:
        match frame.kind:
            case RecordKind.thread:
                thread = frame.record.thread
                threads[thread.thread_id] = thread
            case RecordKind.sample:
                sample = frame.record.sample
                first_samples.setdefault(sample.thread_id, sample)
            case _:
                pass

    main_threads = [t for t in threads.values() if t.thread_id == t.process_id]
    if len(main_threads) != 1:
        raise MultipleOrNoMainThreadError(
            f"Expected exactly one main thread, found {len(main_threads)} "
            f"among {len(threads)} threads"
        )
    main_thread_id = main_threads[0].thread_id

    sample = first_samples.get(main_thread_id)
    if sample is None:
        raise NoMainThreadSampleError(
            f"No sample found for main thread {main_thread_id}"
        )
    if not sample.callchain:
        raise EmptyCallChainError(
            f"First sample of main thread {main_thread_id} has an empty call chain"
        )

    logger.debug(
        "Main thread %d (%s), %d threads in the trace",
        main_thread_id,
        main_threads[0].thread_name,
        len(threads),
    )
    return MainThreadMetadata(
        main_thread_id=main_thread_id, callstack_root=sample.callchain[-1]
    )
