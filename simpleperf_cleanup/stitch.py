import logging

import simpleperf_cleanup.report_proto as pb
from simpleperf_cleanup.callchain import is_rooted, shared_callchain
from simpleperf_cleanup.dto import FixStats, RecordKind
from simpleperf_cleanup.errors import NoPriorValidSampleError

logger = logging.getLogger(__name__)


def stitch_frames(frames, metadata, stats=None):
    """Generates the items of the fixed trace for the given frames.

    Items are either frames to copy as they are, or fixed records to encode again.
    Broken main thread samples are held back until the next rooted sample, so
    that they can be fixed with the frames it shares with the previous one.
    """
    stitcher = _Stitcher(metadata, stats if stats is not None else FixStats())
    for frame in frames:
        yield from stitcher.add(frame)
    yield from stitcher.flush()


def fix_record(record, shared):
    """Returns a copy of a broken sample record with `shared` appended to its call chain."""
    fixed = pb.Record()
    fixed.CopyFrom(record)
    fixed.sample.callchain.extend(shared)
    return fixed


class _Stitcher:
    def __init__(self, metadata, stats):
        self._main_thread_id = metadata.main_thread_id
        self._root = metadata.callstack_root
        self._stats = stats
        self._last_valid_sample = None
        self._broken_records = []

    def add(self, frame):
        self._stats.records += 1
        match frame.kind:
            case RecordKind.sample:
                sample = frame.record.sample
                if sample.thread_id != self._main_thread_id:
                    yield frame
                else:
                    yield from self._add_main_thread_sample(frame, sample)
            case (
                RecordKind.thread
                | RecordKind.file
                | RecordKind.lost
                | RecordKind.meta_info
                | RecordKind.other
            ):
                yield frame
            case kind:
                raise ValueError(f"Unknown record kind {kind}")

    def _add_main_thread_sample(self, frame, sample):
        self._stats.main_thread_samples += 1
        if not is_rooted(sample.callchain, self._root):
            self._broken_records.append(frame.record)
            self._stats.broken_samples += 1
            return

        if self._broken_records:
            shared = shared_callchain(
                self._require_last_valid(frame.offset).callchain, sample.callchain
            )
            yield from self._fixed_records(shared)
        self._last_valid_sample = sample
        yield frame

    def flush(self):
        """Fixes the trailing broken samples, using the whole last valid call chain."""
        if self._broken_records:
            last_valid = self._require_last_valid(None)
            yield from self._fixed_records(list(last_valid.callchain))

    def _fixed_records(self, shared):
        logger.debug(
            "Fixing %d broken samples with %d shared frames",
            len(self._broken_records),
            len(shared),
        )
        for record in self._broken_records:
            yield fix_record(record, shared)
        self._broken_records = []

    def _require_last_valid(self, offset):
        if self._last_valid_sample is None:
            where = "end of trace" if offset is None else f"offset {offset}"
            raise NoPriorValidSampleError(
                f"{len(self._broken_records)} broken main thread samples precede "
                f"any rooted one (resolving at {where})"
            )
        return self._last_valid_sample
