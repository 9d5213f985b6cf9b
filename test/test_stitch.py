import pytest
import simpleperf_cleanup.report_proto as pb
from simpleperf_cleanup.dto import Frame, FixStats, MainThreadMetadata
from simpleperf_cleanup.errors import NoPriorValidSampleError
from simpleperf_cleanup.parse_bin_trace import parse_bin_trace
from simpleperf_cleanup.stitch import fix_record, stitch_frames
from trace_builder import build_trace, chain_keys, entry, file, sample, thread

ROOT = entry(1, 100)
MAIN = 10
METADATA = MainThreadMetadata(main_thread_id=MAIN, callstack_root=ROOT)

f, g, h = entry(2, 1), entry(2, 2), entry(2, 3)
a, b, c = entry(3, 1), entry(3, 2), entry(3, 3)
other = entry(4, 1)


def _stitch(records, metadata=METADATA):
    stats = FixStats()
    items = list(stitch_frames(parse_bin_trace(build_trace(records)), metadata, stats))
    return items, stats


def _chain(item):
    record = item.record if isinstance(item, Frame) else item
    return chain_keys(record.sample.callchain)


def test_end_to_end_scenario():
    records = [
        thread(MAIN, MAIN),
        sample(MAIN, [f, ROOT]),
        sample(MAIN, [g, other]),
        sample(MAIN, [h, ROOT]),
    ]
    items, stats = _stitch(records)

    assert len(items) == 4
    assert isinstance(items[1], Frame)
    assert items[1].data == records[1].SerializeToString()
    assert isinstance(items[2], pb.Record)
    assert _chain(items[2]) == chain_keys([g, other, ROOT])
    assert isinstance(items[3], Frame)
    assert items[3].data == records[3].SerializeToString()
    assert stats.main_thread_samples == 3
    assert stats.broken_samples == 1
    assert stats.records == 4


def test_shared_prefix_of_bracketing_samples():
    records = [
        sample(MAIN, [f, b, a, ROOT]),
        sample(MAIN, [g]),
        sample(MAIN, [h, other]),
        sample(MAIN, [c, b, a, ROOT]),
    ]
    items, stats = _stitch(records)

    assert _chain(items[1]) == chain_keys([g, b, a, ROOT])
    assert _chain(items[2]) == chain_keys([h, other, b, a, ROOT])
    assert stats.broken_samples == 2


def test_fixed_records_keep_other_fields():
    broken = sample(MAIN, [g], time=1234)
    broken.sample.event_count = 7
    items, _ = _stitch([sample(MAIN, [ROOT]), broken, sample(MAIN, [ROOT])])

    fixed = items[1].sample
    assert fixed.time == 1234
    assert fixed.event_count == 7
    assert fixed.thread_id == MAIN


def test_other_records_pass_through_in_order():
    records = [
        file(1, "/system/lib64/libc.so"),
        thread(MAIN, MAIN),
        sample(MAIN, [f, ROOT]),
        sample(MAIN, [g]),
        thread(11, MAIN),
        sample(11, [h]),
        sample(MAIN, [h, ROOT]),
    ]
    items, stats = _stitch(records)

    # Broken samples are held back until the next rooted sample.
    assert [type(i) for i in items] == [Frame] * 3 + [Frame, Frame, pb.Record, Frame]
    assert [i.data for i in items if isinstance(i, Frame)] == [
        r.SerializeToString() for r in records if r is not records[3]
    ]
    assert stats.broken_samples == 1
    assert stats.main_thread_samples == 3


def test_trailing_broken_samples_use_whole_last_valid_chain():
    records = [
        sample(MAIN, [f, b, ROOT]),
        sample(MAIN, [c, a, ROOT]),
        sample(MAIN, [g]),
        sample(MAIN, [h]),
    ]
    items, stats = _stitch(records)

    assert len(items) == 4
    assert _chain(items[2]) == chain_keys([g, c, a, ROOT])
    assert _chain(items[3]) == chain_keys([h, c, a, ROOT])
    assert stats.broken_samples == 2


def test_empty_callchain_is_broken():
    items, stats = _stitch([sample(MAIN, [f, ROOT]), sample(MAIN, []), sample(MAIN, [ROOT])])
    assert _chain(items[1]) == chain_keys([ROOT])
    assert stats.broken_samples == 1


def test_broken_before_any_valid_sample():
    with pytest.raises(NoPriorValidSampleError):
        _stitch([sample(MAIN, [g]), sample(MAIN, [f, ROOT])])

    with pytest.raises(NoPriorValidSampleError):
        _stitch([sample(MAIN, [g])])


def test_all_valid_is_unchanged():
    records = [thread(MAIN, MAIN), sample(MAIN, [f, ROOT]), sample(MAIN, [ROOT])]
    items, stats = _stitch(records)
    assert all(isinstance(i, Frame) for i in items)
    assert stats.broken_samples == 0


def test_fix_record_does_not_modify_original():
    record = sample(MAIN, [g])
    fixed = fix_record(record, [a, ROOT])
    assert chain_keys(record.sample.callchain) == chain_keys([g])
    assert chain_keys(fixed.sample.callchain) == chain_keys([g, a, ROOT])
