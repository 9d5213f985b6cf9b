"""Reads simpleperf `report-sample` traces.

The trace has the following format:
    char magic[10] = "SIMPLEPERF";
    LittleEndian16(version) = 1;
    LittleEndian32(record_size_0)
    Record (having record_size_0 bytes)
    ...
    LittleEndian32(record_size_N)
    Record (having record_size_N bytes)
    LittleEndian32(0)
"""

import logging
import struct

from google.protobuf.message import DecodeError

import simpleperf_cleanup.report_proto as pb
from simpleperf_cleanup.dto import Frame
from simpleperf_cleanup.errors import CodecError, FormatError

logger = logging.getLogger(__name__)

MAGIC = b"SIMPLEPERF"
HEADER_FORMAT = "<10sH"
LENGTH_FORMAT = "<I"


def load_trace(filename):
    """Loads the whole trace file in memory."""
    with open(filename, "rb") as f:
        return f.read()


def _read_and_unpack(format, buffer, offset):
    size = struct.calcsize(format)
    if offset + size > len(buffer):
        raise FormatError(
            f"Trace truncated, expected {size} more bytes, "
            f"got {len(buffer) - offset}",
            offset,
        )
    return struct.unpack_from(format, buffer, offset), offset + size


def read_header(buffer):
    """Checks the magic string and returns the version and the offset of the first record."""
    (magic, version), offset = _read_and_unpack(HEADER_FORMAT, buffer, 0)
    if magic != MAGIC:
        raise FormatError(
            "Simpleperf trace could not be parsed due to magic number mismatch", 0
        )
    return version, offset


def decode_record(data, offset=None):
    record = pb.Record()
    try:
        record.ParseFromString(data)
    except DecodeError as e:
        raise CodecError(f"Cannot decode record: {e}", offset) from e
    return record


def _frame_generator(buffer, offset):
    while True:
        (size,), body_offset = _read_and_unpack(LENGTH_FORMAT, buffer, offset)
        # 0 is used to indicate the end of the trace
        if size == 0:
            break
        end = body_offset + size
        if end > len(buffer):
            raise FormatError(
                f"Record of {size} bytes exceeds the end of the trace", offset
            )
        data = bytes(buffer[body_offset:end])
        yield Frame(offset=offset, data=data, record=decode_record(data, offset))
        offset = end

    trailing = len(buffer) - body_offset
    if trailing:
        logger.debug("Ignoring %d bytes after the end of the trace", trailing)


def parse_bin_trace(buffer):
    """Generates the frames of the given trace, in file order.

    Every call starts a new, independent pass over the buffer.
    """
    _, offset = read_header(buffer)
    return _frame_generator(buffer, offset)
