import os
import struct
import tempfile

from google.protobuf.message import EncodeError

import simpleperf_cleanup.report_proto as pb
from simpleperf_cleanup.dto import Frame
from simpleperf_cleanup.errors import CodecError
from simpleperf_cleanup.parse_bin_trace import HEADER_FORMAT, LENGTH_FORMAT, MAGIC


def encode_record(record):
    try:
        return record.SerializeToString()
    except EncodeError as e:
        raise CodecError(f"Cannot encode record: {e}") from e


class TraceWriter:
    """Knows how to write a simpleperf trace file.

    Content goes to a temporary file next to the destination, which replaces
    the destination only on `close()`.
    """

    def __init__(self, filename, version):
        self._filename = os.fspath(filename)
        directory = os.path.dirname(os.path.abspath(self._filename))
        self._file = tempfile.NamedTemporaryFile(
            "wb",
            dir=directory,
            prefix=os.path.basename(self._filename) + ".",
            suffix=".tmp",
            delete=False,
        )
        self._file.write(struct.pack(HEADER_FORMAT, MAGIC, version))

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        if exc_type is None:
            self.close()
        else:
            self.abort()

    def add(self, item):
        """Add a frame to copy, or a record to encode, to the trace."""
        if isinstance(item, Frame):
            self.add_frame(item)
        elif isinstance(item, pb.Record):
            self.add_record(item)
        else:
            raise ValueError(f"Unknown object {item}")

    def add_frame(self, frame: Frame):
        """Copies the original bytes of a record."""
        self._write_data(frame.data)

    def add_record(self, record):
        """Encodes a record and adds it with its new size."""
        self._write_data(encode_record(record))

    def _write_data(self, data):
        self._file.write(struct.pack(LENGTH_FORMAT, len(data)))
        self._file.write(data)

    def close(self):
        """Terminates the trace and moves it to its destination."""
        self._file.write(struct.pack(LENGTH_FORMAT, 0))
        self._file.close()
        os.replace(self._file.name, self._filename)

    def abort(self):
        """Drops everything written so far; the destination is left untouched."""
        self._file.close()
        os.unlink(self._file.name)
