from dataclasses import dataclass
from enum import Enum


class RecordKind(Enum):
    sample = "sample"
    lost = "lost"
    file = "file"
    thread = "thread"
    meta_info = "meta_info"
    other = "other"


@dataclass
class Frame:
    """Describes one record of a trace, together with its encoded bytes."""

    offset: int
    data: bytes
    record: object

    @property
    def kind(self):
        case = self.record.WhichOneof("record_data")
        try:
            return RecordKind(case)
        except ValueError:
            return RecordKind.other


@dataclass(frozen=True)
class MainThreadMetadata:
    """Describes the main thread and the root its call chains should reach."""

    main_thread_id: int
    callstack_root: object


@dataclass
class FixStats:
    """Counters gathered while fixing a trace."""

    records: int = 0
    main_thread_samples: int = 0
    broken_samples: int = 0
