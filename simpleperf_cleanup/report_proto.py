"""Protobuf messages of the simpleperf `report-sample` format.

Mirrors simpleperf's `cmd_report_sample.proto`. The file descriptor is built
at import time and registered in a private pool, so no protoc step is needed.
"""

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

PACKAGE = "simpleperf_report_proto"

_F = descriptor_pb2.FieldDescriptorProto


def _type_name(name):
    return f".{PACKAGE}.{name}"


def _field(message, name, number, type, label=_F.LABEL_OPTIONAL, type_name=None):
    field = message.field.add(name=name, number=number, type=type, label=label)
    if type_name:
        field.type_name = _type_name(type_name)
    return field


def _enum(message, name, values):
    enum = message.enum_type.add(name=name)
    for number, value_name in enumerate(values):
        enum.value.add(name=value_name, number=number)


def _build_file():
    f = descriptor_pb2.FileDescriptorProto(
        name="simpleperf_report.proto", package=PACKAGE, syntax="proto2"
    )

    sample = f.message_type.add(name="Sample")
    _field(sample, "time", 1, _F.TYPE_UINT64)
    _field(sample, "thread_id", 2, _F.TYPE_INT32)
    _field(
        sample,
        "callchain",
        3,
        _F.TYPE_MESSAGE,
        label=_F.LABEL_REPEATED,
        type_name="Sample.CallChainEntry",
    )
    _field(sample, "event_count", 4, _F.TYPE_UINT64)
    _field(sample, "event_type_id", 5, _F.TYPE_UINT32)
    _field(
        sample,
        "unwinding_result",
        6,
        _F.TYPE_MESSAGE,
        type_name="Sample.UnwindingResult",
    )

    entry = sample.nested_type.add(name="CallChainEntry")
    _field(entry, "vaddr_in_file", 1, _F.TYPE_UINT64)
    _field(entry, "file_id", 2, _F.TYPE_UINT32)
    # -1 when the symbol could not be resolved.
    _field(entry, "symbol_id", 3, _F.TYPE_INT32)
    _field(
        entry,
        "execution_type",
        4,
        _F.TYPE_ENUM,
        type_name="Sample.CallChainEntry.ExecutionType",
    )
    _enum(
        entry,
        "ExecutionType",
        ["NATIVE_METHOD", "INTERPRETED_JVM_METHOD", "JIT_JVM_METHOD", "ART_METHOD"],
    )

    unwinding = sample.nested_type.add(name="UnwindingResult")
    _field(unwinding, "raw_error_code", 1, _F.TYPE_UINT32)
    _field(unwinding, "error_addr", 2, _F.TYPE_UINT64)
    _field(
        unwinding,
        "error_code",
        3,
        _F.TYPE_ENUM,
        type_name="Sample.UnwindingResult.ErrorCode",
    )
    _enum(
        unwinding,
        "ErrorCode",
        [
            "ERROR_NONE",
            "ERROR_UNKNOWN",
            "ERROR_NOT_ENOUGH_STACK",
            "ERROR_MEMORY_INVALID",
            "ERROR_UNWIND_INFO",
            "ERROR_INVALID_MAP",
            "ERROR_MAX_FRAME_EXCEEDED",
            "ERROR_REPEATED_FRAME",
            "ERROR_INVALID_ELF",
        ],
    )

    lost = f.message_type.add(name="LostSituation")
    _field(lost, "sample_count", 1, _F.TYPE_UINT64)
    _field(lost, "lost_count", 2, _F.TYPE_UINT64)

    file = f.message_type.add(name="File")
    _field(file, "id", 1, _F.TYPE_UINT32)
    _field(file, "path", 2, _F.TYPE_STRING)
    _field(file, "symbol", 3, _F.TYPE_STRING, label=_F.LABEL_REPEATED)
    _field(file, "mangled_symbol", 4, _F.TYPE_STRING, label=_F.LABEL_REPEATED)

    thread = f.message_type.add(name="Thread")
    _field(thread, "thread_id", 1, _F.TYPE_UINT32)
    _field(thread, "process_id", 2, _F.TYPE_UINT32)
    _field(thread, "thread_name", 3, _F.TYPE_STRING)

    meta_info = f.message_type.add(name="MetaInfo")
    _field(meta_info, "event_type", 1, _F.TYPE_STRING, label=_F.LABEL_REPEATED)
    _field(meta_info, "app_package_name", 2, _F.TYPE_STRING)
    _field(meta_info, "app_type", 3, _F.TYPE_STRING)
    _field(meta_info, "android_sdk_version", 4, _F.TYPE_STRING)
    _field(meta_info, "android_build_type", 5, _F.TYPE_STRING)
    _field(meta_info, "trace_offcpu", 6, _F.TYPE_BOOL)

    context_switch = f.message_type.add(name="ContextSwitch")
    _field(context_switch, "switch_on", 1, _F.TYPE_BOOL)
    _field(context_switch, "time", 2, _F.TYPE_UINT64)
    _field(context_switch, "thread_id", 3, _F.TYPE_UINT32)

    record = f.message_type.add(name="Record")
    record.oneof_decl.add(name="record_data")
    for number, (name, type_name) in enumerate(
        [
            ("sample", "Sample"),
            ("lost", "LostSituation"),
            ("file", "File"),
            ("thread", "Thread"),
            ("meta_info", "MetaInfo"),
            ("context_switch", "ContextSwitch"),
        ],
        start=1,
    ):
        field = _field(record, name, number, _F.TYPE_MESSAGE, type_name=type_name)
        field.oneof_index = 0

    return f


_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(_build_file().SerializeToString())


def _message_class(name):
    return message_factory.GetMessageClass(
        _pool.FindMessageTypeByName(f"{PACKAGE}.{name}")
    )


Record = _message_class("Record")
Sample = _message_class("Sample")
CallChainEntry = _message_class("Sample.CallChainEntry")
UnwindingResult = _message_class("Sample.UnwindingResult")
LostSituation = _message_class("LostSituation")
File = _message_class("File")
Thread = _message_class("Thread")
MetaInfo = _message_class("MetaInfo")
ContextSwitch = _message_class("ContextSwitch")
