"""
Switchboard oracle job: an ordered list of tasks run off-chain by oracle operators.

The wire format is Switchboard's OracleJob protobuf. Only the task variants
this tool builds are declared here (HttpTask and JsonParseTask), with the
same field numbers as Switchboard's job_schemas.proto, so the bytes are
what the oracles expect.

On chain a job is stored as base64 of the length-delimited encoding
(varint length prefix + message), i.e. protobufjs `encodeDelimited`.
"""

import base64
import binascii
from typing import Any, Dict, List, Sequence

from google.protobuf import descriptor_pb2, descriptor_pool, json_format, message_factory
from google.protobuf.internal.decoder import _DecodeVarint32
from google.protobuf.internal.encoder import _VarintBytes
from google.protobuf.message import DecodeError, Message

from aptosfeed.errors import JobEncodingError

_PACKAGE = "switchboard"
_F = descriptor_pb2.FieldDescriptorProto


def _field(msg, name: str, number: int, ftype: int, label: int = _F.LABEL_OPTIONAL, type_name: str = ""):
    f = msg.field.add()
    f.name = name
    f.number = number
    f.type = ftype
    f.label = label
    if type_name:
        f.type_name = type_name
    return f


def _enum(msg, name: str, values: Sequence[str]) -> None:
    e = msg.enum_type.add()
    e.name = name
    for number, value in enumerate(values):
        v = e.value.add()
        v.name = value
        v.number = number


def _build_file() -> descriptor_pb2.FileDescriptorProto:
    fdp = descriptor_pb2.FileDescriptorProto()
    fdp.name = "aptosfeed/job_schemas.proto"
    fdp.package = _PACKAGE
    fdp.syntax = "proto2"

    job = fdp.message_type.add()
    job.name = "OracleJob"
    prefix = f".{_PACKAGE}.OracleJob"

    http = job.nested_type.add()
    http.name = "HttpTask"
    _enum(http, "Method", ["METHOD_UNKOWN", "METHOD_GET", "METHOD_POST"])
    header = http.nested_type.add()
    header.name = "Header"
    _field(header, "key", 1, _F.TYPE_STRING)
    _field(header, "value", 2, _F.TYPE_STRING)
    _field(http, "url", 1, _F.TYPE_STRING)
    _field(http, "method", 2, _F.TYPE_ENUM, type_name=f"{prefix}.HttpTask.Method")
    _field(http, "headers", 3, _F.TYPE_MESSAGE, _F.LABEL_REPEATED, f"{prefix}.HttpTask.Header")
    _field(http, "body", 4, _F.TYPE_STRING)

    json_parse = job.nested_type.add()
    json_parse.name = "JsonParseTask"
    _enum(json_parse, "AggregationType", ["NONE", "MIN", "MAX", "SUM", "MEAN", "MEDIAN"])
    _field(json_parse, "path", 1, _F.TYPE_STRING)
    _field(json_parse, "aggregation_type", 2, _F.TYPE_ENUM, type_name=f"{prefix}.JsonParseTask.AggregationType")

    task = job.nested_type.add()
    task.name = "Task"
    task.oneof_decl.add().name = "Task"
    _field(task, "http_task", 1, _F.TYPE_MESSAGE, type_name=f"{prefix}.HttpTask").oneof_index = 0
    _field(task, "json_parse_task", 2, _F.TYPE_MESSAGE, type_name=f"{prefix}.JsonParseTask").oneof_index = 0

    _field(job, "tasks", 1, _F.TYPE_MESSAGE, _F.LABEL_REPEATED, f"{prefix}.Task")
    return fdp


_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(_build_file().SerializeToString())

OracleJob = message_factory.GetMessageClass(_pool.FindMessageTypeByName(f"{_PACKAGE}.OracleJob"))


def http_task(url: str) -> Dict[str, Any]:
    """Fetch `url`; the response body is the input of the next task."""
    return {"http_task": {"url": url}}


def json_parse_task(path: str) -> Dict[str, Any]:
    """Extract a number from the previous task's JSON output, e.g. "$.price"."""
    return {"json_parse_task": {"path": path}}


def build_job(tasks: Sequence[Dict[str, Any]]) -> Message:
    """Build an OracleJob from task dicts (see http_task / json_parse_task)."""
    if not tasks:
        raise JobEncodingError("An oracle job needs at least one task")
    try:
        return json_format.ParseDict({"tasks": list(tasks)}, OracleJob())
    except json_format.ParseError as e:
        raise JobEncodingError(f"Invalid task list: {e}") from e


def build_price_job(url: str, path: str) -> Message:
    """The usual two-step job: GET `url`, then pull the value at JSON path `path`."""
    return build_job([http_task(url), json_parse_task(path)])


def encode_delimited(job: Message) -> bytes:
    body = job.SerializeToString()
    return _VarintBytes(len(body)) + body


def decode_delimited(data: bytes) -> Message:
    try:
        length, pos = _DecodeVarint32(data, 0)
    except (IndexError, DecodeError) as e:
        raise JobEncodingError("Truncated length prefix") from e
    if pos + length > len(data):
        raise JobEncodingError(f"Job declares {length} bytes but only {len(data) - pos} follow")
    job = OracleJob()
    try:
        job.ParseFromString(data[pos:pos + length])
    except DecodeError as e:
        raise JobEncodingError(f"Invalid OracleJob payload: {e}") from e
    return job


def serialize_job(job: Message) -> str:
    """base64 text stored in the feed's job slot."""
    return base64.b64encode(encode_delimited(job)).decode("ascii")


def deserialize_job(text: str) -> Message:
    try:
        raw = base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as e:
        raise JobEncodingError(f"Job data is not valid base64: {e}") from e
    return decode_delimited(raw)


def describe_job(job: Message) -> List[Dict[str, Any]]:
    """Task list as plain dicts, e.g. [{"http_task": {"url": ...}}, {"json_parse_task": {"path": ...}}]."""
    return json_format.MessageToDict(job, preserving_proto_field_name=True).get("tasks", [])
