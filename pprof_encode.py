"""
pprof serialization for the profile model.

The perftools.profiles schema is declared here with protobuf descriptors
and turned into message classes at import time, so no generated *_pb2
module has to be kept in sync with profile.proto.
"""

import gzip

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

PACKAGE = "perftools.profiles"

_F = descriptor_pb2.FieldDescriptorProto

# (message, [(field, number, type, repeated, message type)])
_SCHEMA = [
    ("ValueType", [
        ("type", 1, _F.TYPE_INT64, False, None),
        ("unit", 2, _F.TYPE_INT64, False, None),
    ]),
    ("Sample", [
        ("location_id", 1, _F.TYPE_UINT64, True, None),
        ("value", 2, _F.TYPE_INT64, True, None),
    ]),
    ("Line", [
        ("function_id", 1, _F.TYPE_UINT64, False, None),
        ("line", 2, _F.TYPE_INT64, False, None),
    ]),
    ("Location", [
        ("id", 1, _F.TYPE_UINT64, False, None),
        ("mapping_id", 2, _F.TYPE_UINT64, False, None),
        ("address", 3, _F.TYPE_UINT64, False, None),
        ("line", 4, _F.TYPE_MESSAGE, True, "Line"),
        ("is_folded", 5, _F.TYPE_BOOL, False, None),
    ]),
    ("Function", [
        ("id", 1, _F.TYPE_UINT64, False, None),
        ("name", 2, _F.TYPE_INT64, False, None),
        ("system_name", 3, _F.TYPE_INT64, False, None),
        ("filename", 4, _F.TYPE_INT64, False, None),
        ("start_line", 5, _F.TYPE_INT64, False, None),
    ]),
    ("Profile", [
        ("sample_type", 1, _F.TYPE_MESSAGE, True, "ValueType"),
        ("sample", 2, _F.TYPE_MESSAGE, True, "Sample"),
        ("location", 4, _F.TYPE_MESSAGE, True, "Location"),
        ("function", 5, _F.TYPE_MESSAGE, True, "Function"),
        ("string_table", 6, _F.TYPE_STRING, True, None),
        ("time_nanos", 9, _F.TYPE_INT64, False, None),
        ("duration_nanos", 10, _F.TYPE_INT64, False, None),
        ("period_type", 11, _F.TYPE_MESSAGE, False, "ValueType"),
        ("period", 12, _F.TYPE_INT64, False, None),
        ("comment", 13, _F.TYPE_INT64, True, None),
        ("default_sample_type", 14, _F.TYPE_INT64, False, None),
    ]),
]


def _build_messages():
    fdp = descriptor_pb2.FileDescriptorProto(
        name="perftools/profiles/profile.proto", package=PACKAGE, syntax="proto3")
    for message_name, fields in _SCHEMA:
        msg = fdp.message_type.add(name=message_name)
        for name, number, field_type, repeated, type_name in fields:
            field = msg.field.add(
                name=name,
                number=number,
                type=field_type,
                label=_F.LABEL_REPEATED if repeated else _F.LABEL_OPTIONAL,
            )
            if type_name:
                field.type_name = f".{PACKAGE}.{type_name}"

    pool = descriptor_pool.DescriptorPool()
    pool.Add(fdp)
    return {
        message_name: message_factory.GetMessageClass(
            pool.FindMessageTypeByName(f"{PACKAGE}.{message_name}"))
        for message_name, _ in _SCHEMA
    }


MESSAGES = _build_messages()
ProfileMessage = MESSAGES["Profile"]


class StringTable:
    """pprof string table; index 0 is always the empty string."""

    def __init__(self):
        self.strings = [""]
        self._index = {"": 0}

    def __call__(self, s):
        i = self._index.get(s)
        if i is None:
            i = len(self.strings)
            self._index[s] = i
            self.strings.append(s)
        return i


def to_proto(profile):
    strings = StringTable()
    msg = ProfileMessage()

    for vt in profile.sample_types:
        msg.sample_type.add(type=strings(vt.type), unit=strings(vt.unit))

    for sample in profile.samples:
        msg.sample.add(
            location_id=[loc.id for loc in sample.locations],
            value=sample.values,
        )

    for loc in profile.locations:
        pb_loc = msg.location.add(id=loc.id)
        pb_loc.line.add(function_id=loc.function.id)

    for fn in profile.functions:
        name = strings(fn.name)
        msg.function.add(id=fn.id, name=name, system_name=name)

    msg.comment.extend(strings(c) for c in profile.comments)
    msg.string_table.extend(strings.strings)
    return msg


def serialize(profile):
    """Gzip-compressed pprof bytes, as read by `go tool pprof`."""
    return gzip.compress(to_proto(profile).SerializeToString())


def parse(data):
    """Decode gzip-compressed (or plain) pprof bytes into a Profile message."""
    if data[:2] == b"\x1f\x8b":
        data = gzip.decompress(data)
    msg = ProfileMessage()
    msg.ParseFromString(data)
    return msg


def write_profile(profile, path):
    with open(path, "wb") as f:
        f.write(serialize(profile))
