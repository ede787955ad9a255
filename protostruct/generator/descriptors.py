"""Conversion of protobuf descriptor protos into the generator's descriptor model."""

import logging
from collections.abc import Iterable
from pathlib import Path

from google.protobuf import descriptor_pb2
from google.protobuf.message import DecodeError

from .registry import DescriptorError
from .types import (
    DescriptorSet,
    EnumDescriptor,
    EnumValueDescriptor,
    FieldDescriptor,
    FieldType,
    FileDescriptor,
    MessageDescriptor,
    OneofDescriptor,
)

logger = logging.getLogger(__name__)

_FieldProto = descriptor_pb2.FieldDescriptorProto

FIELD_TYPES = {
    _FieldProto.TYPE_DOUBLE: FieldType.DOUBLE,
    _FieldProto.TYPE_FLOAT: FieldType.FLOAT,
    _FieldProto.TYPE_INT64: FieldType.INT64,
    _FieldProto.TYPE_UINT64: FieldType.UINT64,
    _FieldProto.TYPE_INT32: FieldType.INT32,
    _FieldProto.TYPE_FIXED64: FieldType.FIXED64,
    _FieldProto.TYPE_FIXED32: FieldType.FIXED32,
    _FieldProto.TYPE_BOOL: FieldType.BOOL,
    _FieldProto.TYPE_STRING: FieldType.STRING,
    _FieldProto.TYPE_GROUP: FieldType.GROUP,
    _FieldProto.TYPE_MESSAGE: FieldType.MESSAGE,
    _FieldProto.TYPE_BYTES: FieldType.BYTES,
    _FieldProto.TYPE_UINT32: FieldType.UINT32,
    _FieldProto.TYPE_ENUM: FieldType.ENUM,
    _FieldProto.TYPE_SFIXED32: FieldType.SFIXED32,
    _FieldProto.TYPE_SFIXED64: FieldType.SFIXED64,
    _FieldProto.TYPE_SINT32: FieldType.SINT32,
    _FieldProto.TYPE_SINT64: FieldType.SINT64,
}


def _qualify(scope: str, name: str) -> str:
    return f"{scope}.{name}" if scope else name


def _has_presence(proto: descriptor_pb2.FieldDescriptorProto, syntax: str) -> bool:
    """Apply protobuf's field presence rules.

    Editions files are treated like proto2, where every singular field
    tracks presence.
    """
    if proto.label == _FieldProto.LABEL_REPEATED:
        return False
    if proto.type in (_FieldProto.TYPE_MESSAGE, _FieldProto.TYPE_GROUP):
        return True
    if proto.HasField("oneof_index") or proto.proto3_optional:
        return True
    return syntax != "proto3"


def _convert_enum(proto: descriptor_pb2.EnumDescriptorProto, scope: str) -> EnumDescriptor:
    return EnumDescriptor(
        name=proto.name,
        full_name=_qualify(scope, proto.name),
        values=[EnumValueDescriptor(value.name, value.number) for value in proto.value],
    )


def _convert_message(
    proto: descriptor_pb2.DescriptorProto, scope: str, syntax: str
) -> MessageDescriptor:
    full_name = _qualify(scope, proto.name)
    map_entries = {
        _qualify(full_name, nested.name)
        for nested in proto.nested_type
        if nested.options.map_entry
    }

    fields: list[FieldDescriptor] = []
    for field_proto in proto.field:
        if field_proto.type not in FIELD_TYPES:
            raise DescriptorError(
                f"Field '{full_name}.{field_proto.name}' has unknown type {field_proto.type}"
            )
        type_name = field_proto.type_name.lstrip(".") or None
        repeated = field_proto.label == _FieldProto.LABEL_REPEATED
        fields.append(
            FieldDescriptor(
                name=field_proto.name,
                number=field_proto.number,
                type=FIELD_TYPES[field_proto.type],
                repeated=repeated,
                is_map=repeated and type_name in map_entries,
                has_presence=_has_presence(field_proto, syntax),
                type_name=type_name,
                oneof_index=(
                    field_proto.oneof_index if field_proto.HasField("oneof_index") else None
                ),
            )
        )

    oneofs: list[OneofDescriptor] = []
    for index, oneof_proto in enumerate(proto.oneof_decl):
        members = [f for f in proto.field if f.HasField("oneof_index") and f.oneof_index == index]
        synthetic = bool(members) and all(f.proto3_optional for f in members)
        oneofs.append(OneofDescriptor(oneof_proto.name, synthetic))

    return MessageDescriptor(
        name=proto.name,
        full_name=full_name,
        fields=fields,
        nested_enums=[_convert_enum(e, full_name) for e in proto.enum_type],
        nested_messages=[_convert_message(m, full_name, syntax) for m in proto.nested_type],
        oneofs=oneofs,
        map_entry=proto.options.map_entry,
    )


def convert_file(proto: descriptor_pb2.FileDescriptorProto) -> FileDescriptor:
    """Convert one FileDescriptorProto."""
    syntax = proto.syntax or "proto2"
    file = FileDescriptor(
        name=proto.name,
        package=proto.package,
        syntax=syntax,
        dependencies=list(proto.dependency),
        enums=[_convert_enum(e, proto.package) for e in proto.enum_type],
        messages=[_convert_message(m, proto.package, syntax) for m in proto.message_type],
    )
    logger.debug(
        f"Loaded {file.name}: {len(file.messages)} messages, {len(file.enums)} enums ({syntax})"
    )
    return file


def from_file_protos(
    protos: Iterable[descriptor_pb2.FileDescriptorProto],
    files_to_generate: Iterable[str] = (),
) -> DescriptorSet:
    """Build a descriptor set from FileDescriptorProtos."""
    descriptor_set = DescriptorSet(
        files=[convert_file(proto) for proto in protos],
        files_to_generate=list(files_to_generate),
    )
    for name in descriptor_set.files_to_generate:
        if descriptor_set.get_file(name) is None:
            raise DescriptorError(f"File to generate '{name}' is not part of the request")
    return descriptor_set


def parse_descriptor_set(data: bytes) -> DescriptorSet:
    """Parse a serialized FileDescriptorSet, as written by `protoc --descriptor_set_out`."""
    file_set = descriptor_pb2.FileDescriptorSet()
    try:
        file_set.ParseFromString(data)
    except DecodeError as e:
        raise DescriptorError(f"Invalid descriptor set: {e}") from e
    return from_file_protos(file_set.file)


def load(path: str | Path) -> DescriptorSet:
    """Load a descriptor set from a binary FileDescriptorSet or a JSON model dump."""
    path = Path(path)
    if path.suffix == ".json":
        try:
            return DescriptorSet.from_json(path.read_text(encoding="utf-8"))
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise DescriptorError(f"Invalid descriptor model in {path}: {e}") from e
    return parse_descriptor_set(path.read_bytes())
