"""Descriptor fixtures shared by the generator tests.

`demo.proto` (package `demo`, proto3):

    enum Color { COLOR_UNSPECIFIED = 0; RED = 1; GREEN = 2; }
    message Point { int32 x = 1; int32 y = 2; }
    message Shape {
      enum Status { STATUS_UNKNOWN = 0; ACTIVE = 1; }
      message Tag { string key = 1; }
      string name = 1;
      optional int32 layer = 2;
      repeated Point points = 3;
      map<string, Color> colors = 4;
      oneof kind { int32 count = 5; Point center = 6; string label = 7; }
      Point origin = 8;
      uint32 flags = 9;
      bytes blob = 10;
      Color color = 11;
      Status status = 12;
      repeated Tag tags = 13;
    }
    message Node { Node next = 1; repeated Node children = 2; int32 value = 3; }

`shapes/scene.proto` (package `demo.scene`, imports demo.proto):

    message Scene { demo.Shape main = 1; map<string, demo.Point> anchors = 2; demo.Color tint = 3; }
"""

import pytest
from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

from protostruct.generator import GeneratorConfig, from_file_protos
from protostruct.generator.pipeline import create_context

F = descriptor_pb2.FieldDescriptorProto


def add_field(
    message,
    name,
    number,
    type_,
    *,
    repeated=False,
    type_name=None,
    oneof_index=None,
    proto3_optional=False,
):
    f = message.field.add()
    f.name = name
    f.number = number
    f.type = type_
    f.label = F.LABEL_REPEATED if repeated else F.LABEL_OPTIONAL
    if type_name:
        f.type_name = type_name
    if oneof_index is not None:
        f.oneof_index = oneof_index
    if proto3_optional:
        f.proto3_optional = True
    return f


def add_enum(container, name, *values):
    enum = container.enum_type.add()
    enum.name = name
    for value_name, number in values:
        value = enum.value.add()
        value.name = value_name
        value.number = number
    return enum


def add_map(message, scope, name, number, key_type, value_type, value_type_name=None):
    entry = message.nested_type.add()
    entry.name = "".join(part.capitalize() for part in name.split("_")) + "Entry"
    entry.options.map_entry = True
    add_field(entry, "key", 1, key_type)
    add_field(entry, "value", 2, value_type, type_name=value_type_name)
    return add_field(
        message, name, number, F.TYPE_MESSAGE, repeated=True, type_name=f".{scope}.{entry.name}"
    )


def build_demo_file():
    file = descriptor_pb2.FileDescriptorProto()
    file.name = "demo.proto"
    file.package = "demo"
    file.syntax = "proto3"

    add_enum(file, "Color", ("COLOR_UNSPECIFIED", 0), ("RED", 1), ("GREEN", 2))

    point = file.message_type.add()
    point.name = "Point"
    add_field(point, "x", 1, F.TYPE_INT32)
    add_field(point, "y", 2, F.TYPE_INT32)

    shape = file.message_type.add()
    shape.name = "Shape"
    add_enum(shape, "Status", ("STATUS_UNKNOWN", 0), ("ACTIVE", 1))
    tag = shape.nested_type.add()
    tag.name = "Tag"
    add_field(tag, "key", 1, F.TYPE_STRING)
    shape.oneof_decl.add().name = "kind"
    shape.oneof_decl.add().name = "_layer"
    add_field(shape, "name", 1, F.TYPE_STRING)
    add_field(shape, "layer", 2, F.TYPE_INT32, oneof_index=1, proto3_optional=True)
    add_field(shape, "points", 3, F.TYPE_MESSAGE, repeated=True, type_name=".demo.Point")
    add_map(shape, "demo.Shape", "colors", 4, F.TYPE_STRING, F.TYPE_ENUM, ".demo.Color")
    add_field(shape, "count", 5, F.TYPE_INT32, oneof_index=0)
    add_field(shape, "center", 6, F.TYPE_MESSAGE, type_name=".demo.Point", oneof_index=0)
    add_field(shape, "label", 7, F.TYPE_STRING, oneof_index=0)
    add_field(shape, "origin", 8, F.TYPE_MESSAGE, type_name=".demo.Point")
    add_field(shape, "flags", 9, F.TYPE_UINT32)
    add_field(shape, "blob", 10, F.TYPE_BYTES)
    add_field(shape, "color", 11, F.TYPE_ENUM, type_name=".demo.Color")
    add_field(shape, "status", 12, F.TYPE_ENUM, type_name=".demo.Shape.Status")
    add_field(shape, "tags", 13, F.TYPE_MESSAGE, repeated=True, type_name=".demo.Shape.Tag")

    node = file.message_type.add()
    node.name = "Node"
    add_field(node, "next", 1, F.TYPE_MESSAGE, type_name=".demo.Node")
    add_field(node, "children", 2, F.TYPE_MESSAGE, repeated=True, type_name=".demo.Node")
    add_field(node, "value", 3, F.TYPE_INT32)
    return file


def build_scene_file():
    file = descriptor_pb2.FileDescriptorProto()
    file.name = "shapes/scene.proto"
    file.package = "demo.scene"
    file.syntax = "proto3"
    file.dependency.append("demo.proto")

    scene = file.message_type.add()
    scene.name = "Scene"
    add_field(scene, "main", 1, F.TYPE_MESSAGE, type_name=".demo.Shape")
    add_map(scene, "demo.scene.Scene", "anchors", 2, F.TYPE_STRING, F.TYPE_MESSAGE, ".demo.Point")
    add_field(scene, "tint", 3, F.TYPE_ENUM, type_name=".demo.Color")
    return file


@pytest.fixture
def demo_file():
    return build_demo_file()


@pytest.fixture
def scene_file():
    return build_scene_file()


@pytest.fixture
def demo_set(demo_file):
    return from_file_protos([demo_file], ["demo.proto"])


@pytest.fixture
def full_set(demo_file, scene_file):
    return from_file_protos([demo_file, scene_file], ["demo.proto", "shapes/scene.proto"])


@pytest.fixture
def context_for(demo_set):
    """Build a fresh generation context for a target, over `demo_set` by default."""

    def build(target="unreal", descriptor_set=None, **overrides):
        config = GeneratorConfig.for_target(target, **overrides)
        return create_context(descriptor_set or demo_set, config)

    return build


@pytest.fixture
def message_class(demo_file, scene_file):
    """Look up real protobuf message classes for the fixture schemas."""
    pool = descriptor_pool.DescriptorPool()
    pool.Add(demo_file)
    pool.Add(scene_file)

    def get(full_name):
        return message_factory.GetMessageClass(pool.FindMessageTypeByName(full_name))

    return get
