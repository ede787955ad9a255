"""Tests for the Python target, executing the generated modules."""

import importlib
import uuid

import pytest

from protostruct.generator import GeneratorConfig, generate


@pytest.fixture
def generated(tmp_path, monkeypatch, full_set):
    """Write the generated units into a fresh package and return an importer for it."""
    package = f"generated_{uuid.uuid4().hex}"
    root = tmp_path / package
    root.mkdir()
    (root / "__init__.py").write_text("", encoding="utf-8")
    for unit in generate(full_set, GeneratorConfig.for_target("python")):
        (root / unit.name).write_text(unit.content, encoding="utf-8")
    monkeypatch.syspath_prepend(str(tmp_path))

    def module(name):
        return importlib.import_module(f"{package}.{name}")

    return module


def describe_generated_files():
    def names_modules_after_files_and_messages(expect, full_set):
        files = generate(full_set, GeneratorConfig.for_target("python"))
        expect([f.name for f in files]) == [
            "demo_enums.py",
            "point.py",
            "shape.py",
            "node.py",
            "demo_converter.pyi",
            "demo_converter.py",
            "scene_enums.py",
            "scene.py",
            "scene_converter.pyi",
            "scene_converter.py",
        ]

    def types_the_converter_interface(expect, full_set):
        files = {f.name: f.content for f in generate(full_set, GeneratorConfig.for_target("python"))}
        interface = files["demo_converter.pyi"]
        expect("import demo_pb2 as _pb" in interface) == True
        expect("def convert_Tag(source: _pb.Shape.Tag) -> Tag: ..." in interface) == True
        expect("import shapes.scene_pb2 as _pb" in files["scene_converter.pyi"]) == True

    def uses_the_configured_source_module(expect, demo_set):
        config = GeneratorConfig.for_target("python", source_module="api.demo_pb2")
        files = {f.name: f.content for f in generate(demo_set, config)}
        expect("import api.demo_pb2 as _pb" in files["demo_converter.pyi"]) == True


def describe_generated_structs():
    def default_to_zero_values(expect, generated):
        shape = generated("shape")
        enums = generated("demo_enums")

        value = shape.Shape()

        expect(value.name) == ""
        expect(value.layer) == None
        expect(value.points) == []
        expect(value.colors) == {}
        expect(value.origin) == None
        expect(value.blob) == b""
        expect(value.color) == enums.Color.ColorUnspecified
        expect(value.kind_type) == shape.ShapeKindType.Unset

    def keep_unknown_enum_values(expect, generated):
        enums = generated("demo_enums")

        color = enums.Color(42)

        expect(int(color)) == 42
        expect(isinstance(color, enums.Color)) == True


def describe_converters():
    def distinguish_absent_from_explicit_zero(expect, generated, message_class):
        convert = generated("demo_converter").convert_Shape
        Shape = message_class("demo.Shape")

        expect(convert(Shape()).layer) == None
        expect(convert(Shape(layer=0)).layer) == 0

    def convert_the_set_union_member_only(expect, generated, message_class):
        convert = generated("demo_converter").convert_Shape
        Shape = message_class("demo.Shape")
        Point = message_class("demo.Point")

        value = convert(Shape(center=Point(x=3, y=4)))

        expect(value.kind_type) == generated("shape").ShapeKindType.Center
        expect(value.count) == None
        expect(value.label) == None
        expect((value.center.x, value.center.y)) == (3, 4)
        expect(type(value.center).__name__) == "Point"

    def leave_unset_unions_unset(expect, generated, message_class):
        value = generated("demo_converter").convert_Shape(message_class("demo.Shape")())

        expect(value.kind_type) == generated("shape").ShapeKindType.Unset
        expect((value.count, value.center, value.label)) == (None, None, None)

    def cast_map_values_to_enums(expect, generated, message_class):
        enums = generated("demo_enums")
        Shape = message_class("demo.Shape")

        value = generated("demo_converter").convert_Shape(Shape(colors={"sky": 1, "grass": 2}))

        expect(value.colors) == {"grass": enums.Color.Green, "sky": enums.Color.Red}
        expect(all(isinstance(v, enums.Color) for v in value.colors.values())) == True

    def preserve_unknown_enum_values(expect, generated, message_class):
        enums = generated("demo_enums")
        source = message_class("demo.Shape")()
        source.color = 7

        value = generated("demo_converter").convert_Shape(source)

        expect(int(value.color)) == 7
        expect(isinstance(value.color, enums.Color)) == True

    def convert_scalars_and_sequences(expect, generated, message_class):
        Shape = message_class("demo.Shape")
        Point = message_class("demo.Point")
        source = Shape(
            name="hull",
            points=[Point(x=1), Point(x=2)],
            flags=9,
            blob=b"\x00\x01",
            status=1,
        )
        source.tags.add(key="red")

        value = generated("demo_converter").convert_Shape(source)

        expect(value.name) == "hull"
        expect([p.x for p in value.points]) == [1, 2]
        expect(value.flags) == 9
        expect(value.blob) == b"\x00\x01"
        expect(value.status) == generated("demo_enums").Status.Active
        expect([t.key for t in value.tags]) == ["red"]
        expect(value.origin) == None

    def follow_self_references(expect, generated, message_class):
        Node = message_class("demo.Node")
        source = Node(value=1, next=Node(value=2), children=[Node(value=3)])

        value = generated("demo_converter").convert_Node(source)

        expect(value.value) == 1
        expect(value.next.value) == 2
        expect(value.next.next) == None
        expect([c.value for c in value.children]) == [3]

    def call_converters_of_other_files(expect, generated, message_class):
        Scene = message_class("demo.scene.Scene")
        source = Scene(tint=2)
        source.main.name = "hero"
        source.anchors["spawn"].x = 5

        value = generated("scene_converter").convert_Scene(source)

        expect(value.main.name) == "hero"
        expect(value.anchors["spawn"].x) == 5
        expect(value.tint) == generated("demo_enums").Color.Green
