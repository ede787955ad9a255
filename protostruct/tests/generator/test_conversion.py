"""Tests for the converter emitter."""

import pytest

from protostruct.generator.conversion import ConversionEmitter, Shape, ValueKind
from protostruct.generator.organizer import FileOrganizer


def _organize(context, *names):
    organizer = FileOrganizer(context)
    return [organizer.organize(context.types.file(name)) for name in names]


def _shape_converter(context):
    return ConversionEmitter(context).emit(context.types.message("demo.Shape"))


def describe_mirroring():
    @pytest.mark.parametrize("target", ["unreal", "python"])
    def assigns_every_struct_member_exactly_once(expect, context_for, full_set, target):
        context = context_for(target, full_set)
        outputs = _organize(context, "demo.proto", "shapes/scene.proto")

        structs = {s.full_name: s for o in outputs for u in o.units for s in u.structs}
        converters = {c.full_name: c for o in outputs for c in o.converters}

        expect(sorted(converters)) == sorted(structs)
        for full_name, struct in structs.items():
            assigned = converters[full_name].assigned_fields()
            members = [f.name for f in struct.union_fields] + [f.name for f in struct.fields]
            expect(len(assigned)) == len(set(assigned))
            expect(sorted(assigned)) == sorted(members)


def describe_conversion_emitter():
    def dispatches_union_members(expect, context_for):
        converter = _shape_converter(context_for("unreal"))

        expect(len(converter.unions)) == 1
        union = converter.unions[0]
        expect(union.oneof) == "kind"
        expect(union.field) == "KindType"
        expect(union.type) == "EShapeKindType"
        expect(union.unset) == "None"
        expect([(c.target, c.member, c.value.kind) for c in union.cases]) == [
            ("Count", "Count", ValueKind.COPY),
            ("Center", "Center", ValueKind.MESSAGE),
            ("Label", "Label", ValueKind.TEXT),
        ]

    def never_assigns_union_members_outside_the_dispatch(expect, context_for):
        converter = _shape_converter(context_for("unreal"))
        targets = [a.target for a in converter.assignments]
        expect("Count" in targets) == False
        expect("Center" in targets) == False
        expect("Label" in targets) == False

    def picks_a_shape_per_field(expect, context_for):
        converter = _shape_converter(context_for("unreal"))
        shapes = {a.source: a.shape for a in converter.assignments}

        expect(shapes["name"]) == Shape.SINGULAR
        expect(shapes["layer"]) == Shape.OPTIONAL
        expect(shapes["points"]) == Shape.REPEATED
        expect(shapes["colors"]) == Shape.MAP
        expect(shapes["origin"]) == Shape.OPTIONAL
        expect(shapes["color"]) == Shape.SINGULAR

    def converts_map_keys_and_values(expect, context_for):
        converter = _shape_converter(context_for("unreal"))
        colors = next(a for a in converter.assignments if a.source == "colors")

        expect(colors.key.kind) == ValueKind.TEXT
        expect(colors.value.kind) == ValueKind.ENUM
        expect(colors.value.type) == "EColor"
        expect(colors.value.type_name) == "demo.Color"

    def stringifies_fallback_scalars(expect, context_for):
        unreal = {a.source: a.value for a in _shape_converter(context_for("unreal")).assignments}
        python = {a.source: a.value for a in _shape_converter(context_for("python")).assignments}

        expect(unreal["flags"].kind) == ValueKind.STRINGIFY
        expect(unreal["blob"].kind) == ValueKind.STRINGIFY
        expect(python["flags"].kind) == ValueKind.COPY
        expect(python["blob"].kind) == ValueKind.COPY

    def lists_referenced_types(expect, context_for):
        converter = _shape_converter(context_for("unreal"))

        expect(converter.converted_messages()) == ["demo.Point", "demo.Shape.Tag"]
        expect(converter.referenced(ValueKind.ENUM)) == ["demo.Color", "demo.Shape.Status"]
