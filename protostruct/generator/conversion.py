"""Converter emitter: code that fills a generated struct from a source message.

Every decision made here has a counterpart in the declaration emitters. A
member that `StructEmitter` declares gets exactly one assignment, and the
value conversion chosen for it follows the type `TypeMapper` gave it.
"""

from dataclasses import dataclass
from enum import StrEnum, auto

from .mapping import TypeMapper
from .registry import GenerationContext
from .types import FieldDescriptor, FieldType, MessageDescriptor


class ValueKind(StrEnum):
    """How a single source value becomes a target value."""

    MESSAGE = auto()  # recursive converter call
    TEXT = auto()  # text decoding
    ENUM = auto()  # numeric cast, no range check
    STRINGIFY = auto()  # scalar kind unknown to the target, mapped to text
    COPY = auto()


class Shape(StrEnum):
    """How the values of a field are moved."""

    MAP = auto()
    REPEATED = auto()
    OPTIONAL = auto()  # assigned only when the source reports presence
    SINGULAR = auto()


@dataclass
class ValueConversion:
    kind: ValueKind
    type: str
    source_type: FieldType
    type_name: str | None = None  # full name of the referenced message or enum


@dataclass
class FieldAssignment:
    target: str
    source: str
    shape: Shape
    value: ValueConversion
    key: ValueConversion | None = None


@dataclass
class UnionCase:
    target: str
    source: str
    member: str
    value: ValueConversion


@dataclass
class UnionDispatch:
    """Branch-per-member assignment of one real oneof."""

    oneof: str
    field: str
    type: str
    unset: str
    cases: list[UnionCase]


@dataclass
class ConverterDecl:
    name: str
    message: MessageDescriptor
    unions: list[UnionDispatch]
    assignments: list[FieldAssignment]

    @property
    def full_name(self) -> str:
        return self.message.full_name

    def assigned_fields(self) -> list[str]:
        """Every struct member this converter writes, discriminators included."""
        names = [union.field for union in self.unions]
        names += [case.target for union in self.unions for case in union.cases]
        names += [assignment.target for assignment in self.assignments]
        return names

    def values(self) -> list[ValueConversion]:
        """Every value conversion performed, map keys included."""
        values = [case.value for union in self.unions for case in union.cases]
        for assignment in self.assignments:
            values.append(assignment.value)
            if assignment.key is not None:
                values.append(assignment.key)
        return values

    def referenced(self, kind: ValueKind) -> list[str]:
        """Full names of the types referenced by conversions of `kind`, in first-use order."""
        result: dict[str, None] = {}
        for value in self.values():
            if value.kind == kind and value.type_name is not None:
                result.setdefault(value.type_name)
        return list(result)

    def converted_messages(self) -> list[str]:
        """Full names of the messages whose converters this one calls."""
        return self.referenced(ValueKind.MESSAGE)


class ConversionEmitter:
    def __init__(self, context: GenerationContext):
        self.context = context
        self.mapper = TypeMapper(context)

    def value(self, f: FieldDescriptor) -> ValueConversion:
        """Pick the conversion for a single value of `f`."""
        base = self.mapper.base_type(f)
        if f.is_message:
            return ValueConversion(ValueKind.MESSAGE, base, f.type, f.type_name)
        if f.is_enum:
            return ValueConversion(ValueKind.ENUM, base, f.type, f.type_name)
        if self.mapper.is_fallback(f):
            return ValueConversion(ValueKind.STRINGIFY, base, f.type)
        if f.type == FieldType.STRING:
            return ValueConversion(ValueKind.TEXT, base, f.type)
        return ValueConversion(ValueKind.COPY, base, f.type)

    def assignment(self, f: FieldDescriptor) -> FieldAssignment:
        target = self.mapper.field_name(f)
        if f.is_map:
            key, value = self.mapper.map_entry(f)
            return FieldAssignment(target, f.name, Shape.MAP, self.value(value), self.value(key))
        if f.repeated:
            return FieldAssignment(target, f.name, Shape.REPEATED, self.value(f))
        if self.mapper.is_optional(f):
            return FieldAssignment(target, f.name, Shape.OPTIONAL, self.value(f))
        return FieldAssignment(target, f.name, Shape.SINGULAR, self.value(f))

    def emit(self, message: MessageDescriptor) -> ConverterDecl:
        unions: list[UnionDispatch] = []
        for index, oneof in message.real_oneofs():
            cases = [
                UnionCase(
                    self.mapper.field_name(f),
                    f.name,
                    self.context.lexicon.member_name(f.name),
                    self.value(f),
                )
                for f in message.oneof_fields(index)
            ]
            unions.append(
                UnionDispatch(
                    oneof.name,
                    self.mapper.discriminator_field(oneof),
                    self.mapper.discriminator_name(message, oneof),
                    self.context.config.discriminator_unset,
                    cases,
                )
            )

        # real oneof members are only ever written by their dispatch
        assignments = [self.assignment(f) for f in message.fields if not message.in_real_oneof(f)]
        return ConverterDecl(self.mapper.struct_name(message), message, unions, assignments)
