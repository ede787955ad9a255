"""Mapping from field descriptors to target type expressions."""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum, auto

from .registry import DescriptorError, GenerationContext
from .types import EnumDescriptor, FieldDescriptor, MessageDescriptor, OneofDescriptor
from .util import to_pascal_case

DISCRIMINATOR_SUFFIX = "Type"


class FieldCase(StrEnum):
    """How schema field names appear in generated code."""

    PASCAL = auto()
    SCHEMA = auto()


@dataclass(frozen=True)
class TypeLexicon:
    """Type vocabulary of one target language.

    The container templates are str.format patterns: `map_type` takes `key`
    and `value`, `sequence_type` and `optional_type` take `item`.
    """

    scalars: Mapping[str, str]
    text_type: str
    map_type: str
    sequence_type: str
    optional_type: str
    field_case: FieldCase
    reserved: frozenset[str] = frozenset()

    def escape(self, name: str) -> str:
        return f"{name}_" if name in self.reserved else name

    def field_name(self, schema_name: str) -> str:
        if self.field_case == FieldCase.PASCAL:
            return self.escape(to_pascal_case(schema_name))
        return self.escape(schema_name)

    def member_name(self, schema_name: str) -> str:
        return self.escape(to_pascal_case(schema_name))


class TypeMapper:
    """Decides the generated name or type expression for descriptors."""

    def __init__(self, context: GenerationContext):
        self.context = context
        self.lexicon = context.lexicon
        self.config = context.config

    def struct_name(self, message: MessageDescriptor) -> str:
        return f"{self.config.struct_prefix}{message.name}"

    def enum_name(self, enum: EnumDescriptor) -> str:
        return f"{self.config.enum_prefix}{enum.name}"

    def discriminator_name(self, message: MessageDescriptor, oneof: OneofDescriptor) -> str:
        """Name of the enum recording which member of `oneof` is set."""
        return (
            f"{self.config.enum_prefix}{message.name}"
            f"{to_pascal_case(oneof.name)}{DISCRIMINATOR_SUFFIX}"
        )

    def discriminator_field(self, oneof: OneofDescriptor) -> str:
        """Name of the struct member holding the discriminator of `oneof`."""
        return self.lexicon.field_name(f"{oneof.name}_{DISCRIMINATOR_SUFFIX.lower()}")

    def field_name(self, f: FieldDescriptor) -> str:
        return self.lexicon.field_name(f.name)

    def referenced_message(self, f: FieldDescriptor) -> MessageDescriptor:
        if f.type_name is None:
            raise DescriptorError(f"Message field '{f.name}' has no type name")
        return self.context.types.message(f.type_name)

    def referenced_enum(self, f: FieldDescriptor) -> EnumDescriptor:
        if f.type_name is None:
            raise DescriptorError(f"Enum field '{f.name}' has no type name")
        return self.context.types.enum(f.type_name)

    def is_fallback(self, f: FieldDescriptor) -> bool:
        """Check if a scalar kind is unknown to the target and degrades to text."""
        return not f.is_message and not f.is_enum and f.type not in self.lexicon.scalars

    def map_entry(self, f: FieldDescriptor) -> tuple[FieldDescriptor, FieldDescriptor]:
        """Return the (key, value) members of a map field's entry message."""
        entry = self.referenced_message(f)
        key = entry.find_field("key")
        value = entry.find_field("value")
        if key is None or value is None:
            missing = "key" if key is None else "value"
            raise DescriptorError(
                f"Map field '{f.name}' uses entry '{entry.full_name}' without a '{missing}' member"
            )
        return key, value

    def base_type(self, f: FieldDescriptor) -> str:
        """Type of a single value of `f`, ignoring map, repeated and presence."""
        if f.is_message:
            return self.struct_name(self.referenced_message(f))
        if f.is_enum:
            return self.enum_name(self.referenced_enum(f))
        if self.is_fallback(f):
            return self.lexicon.text_type
        return self.lexicon.scalars[f.type]

    def is_optional(self, f: FieldDescriptor) -> bool:
        """Check if `f` is wrapped in the target's optional-value type."""
        return not f.is_map and not f.repeated and f.has_presence

    def target_type(self, f: FieldDescriptor) -> str:
        """Full type expression of the struct member generated for `f`."""
        if f.is_map:
            key, value = self.map_entry(f)
            return self.lexicon.map_type.format(
                key=self.base_type(key), value=self.base_type(value)
            )
        base = self.base_type(f)
        if f.repeated:
            return self.lexicon.sequence_type.format(item=base)
        if f.has_presence:
            return self.lexicon.optional_type.format(item=base)
        return base
