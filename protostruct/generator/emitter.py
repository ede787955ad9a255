"""Declaration emitters: enums, union discriminators and structs."""

import logging
from dataclasses import dataclass

from .mapping import TypeMapper
from .registry import GenerationContext, NameRegistry
from .types import EnumDescriptor, FieldDescriptor, FileDescriptor, MessageDescriptor

logger = logging.getLogger(__name__)


@dataclass
class EnumMember:
    name: str
    number: int


@dataclass
class EnumDecl:
    """A generated enum, either from the schema or a union discriminator."""

    name: str
    full_name: str
    members: list[EnumMember]
    discriminator: bool = False

    @property
    def default(self) -> str | None:
        """Name of the first declared member."""
        return self.members[0].name if self.members else None


@dataclass
class StructField:
    name: str
    type: str
    source: FieldDescriptor


@dataclass
class DiscriminatorField:
    """Struct member recording which member of a union is set."""

    name: str
    type: str
    default: str
    oneof: str


@dataclass
class StructDecl:
    name: str
    message: MessageDescriptor
    discriminators: list[EnumDecl]
    union_fields: list[DiscriminatorField]
    fields: list[StructField]

    @property
    def full_name(self) -> str:
        return self.message.full_name


class DependencyCollector:
    """Collects the messages and enums a declaration unit refers to.

    Messages are recorded by full name, in order of first use and at most
    once. Messages declared inside the unit itself are not dependencies.
    """

    def __init__(self, context: GenerationContext, unit: str):
        self.types = context.types
        self.mapper = TypeMapper(context)
        self.unit = unit
        self.messages: dict[str, None] = {}
        self.enums: dict[str, None] = {}

    def add_field(self, f: FieldDescriptor) -> None:
        for target in self.mapper.map_entry(f) if f.is_map else (f,):
            if target.is_message and target.type_name is not None:
                if self.types.entry(target.type_name).top_level != self.unit:
                    self.messages.setdefault(target.type_name)
            elif target.is_enum and target.type_name is not None:
                self.enums.setdefault(target.type_name)

    def units(self) -> list[str]:
        """Full names of the top-level messages whose units must be referenced."""
        result: dict[str, None] = {}
        for full_name in self.messages:
            top_level = self.types.entry(full_name).top_level
            if top_level is not None:
                result.setdefault(top_level)
        return list(result)

    def enum_files(self) -> list[str]:
        """Names of the files declaring the referenced enums."""
        result: dict[str, None] = {}
        for full_name in self.enums:
            result.setdefault(self.types.entry(full_name).file.name)
        return list(result)


@dataclass
class DeclarationUnit:
    """Declarations generated for one top-level message.

    `structs` lists nested messages before the messages enclosing them.
    `enums` holds the nested schema enums, which belong to the file's enum
    unit rather than to this one.
    """

    name: str
    message: MessageDescriptor
    file: FileDescriptor
    structs: list[StructDecl]
    enums: list[EnumDecl]
    dependencies: DependencyCollector


class EnumEmitter:
    def __init__(self, context: GenerationContext):
        self.context = context
        self.mapper = TypeMapper(context)

    def emit(self, enum: EnumDescriptor) -> EnumDecl:
        name = self.mapper.enum_name(enum)
        self.context.names.claim(name, enum.full_name)
        members = NameRegistry(f"enum '{name}'")
        result: list[EnumMember] = []
        for value in enum.values:
            member = self.context.lexicon.member_name(value.name)
            members.claim(member, value.name)
            result.append(EnumMember(member, value.number))
        return EnumDecl(name, enum.full_name, result)


class UnionEmitter:
    def __init__(self, context: GenerationContext):
        self.context = context
        self.mapper = TypeMapper(context)

    def emit(self, message: MessageDescriptor, index: int) -> EnumDecl | None:
        """Emit the discriminator enum for the oneof at `index` of `message`.

        Synthetic oneofs produce nothing.
        """
        oneof = message.oneofs[index]
        if oneof.synthetic:
            logger.debug(f"Skipping synthetic oneof {message.full_name}.{oneof.name}")
            return None
        name = self.mapper.discriminator_name(message, oneof)
        full_name = f"{message.full_name}.{oneof.name}"
        self.context.names.claim(name, full_name)
        members = NameRegistry(f"enum '{name}'")
        unset = self.context.config.discriminator_unset
        members.claim(unset, "")
        result = [EnumMember(unset, 0)]
        for number, f in enumerate(message.oneof_fields(index), start=1):
            member = self.context.lexicon.member_name(f.name)
            members.claim(member, f.name)
            result.append(EnumMember(member, number))
        return EnumDecl(name, full_name, result, discriminator=True)


class StructEmitter:
    def __init__(self, context: GenerationContext):
        self.context = context
        self.mapper = TypeMapper(context)
        self.enums = EnumEmitter(context)
        self.unions = UnionEmitter(context)

    def emit_unit(self, message: MessageDescriptor, file: FileDescriptor) -> DeclarationUnit | None:
        """Emit a top-level message together with everything nested in it."""
        if message.map_entry or message.full_name in self.context.visited:
            return None
        collector = DependencyCollector(self.context, message.full_name)
        structs: list[StructDecl] = []
        enums: list[EnumDecl] = []
        self.emit(message, collector, structs, enums)
        return DeclarationUnit(
            self.mapper.struct_name(message), message, file, structs, enums, collector
        )

    def emit(
        self,
        message: MessageDescriptor,
        collector: DependencyCollector,
        structs: list[StructDecl],
        enums: list[EnumDecl],
    ) -> None:
        if message.map_entry:
            logger.debug(f"Skipping map entry {message.full_name}")
            return
        if message.full_name in self.context.visited:
            return
        self.context.visited.add(message.full_name)

        enums.extend(self.enums.emit(enum) for enum in message.nested_enums)
        for nested in message.nested_messages:
            self.emit(nested, collector, structs, enums)
        # Same-unit messages a field holds must be declared before this struct
        for referenced in self._unit_references(message, collector.unit):
            self.emit(referenced, collector, structs, enums)
        structs.append(self.emit_struct(message, collector))

    def _unit_references(self, message: MessageDescriptor, unit: str) -> list[MessageDescriptor]:
        """Messages declared in `unit` that the fields of `message` hold by value."""
        result: list[MessageDescriptor] = []
        for f in message.fields:
            target = self.mapper.map_entry(f)[1] if f.is_map else f
            if not target.is_message or target.type_name is None:
                continue
            if self.context.types.entry(target.type_name).top_level == unit:
                result.append(self.context.types.message(target.type_name))
        return result

    def emit_struct(
        self, message: MessageDescriptor, collector: DependencyCollector | None = None
    ) -> StructDecl:
        """Emit the declaration of `message` alone, without nested types."""
        name = self.mapper.struct_name(message)
        self.context.names.claim(name, message.full_name)
        members = NameRegistry(f"struct '{name}'")

        discriminators: list[EnumDecl] = []
        union_fields: list[DiscriminatorField] = []
        for index, oneof in message.real_oneofs():
            decl = self.unions.emit(message, index)
            if decl is None:
                continue
            discriminators.append(decl)
            field_name = self.mapper.discriminator_field(oneof)
            members.claim(field_name, oneof.name)
            union_fields.append(
                DiscriminatorField(field_name, decl.name, decl.members[0].name, oneof.name)
            )

        fields: list[StructField] = []
        for f in message.fields:
            field_name = self.mapper.field_name(f)
            members.claim(field_name, f.name)
            fields.append(StructField(field_name, self.mapper.target_type(f), f))
            if collector is not None:
                collector.add_field(f)

        logger.debug(f"Emitted struct {name} with {len(fields)} fields")
        return StructDecl(name, message, discriminators, union_fields, fields)
