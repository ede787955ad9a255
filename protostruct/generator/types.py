"""Descriptor model consumed by the code generators.

The model mirrors the parts of a protobuf descriptor tree that generation
needs. Cross references between types are kept as fully-qualified names, so
a tree never contains cycles and always round-trips through JSON.
"""

from dataclasses import dataclass, field
from enum import StrEnum

from dataclasses_json import DataClassJsonMixin


class FieldType(StrEnum):
    """Declared kind of a field, one per protobuf wire type."""

    DOUBLE = "double"
    FLOAT = "float"
    INT64 = "int64"
    UINT64 = "uint64"
    INT32 = "int32"
    FIXED64 = "fixed64"
    FIXED32 = "fixed32"
    BOOL = "bool"
    STRING = "string"
    GROUP = "group"
    MESSAGE = "message"
    BYTES = "bytes"
    UINT32 = "uint32"
    ENUM = "enum"
    SFIXED32 = "sfixed32"
    SFIXED64 = "sfixed64"
    SINT32 = "sint32"
    SINT64 = "sint64"


@dataclass
class FieldDescriptor(DataClassJsonMixin):
    """A message field.

    `type_name` holds the fully-qualified name of the referenced message or
    enum and is None for scalars. `oneof_index` points into the owning
    message's `oneofs`.
    """

    name: str
    number: int
    type: FieldType
    repeated: bool = False
    is_map: bool = False
    has_presence: bool = False
    type_name: str | None = None
    oneof_index: int | None = None

    @property
    def is_message(self) -> bool:
        return self.type in (FieldType.MESSAGE, FieldType.GROUP) and self.type_name is not None

    @property
    def is_enum(self) -> bool:
        return self.type == FieldType.ENUM


@dataclass
class OneofDescriptor(DataClassJsonMixin):
    """A group of fields with at most one member set at a time.

    Synthetic oneofs only carry presence for a single optional field and are
    never visible in generated code.
    """

    name: str
    synthetic: bool = False


@dataclass
class EnumValueDescriptor(DataClassJsonMixin):
    """A single enum value."""

    name: str
    number: int


@dataclass
class EnumDescriptor(DataClassJsonMixin):
    """An enum type definition."""

    name: str
    full_name: str
    values: list[EnumValueDescriptor] = field(default_factory=list)


@dataclass
class MessageDescriptor(DataClassJsonMixin):
    """A message type definition."""

    name: str
    full_name: str
    fields: list[FieldDescriptor] = field(default_factory=list)
    nested_enums: list[EnumDescriptor] = field(default_factory=list)
    nested_messages: list["MessageDescriptor"] = field(default_factory=list)
    oneofs: list[OneofDescriptor] = field(default_factory=list)
    map_entry: bool = False

    def find_field(self, name: str) -> FieldDescriptor | None:
        """Return the field called `name`, if any."""
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def oneof_fields(self, index: int) -> list[FieldDescriptor]:
        """Return the members of the oneof at `index`, in declared order."""
        return [f for f in self.fields if f.oneof_index == index]

    def real_oneofs(self) -> list[tuple[int, OneofDescriptor]]:
        """Return (index, oneof) for every oneof that is not synthetic."""
        return [(i, o) for i, o in enumerate(self.oneofs) if not o.synthetic]

    def in_real_oneof(self, f: FieldDescriptor) -> bool:
        """Check if a field is a member of a real (user-authored) oneof."""
        return f.oneof_index is not None and not self.oneofs[f.oneof_index].synthetic


@dataclass
class FileDescriptor(DataClassJsonMixin):
    """A schema file and its top-level declarations."""

    name: str
    package: str = ""
    syntax: str = "proto3"
    dependencies: list[str] = field(default_factory=list)
    enums: list[EnumDescriptor] = field(default_factory=list)
    messages: list[MessageDescriptor] = field(default_factory=list)


@dataclass
class DescriptorSet(DataClassJsonMixin):
    """Every file known to one generation request.

    `files_to_generate` names the files output is produced for; the remaining
    files are only there to resolve references.
    """

    files: list[FileDescriptor] = field(default_factory=list)
    files_to_generate: list[str] = field(default_factory=list)

    def get_file(self, name: str) -> FileDescriptor | None:
        """Return the file called `name`, if any."""
        for f in self.files:
            if f.name == name:
                return f
        return None
