"""Per-pass state shared by the emitters: type index, name registry, context."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .types import DescriptorSet, EnumDescriptor, FileDescriptor, MessageDescriptor

if TYPE_CHECKING:
    from .config import GeneratorConfig
    from .mapping import TypeLexicon


class GenerationError(RuntimeError):
    """Raised when a generation pass cannot produce valid output."""


class DescriptorError(GenerationError):
    """Raised when the descriptor tree breaks a structural contract."""


class NameCollisionError(GenerationError):
    """Raised when two descriptors produce the same generated identifier."""


@dataclass(frozen=True)
class TypeEntry:
    """Where a message or enum is declared."""

    descriptor: MessageDescriptor | EnumDescriptor
    file: FileDescriptor
    scope: tuple[str, ...]  # names of the enclosing messages, outermost first
    top_level: str | None  # full name of the outermost enclosing message

    @property
    def path(self) -> tuple[str, ...]:
        """Names from the outermost enclosing message down to this type."""
        return (*self.scope, self.descriptor.name)


class TypeRegistry:
    """Index of every message and enum in a descriptor set, by full name."""

    def __init__(self, descriptor_set: DescriptorSet):
        self._entries: dict[str, TypeEntry] = {}
        self._files = {file.name: file for file in descriptor_set.files}
        for file in descriptor_set.files:
            for enum in file.enums:
                self._add(TypeEntry(enum, file, (), None))
            for message in file.messages:
                self._add_message(message, file, (), message.full_name)

    def _add(self, entry: TypeEntry) -> None:
        full_name = entry.descriptor.full_name
        if full_name in self._entries:
            raise DescriptorError(f"Type '{full_name}' is declared more than once")
        self._entries[full_name] = entry

    def _add_message(
        self, message: MessageDescriptor, file: FileDescriptor, scope: tuple[str, ...], top: str
    ) -> None:
        self._add(TypeEntry(message, file, scope, top))
        inner_scope = (*scope, message.name)
        for enum in message.nested_enums:
            self._add(TypeEntry(enum, file, inner_scope, top))
        for nested in message.nested_messages:
            self._add_message(nested, file, inner_scope, top)

    def __contains__(self, full_name: str) -> bool:
        return full_name in self._entries

    def file(self, name: str) -> FileDescriptor:
        try:
            return self._files[name]
        except KeyError:
            raise DescriptorError(f"Unknown file '{name}'") from None

    def entry(self, full_name: str) -> TypeEntry:
        try:
            return self._entries[full_name]
        except KeyError:
            raise DescriptorError(f"Unresolved type reference '{full_name}'") from None

    def message(self, full_name: str) -> MessageDescriptor:
        descriptor = self.entry(full_name).descriptor
        if not isinstance(descriptor, MessageDescriptor):
            raise DescriptorError(f"'{full_name}' is not a message")
        return descriptor

    def enum(self, full_name: str) -> EnumDescriptor:
        descriptor = self.entry(full_name).descriptor
        if not isinstance(descriptor, EnumDescriptor):
            raise DescriptorError(f"'{full_name}' is not an enum")
        return descriptor


class NameRegistry:
    """Records which descriptor owns each generated identifier in one scope."""

    def __init__(self, scope: str = "generated code"):
        self.scope = scope
        self._owners: dict[str, str] = {}

    def claim(self, identifier: str, owner: str) -> None:
        """Register `identifier` for `owner`; claiming it again for the same owner is a no-op."""
        existing = self._owners.setdefault(identifier, owner)
        if existing != owner:
            raise NameCollisionError(
                f"'{identifier}' in {self.scope} is generated for both '{existing}' and '{owner}'"
            )

    def __contains__(self, identifier: str) -> bool:
        return identifier in self._owners


@dataclass
class GenerationContext:
    """Everything one generation pass threads through the emitters.

    Built once per run; `names` and `visited` live only as long as the pass.
    """

    config: GeneratorConfig
    lexicon: TypeLexicon
    types: TypeRegistry
    names: NameRegistry = field(default_factory=NameRegistry)
    visited: set[str] = field(default_factory=set)
