"""Groups the emitted declarations of a schema file into logical units."""

import logging
from dataclasses import dataclass

from .conversion import ConversionEmitter, ConverterDecl
from .emitter import DeclarationUnit, EnumDecl, EnumEmitter, StructEmitter
from .registry import GenerationContext
from .types import FileDescriptor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneratedFile:
    """One named unit of generated text."""

    name: str
    content: str


@dataclass
class FileOutput:
    """Everything generated for one schema file, before rendering.

    `enums` holds the top-level enums followed by the nested ones in
    declaration order. `units` has one entry per top-level message, and
    `converters` one entry per emitted message, nested ones included.
    """

    file: FileDescriptor
    enums: list[EnumDecl]
    units: list[DeclarationUnit]
    converters: list[ConverterDecl]

    def converted_files(self, context: GenerationContext) -> list[str]:
        """Names of other files whose converters this file's converters call."""
        result: dict[str, None] = {}
        for converter in self.converters:
            for full_name in converter.converted_messages():
                file_name = context.types.entry(full_name).file.name
                if file_name != self.file.name:
                    result.setdefault(file_name)
        return list(result)


class FileOrganizer:
    def __init__(self, context: GenerationContext):
        self.context = context
        self.enums = EnumEmitter(context)
        self.structs = StructEmitter(context)
        self.converters = ConversionEmitter(context)

    def organize(self, file: FileDescriptor) -> FileOutput:
        enums = [self.enums.emit(enum) for enum in file.enums]
        units: list[DeclarationUnit] = []
        for message in file.messages:
            if message.map_entry:
                logger.debug(f"Skipping map entry {message.full_name}")
                continue
            unit = self.structs.emit_unit(message, file)
            if unit is None:
                continue
            enums.extend(unit.enums)
            units.append(unit)

        converters = [
            self.converters.emit(struct.message) for unit in units for struct in unit.structs
        ]
        logger.debug(
            f"Organized {file.name}: {len(enums)} enums, {len(units)} units, "
            f"{len(converters)} converters"
        )
        return FileOutput(file, enums, units, converters)
