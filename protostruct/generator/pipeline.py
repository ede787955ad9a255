"""Entry point running one generation pass over a descriptor set."""

import logging
from collections.abc import Callable

from . import python, unreal
from .config import ConfigError, GeneratorConfig
from .mapping import TypeLexicon
from .organizer import FileOrganizer, FileOutput, GeneratedFile
from .registry import DescriptorError, GenerationContext, NameCollisionError, TypeRegistry
from .types import DescriptorSet

logger = logging.getLogger(__name__)

Renderer = Callable[[FileOutput, GenerationContext], list[GeneratedFile]]

TARGET_BACKENDS: dict[str, tuple[TypeLexicon, Renderer]] = {
    "unreal": (unreal.LEXICON, unreal.render),
    "python": (python.LEXICON, python.render),
}


def create_context(descriptor_set: DescriptorSet, config: GeneratorConfig) -> GenerationContext:
    """Build the context of a fresh generation pass."""
    if config.target not in TARGET_BACKENDS:
        raise ConfigError(f"Unknown target: {config.target}")
    lexicon, _ = TARGET_BACKENDS[config.target]
    return GenerationContext(config=config, lexicon=lexicon, types=TypeRegistry(descriptor_set))


def organize(
    descriptor_set: DescriptorSet,
    config: GeneratorConfig,
    files: list[str] | None = None,
) -> tuple[GenerationContext, list[FileOutput]]:
    """Emit the declarations and converters of every requested file."""
    context = create_context(descriptor_set, config)
    names = files or descriptor_set.files_to_generate or [f.name for f in descriptor_set.files]
    organizer = FileOrganizer(context)
    outputs = []
    for name in names:
        file = descriptor_set.get_file(name)
        if file is None:
            raise DescriptorError(f"File '{name}' is not part of the descriptor set")
        outputs.append(organizer.organize(file))
    return context, outputs


def generate(
    descriptor_set: DescriptorSet,
    config: GeneratorConfig,
    files: list[str] | None = None,
) -> list[GeneratedFile]:
    """Run a generation pass and render every unit for the configured target.

    `files` defaults to the descriptor set's `files_to_generate`, or to every
    file when that is empty as well.
    """
    context, outputs = organize(descriptor_set, config, files)
    _, render = TARGET_BACKENDS[config.target]
    generated: list[GeneratedFile] = []
    seen: dict[str, str] = {}
    for output in outputs:
        for unit in render(output, context):
            if unit.name in seen:
                raise NameCollisionError(
                    f"Output unit '{unit.name}' is generated for both '{seen[unit.name]}' "
                    f"and '{output.file.name}'"
                )
            seen[unit.name] = output.file.name
            generated.append(unit)
    logger.debug(f"Generated {len(generated)} {config.target} units")
    return generated
