"""protostruct code generator."""

from .config import TARGETS as TARGETS
from .config import ConfigError as ConfigError
from .config import GeneratorConfig as GeneratorConfig
from .descriptors import from_file_protos as from_file_protos
from .descriptors import load as load
from .descriptors import parse_descriptor_set as parse_descriptor_set
from .organizer import GeneratedFile as GeneratedFile
from .pipeline import generate as generate
from .pipeline import organize as organize
from .registry import DescriptorError as DescriptorError
from .registry import GenerationError as GenerationError
from .registry import NameCollisionError as NameCollisionError
from .types import *
