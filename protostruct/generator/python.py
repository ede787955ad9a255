"""Python code generator: dataclasses, IntEnums and converter functions."""

import keyword
from pathlib import PurePosixPath

from jinja2 import Environment, PackageLoader

from .conversion import ValueConversion, ValueKind
from .emitter import StructField
from .mapping import FieldCase, TypeLexicon, TypeMapper
from .organizer import FileOutput, GeneratedFile
from .registry import GenerationContext
from .types import FieldType, FileDescriptor
from .util import to_snake_case

env = Environment(
    loader=PackageLoader("protostruct.generator", "templates"),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    line_comment_prefix="%%",
    line_statement_prefix="%",
)

# Map protobuf scalar kinds to Python type annotations
PRIMITIVE_TYPE_MAP = {
    FieldType.DOUBLE: "float",
    FieldType.FLOAT: "float",
    FieldType.INT64: "int",
    FieldType.UINT64: "int",
    FieldType.INT32: "int",
    FieldType.FIXED64: "int",
    FieldType.FIXED32: "int",
    FieldType.BOOL: "bool",
    FieldType.STRING: "str",
    FieldType.BYTES: "bytes",
    FieldType.UINT32: "int",
    FieldType.SFIXED32: "int",
    FieldType.SFIXED64: "int",
    FieldType.SINT32: "int",
    FieldType.SINT64: "int",
}

ZERO_VALUES = {
    "float": "0.0",
    "int": "0",
    "bool": "False",
    "str": '""',
    "bytes": 'b""',
}

LEXICON = TypeLexicon(
    scalars=PRIMITIVE_TYPE_MAP,
    text_type="str",
    map_type="dict[{key}, {value}]",
    sequence_type="list[{item}]",
    optional_type="{item} | None",
    field_case=FieldCase.SCHEMA,
    reserved=frozenset(keyword.kwlist),
)


def file_base(file: FileDescriptor) -> str:
    """Module prefix shared by the units of a schema file: "MyApi.proto" -> "my_api"."""
    return to_snake_case(PurePosixPath(file.name).stem.replace("-", "_"))


def unit_module(struct_name: str) -> str:
    return to_snake_case(struct_name)


def source_module(file: FileDescriptor) -> str:
    """Module protoc generates for the source messages: "a/b.proto" -> "a.b_pb2"."""
    path = PurePosixPath(file.name).with_suffix("")
    return ".".join((*path.parent.parts, f"{path.name.replace('-', '_')}_pb2"))


class _Imports:
    """Names to import, grouped by module in order of first use."""

    def __init__(self) -> None:
        self._modules: dict[str, dict[str, None]] = {}

    def add(self, module: str, name: str) -> None:
        self._modules.setdefault(module, {}).setdefault(name)

    def items(self) -> list[tuple[str, list[str]]]:
        return [(module, list(names)) for module, names in self._modules.items()]


def render(output: FileOutput, context: GenerationContext) -> list[GeneratedFile]:
    """Render the units of one schema file to Python modules."""
    config = context.config
    types = context.types
    mapper = TypeMapper(context)
    base = file_base(output.file)
    enum_module = f"{base}_enums"

    def enum_import(full_name: str) -> tuple[str, str]:
        entry = types.entry(full_name)
        return f"{file_base(entry.file)}_enums", mapper.enum_name(types.enum(full_name))

    def default(f: StructField) -> str:
        source = f.source
        if source.is_map:
            return "_field(default_factory=dict)"
        if source.repeated:
            return "_field(default_factory=list)"
        if mapper.is_optional(source) or source.is_message:
            return "None"
        if source.is_enum:
            enum = mapper.referenced_enum(source)
            if not enum.values:
                return f"{f.type}(0)"
            return f"{f.type}.{LEXICON.member_name(enum.values[0].name)}"
        return ZERO_VALUES.get(f.type, ZERO_VALUES["str"])

    def attr(name: str) -> str:
        if keyword.iskeyword(name):
            return f'getattr(source, "{name}")'
        return f"source.{name}"

    def convert(value: ValueConversion, expr: str) -> str:
        if value.kind == ValueKind.MESSAGE:
            return f"convert_{value.type}({expr})"
        if value.kind in (ValueKind.TEXT, ValueKind.STRINGIFY):
            return f"str({expr})"
        if value.kind == ValueKind.ENUM:
            return f"{value.type}({expr})"
        return expr

    def source_path(full_name: str) -> str:
        return ".".join(types.entry(full_name).path)

    files: list[GeneratedFile] = [
        GeneratedFile(
            f"{enum_module}.py",
            env.get_template("python_enums.py.j2").render(file=output.file, enums=output.enums),
        )
    ]

    for unit in output.units:
        imports = _Imports()
        for full_name in unit.dependencies.enums:
            imports.add(*enum_import(full_name))
        type_imports = _Imports()
        for full_name in unit.dependencies.messages:
            top_level = types.entry(full_name).top_level or full_name
            type_imports.add(
                unit_module(mapper.struct_name(types.message(top_level))),
                mapper.struct_name(types.message(full_name)),
            )
        files.append(
            GeneratedFile(
                f"{unit_module(unit.name)}.py",
                env.get_template("python_struct.py.j2").render(
                    file=output.file,
                    unit=unit,
                    config=config,
                    imports=imports.items(),
                    type_imports=type_imports.items(),
                    discriminators=any(s.discriminators for s in unit.structs),
                    default=default,
                ),
            )
        )

    struct_imports = _Imports()
    for unit in output.units:
        for struct in unit.structs:
            struct_imports.add(unit_module(unit.name), struct.name)
            for enum in struct.discriminators:
                struct_imports.add(unit_module(unit.name), enum.name)

    converter_imports = _Imports()
    for converter in output.converters:
        for full_name in converter.referenced(ValueKind.ENUM):
            converter_imports.add(*enum_import(full_name))
    for module, names in struct_imports.items():
        for name in names:
            converter_imports.add(module, name)
    for converter in output.converters:
        for full_name in converter.converted_messages():
            entry = types.entry(full_name)
            if entry.file.name != output.file.name:
                converter_imports.add(
                    f"{file_base(entry.file)}_converter",
                    f"convert_{mapper.struct_name(types.message(full_name))}",
                )

    files.append(
        GeneratedFile(
            f"{base}_converter.pyi",
            env.get_template("python_converter.pyi.j2").render(
                file=output.file,
                output=output,
                imports=struct_imports.items(),
                source_module=config.source_module or source_module(output.file),
                source_path=source_path,
            ),
        )
    )
    files.append(
        GeneratedFile(
            f"{base}_converter.py",
            env.get_template("python_converter.py.j2").render(
                file=output.file,
                output=output,
                imports=converter_imports.items(),
                convert=convert,
                attr=attr,
            ),
        )
    )
    return files
