"""Unreal Engine code generator: USTRUCTs, UENUMs and a converter class."""

from collections.abc import Iterable
from pathlib import PurePosixPath

from jinja2 import Environment, PackageLoader

from .conversion import ValueConversion, ValueKind
from .emitter import EnumDecl
from .mapping import FieldCase, TypeLexicon, TypeMapper
from .organizer import FileOutput, GeneratedFile
from .registry import GenerationContext
from .types import FieldDescriptor, FieldType, FileDescriptor
from .util import to_pascal_case, to_upper_camel_case

env = Environment(
    loader=PackageLoader("protostruct.generator", "templates"),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    line_comment_prefix="%%",
    line_statement_prefix="%",
)

# Kinds missing here fall back to FString
PRIMITIVE_TYPE_MAP = {
    FieldType.DOUBLE: "double",
    FieldType.FLOAT: "float",
    FieldType.INT64: "int64",
    FieldType.UINT64: "uint64",
    FieldType.INT32: "int32",
    FieldType.BOOL: "bool",
    FieldType.STRING: "FString",
}

LEXICON = TypeLexicon(
    scalars=PRIMITIVE_TYPE_MAP,
    text_type="FString",
    map_type="TMap<{key}, {value}>",
    sequence_type="TArray<{item}>",
    optional_type="TOptional<{item}>",
    field_case=FieldCase.PASCAL,
)


def file_base(file: FileDescriptor) -> str:
    """Base name shared by the units of a schema file: "my_api.proto" -> "MyApi"."""
    return to_pascal_case(PurePosixPath(file.name).stem)


def pb_header(file: FileDescriptor) -> str:
    """Header protoc generates for the C++ source messages."""
    return f"{PurePosixPath(file.name).with_suffix('').as_posix()}.pb.h"


def _namespace(file: FileDescriptor) -> str:
    if not file.package:
        return "::"
    return f"::{file.package.replace('.', '::')}::"


def _text(expr: str) -> str:
    return f"FString(UTF8_TO_TCHAR({expr}.c_str()))"


def _fits_uint8(numbers: Iterable[int]) -> bool:
    return all(0 <= n <= 255 for n in numbers)


def underlying_type(enum: EnumDecl) -> str:
    """Blueprint enums must be uint8; wider or negative values fall back to a plain int32 enum."""
    return "uint8" if _fits_uint8(m.number for m in enum.members) else "int32"


def render(output: FileOutput, context: GenerationContext) -> list[GeneratedFile]:
    """Render the units of one schema file to Unreal Engine C++ source."""
    config = context.config
    types = context.types
    mapper = TypeMapper(context)
    base = file_base(output.file)

    def source_type(full_name: str) -> str:
        entry = types.entry(full_name)
        return _namespace(entry.file) + "_".join(entry.path)

    def convert(value: ValueConversion, expr: str) -> str:
        if value.kind == ValueKind.MESSAGE:
            return f"{config.converter_class}::Convert({expr})"
        if value.kind == ValueKind.TEXT:
            return _text(expr)
        if value.kind == ValueKind.ENUM:
            return f"static_cast<{value.type}>({expr})"
        if value.kind == ValueKind.STRINGIFY:
            if value.source_type == FieldType.BYTES:
                return _text(expr)
            return _text(f"std::to_string({expr})")
        return expr

    def accessor(name: str) -> str:
        return f"In.{name.lower()}()"

    def case_constant(name: str) -> str:
        return f"k{to_upper_camel_case(name)}"

    def reflected(f: FieldDescriptor) -> bool:
        """Whether `f` can carry the property macro; plain int32 enums are not reflected."""
        for target in mapper.map_entry(f) if f.is_map else (f,):
            if target.is_enum and target.type_name is not None:
                if not _fits_uint8(v.number for v in types.enum(target.type_name).values):
                    return False
        return True

    files: list[GeneratedFile] = []
    enum_header = f"{base}Enums.h"
    files.append(
        GeneratedFile(
            enum_header,
            env.get_template("unreal_enums.h.j2").render(
                base=base, enums=output.enums, config=config, underlying_type=underlying_type
            ),
        )
    )

    for unit in output.units:
        includes = [enum_header]
        for file_name in unit.dependencies.enum_files():
            header = f"{file_base(types.file(file_name))}Enums.h"
            if header not in includes:
                includes.append(header)
        for full_name in unit.dependencies.units():
            includes.append(f"{mapper.struct_name(types.message(full_name))}.h")
        files.append(
            GeneratedFile(
                f"{unit.name}.h",
                env.get_template("unreal_struct.h.j2").render(
                    unit=unit,
                    includes=includes,
                    config=config,
                    underlying_type=underlying_type,
                    reflected=reflected,
                ),
            )
        )

    converter_includes = [
        f"{file_base(types.file(name))}Converter.h" for name in output.converted_files(context)
    ]
    template_args = {
        "base": base,
        "output": output,
        "config": config,
        "pb_header": pb_header(output.file),
        "converter_includes": converter_includes,
        "source_type": source_type,
        "convert": convert,
        "accessor": accessor,
        "case_constant": case_constant,
    }
    files.append(
        GeneratedFile(
            f"{base}Converter.h", env.get_template("unreal_converter.h.j2").render(**template_args)
        )
    )
    files.append(
        GeneratedFile(
            f"{base}Converter.cpp",
            env.get_template("unreal_converter.cpp.j2").render(**template_args),
        )
    )
    return files
