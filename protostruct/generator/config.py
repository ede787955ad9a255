"""Fixed strings threaded through every emitter, with per-target defaults."""

from dataclasses import dataclass, fields, replace
from typing import Any

from .registry import GenerationError

TARGETS = ("unreal", "python")


class ConfigError(GenerationError):
    """Raised for an unknown target or an invalid configuration parameter."""


@dataclass(frozen=True)
class GeneratorConfig:
    """Configuration constants for one generation run."""

    target: str
    struct_prefix: str
    enum_prefix: str
    visibility: str
    struct_declaration: str
    enum_declaration: str
    converter_class: str
    discriminator_unset: str
    source_module: str | None = None

    @classmethod
    def for_target(cls, target: str, **overrides: Any) -> "GeneratorConfig":
        """Return the defaults for `target` with `overrides` applied."""
        if target == "unreal":
            config = cls(
                target=target,
                struct_prefix="F",
                enum_prefix="E",
                visibility="UPROPERTY(VisibleAnywhere, BlueprintReadOnly)",
                struct_declaration="USTRUCT(BlueprintType)",
                enum_declaration="UENUM(BlueprintType)",
                converter_class="ProtoToUStructConverter",
                discriminator_unset="None",
            )
        elif target == "python":
            config = cls(
                target=target,
                struct_prefix="",
                enum_prefix="",
                visibility="",
                struct_declaration="@dataclass",
                enum_declaration="",
                converter_class="",
                discriminator_unset="Unset",
            )
        else:
            raise ConfigError(f"Unknown target: {target}")
        return config.with_overrides(**overrides)

    def with_overrides(self, **overrides: Any) -> "GeneratorConfig":
        """Return a copy with every non-None override applied."""
        known = {f.name for f in fields(self)}
        for key in overrides:
            if key not in known or key == "target":
                raise ConfigError(f"Unknown configuration parameter: {key}")
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    @classmethod
    def from_parameter(cls, parameter: str, default_target: str = "unreal") -> "GeneratorConfig":
        """Build a config from a protoc plugin parameter string.

        The string is a comma separated list of key=value pairs, for example
        "target=python,source_module=demo.api_pb2".
        """
        values: dict[str, str] = {}
        for chunk in parameter.split(","):
            key, _, value = chunk.partition("=")
            key = key.strip()
            if not key:
                continue
            values[key] = value.strip()
        target = values.pop("target", default_target)
        return cls.for_target(target, **values)
