"""protostruct - native struct and converter generator for protobuf schemas."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("protostruct")
except PackageNotFoundError:
    __version__ = "(local)"
