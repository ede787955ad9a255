"""protoc plugin entry point.

Installed as `protoc-gen-protostruct`, so protoc runs it for
`--protostruct_out=<params>:<dir>`. The parameter string is a comma
separated list of key=value pairs, see `GeneratorConfig.from_parameter`.
"""

import logging
import sys

from google.protobuf.compiler import plugin_pb2

from .config import GeneratorConfig
from .descriptors import from_file_protos
from .pipeline import generate
from .registry import GenerationError

logger = logging.getLogger(__name__)


def generate_code(request: plugin_pb2.CodeGeneratorRequest) -> plugin_pb2.CodeGeneratorResponse:
    """Run a generation pass for a protoc request and build the response.

    Generation errors are reported through the response's `error` field, in
    which case no files are returned.
    """
    response = plugin_pb2.CodeGeneratorResponse()
    response.supported_features = plugin_pb2.CodeGeneratorResponse.FEATURE_PROTO3_OPTIONAL
    try:
        config = GeneratorConfig.from_parameter(request.parameter)
        descriptor_set = from_file_protos(request.proto_file, request.file_to_generate)
        generated = generate(descriptor_set, config)
    except GenerationError as e:
        logger.debug(f"Generation failed: {e}")
        response.error = str(e)
        return response

    for unit in generated:
        response_file = response.file.add()
        response_file.name = unit.name
        response_file.content = unit.content
    return response


def main() -> None:
    """Execute the protoc plugin workflow."""
    request = plugin_pb2.CodeGeneratorRequest()
    payload = sys.stdin.buffer.read()
    if payload:
        request.ParseFromString(payload)

    response = generate_code(request)
    sys.stdout.buffer.write(response.SerializeToString())


if __name__ == "__main__":
    main()
