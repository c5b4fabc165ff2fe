"""
This module implements the protoc plugin entrypoint. protoc writes a
serialized CodeGeneratorRequest to the plugin's stdin and expects a serialized
CodeGeneratorResponse on its stdout.

Usage:

```
protoc --plugin=protoc-gen-mjs=$(which protoc-gen-mjs) --mjs_out=gen foo.proto
```
"""

# Standard
from typing import BinaryIO, Optional
import os
import sys

# Third Party
from google.protobuf.compiler import plugin_pb2
from google.protobuf.message import DecodeError

# First Party
import alog

# Local
from .descriptor_to_mjs import MJS_FILE_EXTENSION, MjsGenerator
from .type_resolver import TypeResolver
from .utils import change_extension

log = alog.use_channel("P2MPL")


## Interface ###################################################################


def get_output_file_name(proto_file_name: str) -> str:
    """Get the name of the generated module for a .proto file"""
    return change_extension(proto_file_name, MJS_FILE_EXTENSION)


def process_request(
    request: plugin_pb2.CodeGeneratorRequest,
) -> plugin_pb2.CodeGeneratorResponse:
    """Generate a module for every file that protoc asked for. The other files
    in the request are only used to resolve cross-file type references.

    Args:
        request:  plugin_pb2.CodeGeneratorRequest
            The parsed request

    Returns:
        response:  plugin_pb2.CodeGeneratorResponse
            One generated file per entry in request.file_to_generate
    """
    response = plugin_pb2.CodeGeneratorResponse()
    response.supported_features = (
        plugin_pb2.CodeGeneratorResponse.FEATURE_PROTO3_OPTIONAL
    )

    files_to_generate = set(request.file_to_generate)
    for proto_file in request.proto_file:
        if proto_file.name not in files_to_generate:
            continue
        log.debug("Generating %s", proto_file.name)
        type_resolver = TypeResolver(proto_file, request.proto_file)
        response.file.add(
            name=get_output_file_name(proto_file.name),
            content=MjsGenerator(proto_file, type_resolver).generate(),
        )
    return response


def run(input_stream: BinaryIO, output_stream: BinaryIO) -> int:
    """Read a request from input_stream, process it, and write the response to
    output_stream

    Returns:
        exit_code:  int
            0 on success, 1 if the request could not be parsed or the response
            could not be written
    """
    try:
        request = plugin_pb2.CodeGeneratorRequest.FromString(input_stream.read())
    except DecodeError as err:
        log.error("Failed to parse CodeGeneratorRequest: %s", err)
        return 1

    for file_name in request.file_to_generate:
        log.info("  - %s", file_name)
    response = process_request(request)

    try:
        output_stream.write(response.SerializeToString(deterministic=True))
        output_stream.flush()
    except OSError as err:
        log.error("Failed to write CodeGeneratorResponse: %s", err)
        return 1
    return 0


def main(
    input_stream: Optional[BinaryIO] = None,
    output_stream: Optional[BinaryIO] = None,
) -> int:
    """Console entrypoint. Logging is configured from the environment and always
    goes to stderr since stdout carries the response.
    """
    alog.configure(
        default_level=os.environ.get("LOG_LEVEL", "warning"),
        filters=os.environ.get("LOG_FILTERS", ""),
        formatter="json" if os.environ.get("LOG_JSON", "").lower() == "true" else "pretty",
        thread_id=os.environ.get("LOG_THREAD_ID", "").lower() == "true",
    )
    return run(
        input_stream if input_stream is not None else sys.stdin.buffer,
        output_stream if output_stream is not None else sys.stdout.buffer,
    )
