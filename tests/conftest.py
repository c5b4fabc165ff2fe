"""
Common test helpers
"""

# Standard
import os

# Third Party
from google.protobuf import descriptor_pb2
import pytest

# First Party
import alog

# Global logging config
alog.configure(
    default_level=os.environ.get("LOG_LEVEL", "info"),
    filters=os.environ.get("LOG_FILTERS", ""),
    formatter="json" if os.environ.get("LOG_JSON", "").lower() == "true" else "pretty",
    thread_id=os.environ.get("LOG_THREAD_ID", "").lower() == "true",
)

_FieldDescriptorProto = descriptor_pb2.FieldDescriptorProto


@pytest.fixture
def a_proto():
    """pkg/a.proto style file: Foo with an int32 id and a nested Bar"""
    yield descriptor_pb2.FileDescriptorProto(
        name="a.proto",
        package="pkg",
        syntax="proto3",
        message_type=[
            descriptor_pb2.DescriptorProto(
                name="Foo",
                field=[
                    _FieldDescriptorProto(
                        name="id",
                        number=1,
                        type=_FieldDescriptorProto.TYPE_INT32,
                        label=_FieldDescriptorProto.LABEL_OPTIONAL,
                    ),
                ],
                nested_type=[descriptor_pb2.DescriptorProto(name="Bar")],
            ),
        ],
    )


@pytest.fixture
def b_proto():
    """File that depends on a.proto through a pkg.Foo field"""
    yield descriptor_pb2.FileDescriptorProto(
        name="b.proto",
        package="pkg",
        syntax="proto3",
        dependency=["a.proto"],
        message_type=[
            descriptor_pb2.DescriptorProto(
                name="Baz",
                field=[
                    _FieldDescriptorProto(
                        name="foo",
                        number=1,
                        type=_FieldDescriptorProto.TYPE_MESSAGE,
                        label=_FieldDescriptorProto.LABEL_OPTIONAL,
                        type_name=".pkg.Foo",
                    ),
                ],
            ),
        ],
    )
