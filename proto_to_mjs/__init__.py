"""
This library holds a protoc plugin that converts Protobuf schemas into ES
module (.mjs) javascript classes.

References:
* https://developers.google.com/protocol-buffers
* https://protobuf.dev/reference/other/#plugins

Example:

```
import proto_to_mjs
from google.protobuf import descriptor_pb2

fd_proto = descriptor_pb2.FileDescriptorProto(
    name="foo.proto",
    package="foobar",
    message_type=[
        descriptor_pb2.DescriptorProto(
            name="Foo",
            field=[
                descriptor_pb2.FieldDescriptorProto(
                    name="foo_count",
                    number=1,
                    type=descriptor_pb2.FieldDescriptorProto.TYPE_INT32,
                    label=descriptor_pb2.FieldDescriptorProto.LABEL_OPTIONAL,
                ),
            ],
        ),
    ],
)

def write_foo_mjs(filename: str):
    \"\"\"Write out the .mjs module for foo.proto to the given filename\"\"\"
    with open(filename, "w") as handle:
        handle.write(proto_to_mjs.descriptor_to_mjs(fd_proto))
```
"""

# Local
from .descriptor_to_mjs import MjsGenerator, descriptor_to_mjs
from .plugin import get_output_file_name, process_request
from .type_mapper import TypeMapper
from .type_resolver import TypeInfo, TypeResolver
from .utils import snake_to_camel_case, snake_to_pascal_case
