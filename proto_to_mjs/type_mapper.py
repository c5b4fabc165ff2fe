"""
This module maps protobuf field descriptors onto the JSDoc type expressions
used in the generated javascript modules
"""

# Standard
from typing import Callable, Optional

# Third Party
from google.protobuf import descriptor_pb2

# First Party
import alog

# Local
from .utils import snake_to_pascal_case

log = alog.use_channel("P2MTM")


## Globals #####################################################################

_FieldDescriptorProto = descriptor_pb2.FieldDescriptorProto

# NOTE: 64 bit integers are emitted as plain numbers even though javascript
#   numbers can only hold 53 bits of integer precision
JS_SCALAR_TYPES = {
    _FieldDescriptorProto.TYPE_DOUBLE: "number",
    _FieldDescriptorProto.TYPE_FLOAT: "number",
    _FieldDescriptorProto.TYPE_INT64: "number",
    _FieldDescriptorProto.TYPE_UINT64: "number",
    _FieldDescriptorProto.TYPE_INT32: "number",
    _FieldDescriptorProto.TYPE_FIXED64: "number",
    _FieldDescriptorProto.TYPE_FIXED32: "number",
    _FieldDescriptorProto.TYPE_UINT32: "number",
    _FieldDescriptorProto.TYPE_SFIXED32: "number",
    _FieldDescriptorProto.TYPE_SFIXED64: "number",
    _FieldDescriptorProto.TYPE_SINT32: "number",
    _FieldDescriptorProto.TYPE_SINT64: "number",
    _FieldDescriptorProto.TYPE_BOOL: "boolean",
    _FieldDescriptorProto.TYPE_STRING: "string",
    _FieldDescriptorProto.TYPE_BYTES: "Uint8Array",
}

# Type used when nothing better is known
JS_UNTYPED = "any"

# Prefix for the flattened top-level classes that nested types are hoisted to
NESTED_CLASS_PREFIX = "__"

# Signature of the pluggable naming policy: (type_name, file) -> name or ""
TypeNameTransform = Callable[[str, descriptor_pb2.FileDescriptorProto], str]


## Interface ###################################################################


class TypeMapper:
    """The TypeMapper converts a field's wire type and shape into a javascript
    type expression. Enum and message names go through an optional
    type_name_transform first so that callers can swap the naming policy
    (e.g. to qualify types imported from other modules) without changing the
    mapping rules.
    """

    def __init__(self, type_name_transform: Optional[TypeNameTransform] = None):
        self.type_name_transform = type_name_transform

    def js_type(
        self,
        field: descriptor_pb2.FieldDescriptorProto,
        proto_file: descriptor_pb2.FileDescriptorProto,
    ) -> str:
        """Get the full type expression for the field, including the array
        suffix for repeated fields
        """
        if field.label == field.LABEL_REPEATED:
            # Maps are serialized as plain untyped objects
            if self.is_map_field(field):
                return JS_UNTYPED
            return f"{self.base_js_type(field, proto_file)}[]"
        return self.base_js_type(field, proto_file)

    def base_js_type(
        self,
        field: descriptor_pb2.FieldDescriptorProto,
        proto_file: descriptor_pb2.FileDescriptorProto,
    ) -> str:
        """Get the type expression for a single element of the field"""
        scalar_type = JS_SCALAR_TYPES.get(field.type)
        if scalar_type is not None:
            return scalar_type
        if field.type in (field.TYPE_ENUM, field.TYPE_MESSAGE):
            if self.type_name_transform is not None:
                transformed = self.type_name_transform(field.type_name, proto_file)
                if transformed:
                    log.debug3("Transformed %s -> %s", field.type_name, transformed)
                    return transformed
            return self.message_type_name(field.type_name, proto_file)
        log.debug2("No javascript type for field %s of type %d", field.name, field.type)
        return JS_UNTYPED

    @staticmethod
    def is_map_field(field: descriptor_pb2.FieldDescriptorProto) -> bool:
        """Check whether this field looks like a map field

        NOTE: This is a name heuristic: any repeated message field whose type
            name contains "Entry" is treated as a map, including user defined
            messages that just happen to have "Entry" in their names. See
            is_map_entry for the structural check.
        """
        return (
            field.type == field.TYPE_MESSAGE
            and field.label == field.LABEL_REPEATED
            and "Entry" in field.type_name
        )

    @staticmethod
    def is_map_entry(message: descriptor_pb2.DescriptorProto) -> bool:
        """Check whether this message is the synthetic entry of a map field"""
        return message.options.map_entry

    @staticmethod
    def method_name(field: descriptor_pb2.FieldDescriptorProto) -> str:
        """Get the stem used for the generated accessor method names"""
        return snake_to_pascal_case(field.name)

    @classmethod
    def message_type_name(
        cls,
        type_name: str,
        proto_file: descriptor_pb2.FileDescriptorProto,
    ) -> str:
        """Default naming rule for enum and message references. Types nested in
        another message of the same package get their independent class name,
        everything else is referenced by its simple name.
        """
        type_name = _strip_leading_dot(type_name)
        package_prefix = f"{proto_file.package}."
        if proto_file.package and type_name.startswith(package_prefix):
            if "." in type_name[len(package_prefix) :]:
                return cls.independent_class_name(type_name, proto_file)
        return type_name.rsplit(".", 1)[-1]

    @staticmethod
    def independent_class_name(
        full_type_name: str,
        proto_file: Optional[descriptor_pb2.FileDescriptorProto] = None,
    ) -> str:
        """Get the flat class name a nested type is hoisted to, e.g.
        foo.bar.Outer.Inner -> __Outer_Inner when the file's package is foo.bar
        """
        full_type_name = _strip_leading_dot(full_type_name)
        if proto_file is not None and proto_file.package:
            package_prefix = f"{proto_file.package}."
            if full_type_name.startswith(package_prefix):
                full_type_name = full_type_name[len(package_prefix) :]
        return NESTED_CLASS_PREFIX + full_type_name.replace(".", "_")


## Implementation Details ######################################################


def _strip_leading_dot(type_name: str) -> str:
    return type_name[1:] if type_name.startswith(".") else type_name
