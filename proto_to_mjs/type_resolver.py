"""
This module implements the cross-file type index used to figure out which
message and enum references in a file need to be imported from another
generated module
"""

# Standard
from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence

# Third Party
from google.protobuf import descriptor_pb2

# First Party
import alog

log = alog.use_channel("P2MRS")


class TypeInfo(NamedTuple):
    """Where a fully-qualified type lives"""

    proto_file: str
    simple_name: str


class TypeResolver:
    __doc__ = __doc__

    def __init__(
        self,
        current_file: descriptor_pb2.FileDescriptorProto,
        all_files: Sequence[descriptor_pb2.FileDescriptorProto],
    ):
        """Build the global type index for the whole compilation unit

        Args:
            current_file:  descriptor_pb2.FileDescriptorProto
                The file that is being generated
            all_files:  Sequence[descriptor_pb2.FileDescriptorProto]
                Every file in the compilation unit, including current_file and
                all of its (transitive) dependencies
        """
        if not isinstance(current_file, descriptor_pb2.FileDescriptorProto):
            raise TypeError(
                f"Invalid file descriptor of type {type(current_file)}"
            )
        self._current_file = current_file
        self._files_by_name: Dict[str, descriptor_pb2.FileDescriptorProto] = {}
        self._type_map: Dict[str, TypeInfo] = {}
        self._messages_by_name: Dict[str, descriptor_pb2.DescriptorProto] = {}

        for proto_file in all_files:
            self._files_by_name[proto_file.name] = proto_file
            for message in proto_file.message_type:
                self._register_message(message, proto_file)
            for enum_type in proto_file.enum_type:
                self._register_enum(enum_type, proto_file)
        log.debug2(
            "Indexed %d types from %d files for %s",
            len(self._type_map),
            len(self._files_by_name),
            current_file.name,
        )

    ## Properties ##############################################################

    @property
    def current_file(self) -> descriptor_pb2.FileDescriptorProto:
        return self._current_file

    ## Interface ###############################################################

    @staticmethod
    def get_full_name(name: str, package: str, parent_full_name: str = "") -> str:
        """Build the absolute (leading dot) fully-qualified name of a type"""
        if parent_full_name:
            return f"{parent_full_name}.{name}"
        if package:
            return f".{package}.{name}"
        return f".{name}"

    def get_file(
        self, proto_file_name: str
    ) -> Optional[descriptor_pb2.FileDescriptorProto]:
        """Get an indexed file by its name"""
        return self._files_by_name.get(proto_file_name)

    def find_type(self, type_name: str) -> Optional[TypeInfo]:
        """Look up any indexed type, local or external. A name without a
        leading dot is treated as absolute.
        """
        if not type_name.startswith("."):
            type_name = f".{type_name}"
        return self._type_map.get(type_name)

    def find_message(self, type_name: str) -> Optional[descriptor_pb2.DescriptorProto]:
        """Get the message descriptor for a fully-qualified message name, local
        or external
        """
        if not type_name.startswith("."):
            type_name = f".{type_name}"
        return self._messages_by_name.get(type_name)

    def resolve_external(self, type_name: str) -> Optional[TypeInfo]:
        """Look up where a type lives if it needs to be imported

        Args:
            type_name:  str
                The fully-qualified type name. A name without a leading dot is
                treated as absolute.

        Returns:
            type_info:  Optional[TypeInfo]
                The owning file and simple name if the type is defined in
                another file, None if the type is unknown or local
        """
        type_info = self.find_type(type_name)
        if type_info is None:
            log.debug3("Unknown type %s", type_name)
            return None
        if type_info.proto_file == self._current_file.name:
            return None
        return type_info

    def required_imports(self, type_names: Iterable[str]) -> List[TypeInfo]:
        """Get the de-duplicated external types referenced by type_names,
        sorted by owning file then simple name
        """
        imports = set()
        for type_name in type_names:
            type_info = self.resolve_external(type_name)
            if type_info is not None:
                imports.add(type_info)
        return sorted(imports)

    ## Implementation Details ##################################################

    def _register_message(
        self,
        message: descriptor_pb2.DescriptorProto,
        proto_file: descriptor_pb2.FileDescriptorProto,
        parent_full_name: str = "",
    ):
        full_name = self.get_full_name(
            message.name, proto_file.package, parent_full_name
        )
        self._type_map[full_name] = TypeInfo(proto_file.name, message.name)
        self._messages_by_name[full_name] = message
        for nested_message in message.nested_type:
            self._register_message(nested_message, proto_file, full_name)
        for nested_enum in message.enum_type:
            self._register_enum(nested_enum, proto_file, full_name)

    def _register_enum(
        self,
        enum_type: descriptor_pb2.EnumDescriptorProto,
        proto_file: descriptor_pb2.FileDescriptorProto,
        parent_full_name: str = "",
    ):
        full_name = self.get_full_name(
            enum_type.name, proto_file.package, parent_full_name
        )
        self._type_map[full_name] = TypeInfo(proto_file.name, enum_type.name)
