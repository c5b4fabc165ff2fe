"""
This module implements generation of an ES module (.mjs) holding javascript
classes for every message and enum of a FileDescriptorProto
"""

# Standard
from typing import Dict, List, Optional, Sequence
import json
import posixpath
import re

# Third Party
from google.protobuf import descriptor_pb2

# First Party
import alog

# Local
from .type_mapper import TypeMapper
from .type_resolver import TypeResolver
from .utils import change_extension, snake_to_camel_case

log = alog.use_channel("P2MGN")


## Globals #####################################################################

MJS_FILE_EXTENSION = ".mjs"

MJS_FILE_INDENT = "    "

MJS_FILE_AUTOGEN_HEADER = """/*------------------------------------------------------------------------------
 * AUTO GENERATED
 * source: {source}
 *----------------------------------------------------------------------------*/
"""

MJS_FILE_ENUM_HEADER = """
/*-- ENUMS -------------------------------------------------------------------*/
"""

MJS_FILE_MESSAGE_HEADER = """
/*-- MESSAGES ----------------------------------------------------------------*/
"""

# Words that can not be used as a module alias
JS_RESERVED_WORDS = {
    "await",
    "break",
    "case",
    "catch",
    "class",
    "const",
    "continue",
    "debugger",
    "default",
    "delete",
    "do",
    "else",
    "enum",
    "export",
    "extends",
    "false",
    "finally",
    "for",
    "function",
    "if",
    "import",
    "in",
    "instanceof",
    "let",
    "new",
    "null",
    "return",
    "static",
    "super",
    "switch",
    "this",
    "throw",
    "true",
    "try",
    "typeof",
    "var",
    "void",
    "while",
    "with",
    "yield",
}

# Globals referenced by the generated module that an alias must not shadow
MJS_FILE_GLOBALS = {"Object"}

_FieldDescriptorProto = descriptor_pb2.FieldDescriptorProto


## Interface ###################################################################


def descriptor_to_mjs(
    proto_file: descriptor_pb2.FileDescriptorProto,
    all_files: Optional[Sequence[descriptor_pb2.FileDescriptorProto]] = None,
) -> str:
    """Generate the .mjs module content for a FileDescriptorProto

    Args:
        proto_file:  descriptor_pb2.FileDescriptorProto
            The file to generate
        all_files:  Optional[Sequence[descriptor_pb2.FileDescriptorProto]]
            Every file in the compilation unit. If not given, only proto_file
            is indexed and no imports are generated.

    Returns:
        mjs_file_content:  str
            The generated javascript module
    """
    if not isinstance(proto_file, descriptor_pb2.FileDescriptorProto):
        raise ValueError(f"Invalid file descriptor of type {type(proto_file)}")
    if all_files is None:
        all_files = [proto_file]
    return MjsGenerator(proto_file, TypeResolver(proto_file, all_files)).generate()


class MjsGenerator:
    """The MjsGenerator walks the message and enum tree of a single file and
    renders it as javascript. Nested messages and enums are hoisted to
    independently named top-level declarations and re-exposed on their parent
    class as static members. Synthetic map entry messages (options.map_entry)
    are not rendered since map fields are emitted as plain untyped objects.

    An instance holds the import alias table of the file it generates, so it
    should be used for a single file only.
    """

    def __init__(
        self,
        proto_file: descriptor_pb2.FileDescriptorProto,
        type_resolver: TypeResolver,
    ):
        if not isinstance(proto_file, descriptor_pb2.FileDescriptorProto):
            raise ValueError(f"Invalid file descriptor of type {type(proto_file)}")
        self._proto_file = proto_file
        self._type_resolver = type_resolver
        self._type_mapper = TypeMapper(self._transform_type_name)
        self._referenced_types: Dict[str, None] = {}
        self._import_aliases: Dict[str, str] = {}

    def generate(self) -> str:
        """Generate the full module text"""
        proto_file = self._proto_file
        log.debug("Generating javascript for %s", proto_file.name)
        self._referenced_types = {}
        self._import_aliases = {}

        mjs_file_lines = []
        mjs_file_lines.append(MJS_FILE_AUTOGEN_HEADER.format(source=proto_file.name))

        # Add imports for every file that owns a referenced type
        self._collect_external_type_references()
        import_lines = self._generate_imports()
        if import_lines:
            mjs_file_lines.extend(import_lines)
            mjs_file_lines.append("")

        # Add all enums
        if proto_file.enum_type:
            mjs_file_lines.append(MJS_FILE_ENUM_HEADER)
            for enum_type in proto_file.enum_type:
                mjs_file_lines.extend(self._generate_enum(enum_type))
                mjs_file_lines.append("")

        # Add all messages
        if proto_file.message_type:
            mjs_file_lines.append(MJS_FILE_MESSAGE_HEADER)
            for message_type in proto_file.message_type:
                mjs_file_lines.extend(self._generate_message(message_type))
                mjs_file_lines.append("")

        return "\n".join(mjs_file_lines)

    ## Imports #################################################################

    def _collect_external_type_references(self):
        for message_type in self._proto_file.message_type:
            self._collect_message_type_references(message_type)
        log.debug3("Referenced types: %s", list(self._referenced_types))

    def _collect_message_type_references(
        self, message_type: descriptor_pb2.DescriptorProto
    ):
        for field in message_type.field:
            if field.type_name:
                self._referenced_types.setdefault(field.type_name)
        for nested_type in message_type.nested_type:
            # Map entries are not rendered, so neither are their references
            if self._type_mapper.is_map_entry(nested_type):
                continue
            self._collect_message_type_references(nested_type)

    def _generate_imports(self) -> List[str]:
        lines = []
        required_imports = self._type_resolver.required_imports(self._referenced_types)
        for type_info in required_imports:
            if type_info.proto_file in self._import_aliases:
                continue
            alias = self._generate_import_alias(type_info.proto_file)
            self._import_aliases[type_info.proto_file] = alias
            import_path = self._get_import_path(type_info.proto_file)
            log.debug2("Importing %s as %s", import_path, alias)
            lines.append(f"import * as {alias} from {json.dumps(import_path)};")
        return lines

    def _get_import_path(self, proto_file_path: str) -> str:
        """Get the path of the generated module for proto_file_path relative to
        the module being generated
        """
        current_dir = posixpath.dirname(self._proto_file.name) or "."
        import_path = change_extension(
            posixpath.relpath(proto_file_path, current_dir), MJS_FILE_EXTENSION
        )
        if not import_path.startswith("../"):
            import_path = f"./{import_path}"
        return import_path

    def _generate_import_alias(self, proto_file_path: str) -> str:
        """Make a module alias from the file path that does not collide with any
        other alias or top-level name in the module
        """
        alias = re.sub(r"[^0-9A-Za-z_$]", "_", change_extension(proto_file_path, ""))
        if not alias or alias[0].isdigit():
            alias = f"_{alias}"
        taken = set(self._import_aliases.values())
        taken.update(message_type.name for message_type in self._proto_file.message_type)
        taken.update(enum_type.name for enum_type in self._proto_file.enum_type)
        taken.update(JS_RESERVED_WORDS)
        taken.update(MJS_FILE_GLOBALS)
        candidate = alias
        suffix = 2
        while candidate in taken:
            candidate = f"{alias}_{suffix}"
            suffix += 1
        return candidate

    def _transform_type_name(
        self, type_name: str, proto_file: descriptor_pb2.FileDescriptorProto
    ) -> str:
        """Naming policy for the generated module. Imported types are qualified
        with their module alias and local nested types use their hoisted class
        name. Anything else falls through to the default rule.
        """
        type_info = self._type_resolver.find_type(type_name)
        if type_info is None:
            return ""
        local_name = type_name[1:] if type_name.startswith(".") else type_name
        if type_info.proto_file == proto_file.name:
            if proto_file.package:
                local_name = local_name[len(proto_file.package) + 1 :]
            if "." in local_name:
                return TypeMapper.independent_class_name(type_name, proto_file)
            return ""

        alias = self._import_aliases.get(type_info.proto_file)
        owner_file = self._type_resolver.get_file(type_info.proto_file)
        if alias is None or owner_file is None:
            return ""
        if owner_file.package:
            local_name = local_name[len(owner_file.package) + 1 :]
        return f"{alias}.{local_name}"

    ## Enums ###################################################################

    def _generate_enum(
        self,
        enum_type: descriptor_pb2.EnumDescriptorProto,
        parent_full_name: str = "",
    ) -> List[str]:
        """Make the frozen object for an enum. Nested enums are hoisted to their
        independent name and not exported.
        """
        lines = []
        if parent_full_name:
            full_name = TypeResolver.get_full_name(
                enum_type.name, self._proto_file.package, parent_full_name
            )
            enum_name = TypeMapper.independent_class_name(full_name, self._proto_file)
            lines.append(f"const {enum_name} = Object.freeze({{")
        else:
            lines.append(f"export const {enum_type.name} = Object.freeze({{")
        for value in enum_type.value:
            lines.append(f"{MJS_FILE_INDENT}{value.name}: {value.number},")
        lines.append("});")
        return lines

    ## Messages ################################################################

    def _generate_message(
        self,
        message_type: descriptor_pb2.DescriptorProto,
        parent_full_name: str = "",
    ) -> List[str]:
        """Make the class for a message, preceded by the hoisted classes and
        enums of everything nested in it
        """
        proto_file = self._proto_file
        full_name = TypeResolver.get_full_name(
            message_type.name, proto_file.package, parent_full_name
        )
        if parent_full_name:
            class_name = TypeMapper.independent_class_name(full_name, proto_file)
            declaration = f"class {class_name} {{"
        else:
            class_name = message_type.name
            declaration = f"export class {class_name} {{"
        log.debug2("Generating class %s for %s", class_name, full_name)

        lines = []
        static_members = []
        for enum_type in message_type.enum_type:
            lines.extend(self._generate_enum(enum_type, full_name))
            lines.append("")
            static_members.append(
                (
                    enum_type.name,
                    TypeMapper.independent_class_name(
                        f"{full_name}.{enum_type.name}", proto_file
                    ),
                )
            )
        for nested_type in message_type.nested_type:
            if self._type_mapper.is_map_entry(nested_type):
                continue
            lines.extend(self._generate_message(nested_type, full_name))
            lines.append("")
            static_members.append(
                (
                    nested_type.name,
                    TypeMapper.independent_class_name(
                        f"{full_name}.{nested_type.name}", proto_file
                    ),
                )
            )

        body = []
        body.extend(self._generate_class_descriptor(message_type, full_name))
        if message_type.field:
            body.append("")
            for field in message_type.field:
                body.append(f"#{_property_name(field)};")
        for field in message_type.field:
            body.append("")
            body.extend(self._generate_field_methods(field, class_name))
        body.append("")
        body.extend(self._generate_to_json(message_type))
        if static_members:
            body.append("")
            for member_name, hoisted_name in static_members:
                body.append(f"static {member_name} = {hoisted_name};")

        lines.append(declaration)
        lines.extend(_indent_lines(1, body))
        lines.append("}")
        return lines

    def _generate_class_descriptor(
        self,
        message_type: descriptor_pb2.DescriptorProto,
        full_name: str,
    ) -> List[str]:
        """Make the static __descriptor used for reflection by the runtime"""
        lines = []
        lines.append("static __descriptor = {")
        lines.append(f"{MJS_FILE_INDENT}name: {json.dumps(message_type.name)},")
        lines.append(f"{MJS_FILE_INDENT}fullName: {json.dumps(full_name[1:])},")
        if not message_type.field:
            lines.append(f"{MJS_FILE_INDENT}fields: [],")
        else:
            lines.append(f"{MJS_FILE_INDENT}fields: [")
            for field in message_type.field:
                lines.extend(_indent_lines(2, self._generate_field_descriptor(field)))
            lines.append(f"{MJS_FILE_INDENT}],")
        lines.append("};")
        return lines

    def _generate_field_descriptor(
        self, field: descriptor_pb2.FieldDescriptorProto
    ) -> List[str]:
        name = json.dumps(_property_name(field))
        label = json.dumps(_FieldDescriptorProto.Label.Name(field.label))
        field_type = json.dumps(_FieldDescriptorProto.Type.Name(field.type))
        if field.type != field.TYPE_MESSAGE:
            return [f"{{ name: {name}, label: {label}, type: {field_type} }},"]

        lines = ["{"]
        lines.append(f"{MJS_FILE_INDENT}name: {name},")
        lines.append(f"{MJS_FILE_INDENT}label: {label},")
        lines.append(f"{MJS_FILE_INDENT}type: {field_type},")
        if self._is_map_entry_field(field):
            lines.append(f"{MJS_FILE_INDENT}map: true,")
        else:
            # Resolved lazily so that classes can reference each other
            class_ref = self._type_mapper.base_js_type(field, self._proto_file)
            lines.append(f"{MJS_FILE_INDENT}get clrType() {{")
            lines.append(f"{MJS_FILE_INDENT * 2}return {class_ref};")
            lines.append(f"{MJS_FILE_INDENT}}},")
        lines.append("},")
        return lines

    def _is_map_entry_field(self, field: descriptor_pb2.FieldDescriptorProto) -> bool:
        """Check whether the field references a synthetic map entry message.
        Unlike TypeMapper.is_map_field this inspects the referenced message, so
        user messages with Entry in their names keep their class reference.
        """
        message_type = self._type_resolver.find_message(field.type_name)
        return message_type is not None and self._type_mapper.is_map_entry(message_type)

    def _generate_field_methods(
        self,
        field: descriptor_pb2.FieldDescriptorProto,
        class_name: str,
    ) -> List[str]:
        """Make the property accessors and the chainable get/set methods for a
        field
        """
        js_type = self._type_mapper.js_type(field, self._proto_file)
        method_name = self._type_mapper.method_name(field)
        prop = _property_name(field)
        return [
            f"/** @type {{{js_type}}} */",
            f"get {prop}() {{",
            f"{MJS_FILE_INDENT}return this.#{prop};",
            "}",
            "",
            f"/** @param {{{js_type}}} value */",
            f"set {prop}(value) {{",
            f"{MJS_FILE_INDENT}this.#{prop} = value;",
            "}",
            "",
            f"/** @returns {{{js_type}}} */",
            f"get{method_name}() {{",
            f"{MJS_FILE_INDENT}return this.#{prop};",
            "}",
            "",
            "/**",
            f" * @param {{{js_type}}} value",
            f" * @returns {{{class_name}}}",
            " */",
            f"set{method_name}(value) {{",
            f"{MJS_FILE_INDENT}this.#{prop} = value;",
            f"{MJS_FILE_INDENT}return this;",
            "}",
        ]

    def _generate_to_json(self, message_type: descriptor_pb2.DescriptorProto) -> List[str]:
        lines = ["toJSON() {"]
        if not message_type.field:
            lines.append(f"{MJS_FILE_INDENT}return {{}};")
        else:
            lines.append(f"{MJS_FILE_INDENT}return {{")
            for field in message_type.field:
                prop = _property_name(field)
                lines.append(f"{MJS_FILE_INDENT * 2}{prop}: this.{prop},")
            lines.append(f"{MJS_FILE_INDENT}}};")
        lines.append("}")
        return lines


## Implementation Details ######################################################


def _indent_lines(indent: int, lines: List[str]) -> List[str]:
    """Add indentation to the given lines"""
    if not indent:
        return lines
    return [
        indent * MJS_FILE_INDENT + line if line else line
        for line in "\n".join(lines).split("\n")
    ]


def _property_name(field: descriptor_pb2.FieldDescriptorProto) -> str:
    """Get the camelCase name used for the field's property and JSON key"""
    return field.json_name or snake_to_camel_case(field.name)
