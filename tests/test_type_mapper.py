"""
Tests for the TypeMapper
"""

# Third Party
from google.protobuf import descriptor_pb2
import pytest

# Local
from proto_to_mjs.type_mapper import (
    JS_SCALAR_TYPES,
    JS_UNTYPED,
    NESTED_CLASS_PREFIX,
    TypeMapper,
)

## Helpers #####################################################################

_FieldDescriptorProto = descriptor_pb2.FieldDescriptorProto

SCALAR_EXPECTATIONS = {
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


def make_field(
    field_type,
    label=_FieldDescriptorProto.LABEL_OPTIONAL,
    type_name="",
    name="some_field",
):
    return _FieldDescriptorProto(
        name=name,
        number=1,
        type=field_type,
        label=label,
        type_name=type_name,
    )


@pytest.fixture
def proto_file():
    yield descriptor_pb2.FileDescriptorProto(name="foo/bar.proto", package="foo.bar")


@pytest.fixture
def bare_file():
    yield descriptor_pb2.FileDescriptorProto(name="bare.proto")


## base_js_type ################################################################


@pytest.mark.parametrize(["field_type", "expected"], list(SCALAR_EXPECTATIONS.items()))
@pytest.mark.parametrize(
    "label",
    [
        _FieldDescriptorProto.LABEL_OPTIONAL,
        _FieldDescriptorProto.LABEL_REQUIRED,
        _FieldDescriptorProto.LABEL_REPEATED,
    ],
)
def test_base_js_type_scalars(proto_file, field_type, expected, label):
    """Make sure scalar kinds map only by kind, never by cardinality"""
    assert TypeMapper().base_js_type(make_field(field_type, label), proto_file) == expected


def test_scalar_table_complete():
    """Make sure every scalar kind is covered by the table"""
    assert JS_SCALAR_TYPES == SCALAR_EXPECTATIONS


def test_base_js_type_group_is_untyped(proto_file):
    field = make_field(_FieldDescriptorProto.TYPE_GROUP, type_name=".foo.bar.Grp")
    assert TypeMapper().base_js_type(field, proto_file) == JS_UNTYPED


def test_base_js_type_message_same_package(proto_file):
    field = make_field(_FieldDescriptorProto.TYPE_MESSAGE, type_name=".foo.bar.Widget")
    assert TypeMapper().base_js_type(field, proto_file) == "Widget"


def test_base_js_type_nested_message_same_package(proto_file):
    """Make sure a nested type of the same package uses the independent name"""
    field = make_field(
        _FieldDescriptorProto.TYPE_MESSAGE, type_name=".foo.bar.Outer.Inner"
    )
    assert TypeMapper().base_js_type(field, proto_file) == "__Outer_Inner"


def test_base_js_type_enum_uses_default_rule(proto_file):
    """Make sure enums use the same default rule as messages"""
    mapper = TypeMapper()
    assert (
        mapper.base_js_type(
            make_field(_FieldDescriptorProto.TYPE_ENUM, type_name=".foo.bar.Status"),
            proto_file,
        )
        == "Status"
    )
    assert (
        mapper.base_js_type(
            make_field(_FieldDescriptorProto.TYPE_ENUM, type_name=".foo.bar.Outer.Kind"),
            proto_file,
        )
        == "__Outer_Kind"
    )


def test_base_js_type_other_package(proto_file):
    """Make sure a type from another package drops all qualification"""
    field = make_field(
        _FieldDescriptorProto.TYPE_MESSAGE, type_name=".other.pkg.Outer.Inner"
    )
    assert TypeMapper().base_js_type(field, proto_file) == "Inner"


def test_base_js_type_package_prefix_must_match_segment(proto_file):
    """Make sure foo.barn.X is not treated as being in package foo.bar"""
    field = make_field(_FieldDescriptorProto.TYPE_MESSAGE, type_name=".foo.barn.X.Y")
    assert TypeMapper().base_js_type(field, proto_file) == "Y"


def test_base_js_type_no_package(bare_file):
    """Without a package the default rule is the last component"""
    field = make_field(_FieldDescriptorProto.TYPE_MESSAGE, type_name=".Outer.Inner")
    assert TypeMapper().base_js_type(field, bare_file) == "Inner"


## type_name_transform #########################################################


def test_type_name_transform_takes_precedence(proto_file):
    """Make sure a non-empty transform result is used verbatim"""
    calls = []

    def transform(type_name, file):
        calls.append((type_name, file.name))
        return f"ns.{type_name.rsplit('.', 1)[-1]}"

    mapper = TypeMapper(transform)
    msg_field = make_field(_FieldDescriptorProto.TYPE_MESSAGE, type_name=".foo.bar.A.B")
    enum_field = make_field(_FieldDescriptorProto.TYPE_ENUM, type_name=".foo.bar.E")
    assert mapper.base_js_type(msg_field, proto_file) == "ns.B"
    assert mapper.base_js_type(enum_field, proto_file) == "ns.E"
    assert calls == [(".foo.bar.A.B", "foo/bar.proto"), (".foo.bar.E", "foo/bar.proto")]


def test_type_name_transform_empty_falls_back(proto_file):
    mapper = TypeMapper(lambda type_name, file: "")
    field = make_field(_FieldDescriptorProto.TYPE_MESSAGE, type_name=".foo.bar.A.B")
    assert mapper.base_js_type(field, proto_file) == "__A_B"


def test_type_name_transform_not_used_for_scalars(proto_file):
    def transform(type_name, file):
        raise AssertionError("Should not be called")

    field = make_field(_FieldDescriptorProto.TYPE_STRING)
    assert TypeMapper(transform).base_js_type(field, proto_file) == "string"


def test_multiple_transforms_side_by_side(proto_file):
    """Make sure two mappers with different policies don't interfere"""
    field = make_field(_FieldDescriptorProto.TYPE_MESSAGE, type_name=".foo.bar.Widget")
    first = TypeMapper(lambda type_name, file: "First")
    second = TypeMapper(lambda type_name, file: "Second")
    assert first.base_js_type(field, proto_file) == "First"
    assert second.base_js_type(field, proto_file) == "Second"
    assert TypeMapper().base_js_type(field, proto_file) == "Widget"


## js_type #####################################################################


def test_js_type_singular(proto_file):
    field = make_field(_FieldDescriptorProto.TYPE_BOOL)
    assert TypeMapper().js_type(field, proto_file) == "boolean"


def test_js_type_repeated(proto_file):
    mapper = TypeMapper()
    assert (
        mapper.js_type(
            make_field(_FieldDescriptorProto.TYPE_STRING, _FieldDescriptorProto.LABEL_REPEATED),
            proto_file,
        )
        == "string[]"
    )
    assert (
        mapper.js_type(
            make_field(
                _FieldDescriptorProto.TYPE_MESSAGE,
                _FieldDescriptorProto.LABEL_REPEATED,
                ".foo.bar.Outer.Inner",
            ),
            proto_file,
        )
        == "__Outer_Inner[]"
    )


def test_js_type_map_is_untyped(proto_file):
    """Make sure map shaped fields are untyped whatever the entry holds"""
    mapper = TypeMapper(lambda type_name, file: "ShouldNotMatter")
    field = make_field(
        _FieldDescriptorProto.TYPE_MESSAGE,
        _FieldDescriptorProto.LABEL_REPEATED,
        ".foo.bar.Holder.ValuesEntry",
    )
    assert mapper.js_type(field, proto_file) == JS_UNTYPED


## is_map_field / is_map_entry #################################################


def test_is_map_field():
    assert TypeMapper.is_map_field(
        make_field(
            _FieldDescriptorProto.TYPE_MESSAGE,
            _FieldDescriptorProto.LABEL_REPEATED,
            ".foo.Holder.LabelsEntry",
        )
    )


@pytest.mark.parametrize(
    "field",
    [
        # Singular
        make_field(_FieldDescriptorProto.TYPE_MESSAGE, type_name=".foo.Holder.LabelsEntry"),
        # Not a message
        make_field(
            _FieldDescriptorProto.TYPE_STRING, _FieldDescriptorProto.LABEL_REPEATED
        ),
        # No Entry in the name
        make_field(
            _FieldDescriptorProto.TYPE_MESSAGE,
            _FieldDescriptorProto.LABEL_REPEATED,
            ".foo.Holder.Label",
        ),
    ],
)
def test_is_not_map_field(field):
    assert not TypeMapper.is_map_field(field)


def test_is_map_field_name_heuristic_false_positive():
    """The map check is a name heuristic, so a user message with Entry in its
    name is treated as a map too
    """
    field = make_field(
        _FieldDescriptorProto.TYPE_MESSAGE,
        _FieldDescriptorProto.LABEL_REPEATED,
        ".foo.LogEntry",
    )
    assert TypeMapper.is_map_field(field)


def test_is_map_entry():
    entry = descriptor_pb2.DescriptorProto(
        name="LabelsEntry",
        options=descriptor_pb2.MessageOptions(map_entry=True),
    )
    assert TypeMapper.is_map_entry(entry)
    assert not TypeMapper.is_map_entry(descriptor_pb2.DescriptorProto(name="LogEntry"))


## Naming ######################################################################


@pytest.mark.parametrize(
    ["name", "expected"],
    [("foo_bar_baz", "FooBarBaz"), ("id", "Id"), ("entity_info", "EntityInfo")],
)
def test_method_name(name, expected):
    field = make_field(_FieldDescriptorProto.TYPE_INT32, name=name)
    assert TypeMapper.method_name(field) == expected


def test_independent_class_name(proto_file):
    assert (
        TypeMapper.independent_class_name(".foo.bar.Outer.Inner", proto_file)
        == "__Outer_Inner"
    )
    assert (
        TypeMapper.independent_class_name("foo.bar.A.B.C", proto_file) == "__A_B_C"
    )


def test_independent_class_name_without_file():
    """Without a file the package is kept in the flattened name"""
    assert (
        TypeMapper.independent_class_name(".foo.bar.Outer.Inner")
        == NESTED_CLASS_PREFIX + "foo_bar_Outer_Inner"
    )


def test_independent_class_name_other_package(proto_file):
    assert (
        TypeMapper.independent_class_name(".other.Outer.Inner", proto_file)
        == "__other_Outer_Inner"
    )


def test_message_type_name_without_leading_dot(proto_file):
    assert TypeMapper.message_type_name("foo.bar.Outer.Inner", proto_file) == "__Outer_Inner"
    assert TypeMapper.message_type_name("foo.bar.Widget", proto_file) == "Widget"
