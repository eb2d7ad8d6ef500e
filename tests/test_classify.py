"""Tests for typeschema.classify module."""

import pytest

from typeschema.classify import SchemaType, classify, is_compound
from typeschema.schema import Schema


class TestClassify:
    """Test single-category classification."""

    @pytest.mark.parametrize(
        ("schema", "expected"),
        [
            (Schema(), SchemaType.ANY),
            (Schema(type="any"), SchemaType.ANY),
            (Schema(type="boolean"), SchemaType.BOOLEAN),
            (Schema(default=True), SchemaType.BOOLEAN),
            (Schema(type="integer"), SchemaType.NUMBER),
            (Schema(type="number"), SchemaType.NUMBER),
            (Schema(default=1.5), SchemaType.NUMBER),
            (Schema(type="string"), SchemaType.STRING),
            (Schema(default="x"), SchemaType.STRING),
            (Schema(type="null"), SchemaType.NULL),
            (Schema(type="object"), SchemaType.OBJECT),
            (Schema(ref="#/definitions/a"), SchemaType.REFERENCE),
            (Schema(all_of=[Schema()]), SchemaType.ALL_OF),
            (Schema(any_of=[Schema()]), SchemaType.ANY_OF),
            (Schema(one_of=[Schema()]), SchemaType.ONE_OF),
            (Schema(type=["string", "number"]), SchemaType.UNION),
            (Schema(items=Schema()), SchemaType.TYPED_ARRAY),
            (Schema(type="array", items=[Schema()]), SchemaType.TYPED_ARRAY),
            (Schema(type="array"), SchemaType.UNTYPED_ARRAY),
            (Schema(enum=["a", "b"]), SchemaType.UNNAMED_ENUM),
            (Schema(type="string", enum=["a"]), SchemaType.UNNAMED_ENUM),
            (
                Schema(enum=[1, 2], ts_enum_names=["One", "Two"]),
                SchemaType.NAMED_ENUM,
            ),
            (Schema(properties={}), SchemaType.UNNAMED_SCHEMA),
            (Schema(type="object", required=[]), SchemaType.UNNAMED_SCHEMA),
            (Schema(id="a.json", properties={}), SchemaType.NAMED_SCHEMA),
        ],
    )
    def test_single_category(self, schema: Schema, expected: SchemaType) -> None:
        """Test nodes that fall into exactly one category."""
        assert classify(schema) == (expected,)

    def test_boolean_default_is_not_a_number(self) -> None:
        """Test that True is not counted as a numeric default."""
        assert SchemaType.NUMBER not in classify(Schema(default=True))

    def test_default_ignored_on_compound_nodes(self) -> None:
        """Test that a default does not add a scalar tag to a union."""
        schema = Schema(any_of=[Schema()], default="x")
        assert classify(schema) == (SchemaType.ANY_OF,)

    def test_enum_with_object_type_is_not_unnamed_enum(self) -> None:
        """Test that only primitive types admit an unnamed enum."""
        schema = Schema(type="object", enum=[{}])
        assert SchemaType.UNNAMED_ENUM not in classify(schema)

    def test_id_without_properties_is_not_named(self) -> None:
        """Test that an id alone does not make a named schema."""
        assert classify(Schema(id="a.json", type="string")) == (SchemaType.STRING,)

    def test_custom_type_overrides_everything(self) -> None:
        """Test the tsType escape hatch."""
        schema = Schema(ts_type="Date", type="string", all_of=[Schema()])
        assert classify(schema) == (SchemaType.CUSTOM_TYPE,)

    def test_multiple_categories_in_table_order(self) -> None:
        """Test that combined shapes yield every matching tag, in order."""
        schema = Schema(all_of=[Schema()], type=["string", "null"])
        assert classify(schema) == (SchemaType.ALL_OF, SchemaType.UNION)

    def test_properties_with_any_of(self) -> None:
        """Test an object that is also a union."""
        schema = Schema(any_of=[Schema()], properties={"a": Schema()})
        assert classify(schema) == (SchemaType.ANY_OF,)

    def test_result_is_deterministic(self) -> None:
        """Test that classifying twice gives the same answer."""
        schema = Schema(one_of=[Schema()], items=Schema())
        assert classify(schema) == classify(schema)
        assert classify(schema) == (SchemaType.ONE_OF, SchemaType.TYPED_ARRAY)


class TestIsCompound:
    """Test the compound-shape predicate."""

    def test_compound_shapes(self) -> None:
        """Test list types, anyOf and oneOf."""
        assert is_compound(Schema(type=["string", "null"]))
        assert is_compound(Schema(any_of=[]))
        assert is_compound(Schema(one_of=[]))

    def test_non_compound_shapes(self) -> None:
        """Test that allOf and scalars are not compound."""
        assert not is_compound(Schema(all_of=[Schema()]))
        assert not is_compound(Schema(type="string"))
