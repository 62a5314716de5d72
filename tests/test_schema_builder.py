from typing import cast

import pytest
from graphql import GraphQLObjectType, build_schema as build_sdl_schema, is_scalar_type, parse, print_ast
from graphql.language.ast import DirectiveNode, ObjectTypeDefinitionNode, ScalarTypeDefinitionNode

from schema_assembler.annotated_schema import AnnotatedSchema, TypeMetadata
from schema_assembler.assembler import TypeSystemModel, assemble
from schema_assembler.documents import load_graphql_files
from schema_assembler.errors import SchemaValidationError
from schema_assembler.interceptors import EntityTypeInterceptor, LeafTypeInterceptor, is_valid_entity_pattern
from schema_assembler.leaf_types import LeafTypeInfo, TypeNames
from schema_assembler.schema_builder import (
    add_directives_to_schema,
    assign_default_root_types,
    build_directive_map,
    print_annotated_schema,
)
from schema_assembler.utils.selection import format_selection_set, parse_selection_set
from tests.conftest import TestSchemaData


@pytest.fixture(scope="module")
def model() -> TypeSystemModel:
    return assemble(load_graphql_files([TestSchemaData.SCHEMA, TestSchemaData.ANNOTATIONS]))


@pytest.fixture(scope="module")
def annotated_schema(model: TypeSystemModel) -> AnnotatedSchema:
    return model.build_annotated_schema()


class TestBuildSchema:
    def test_placeholders_replace_custom_scalars(self, model: TypeSystemModel) -> None:
        schema = model.build_schema()

        money = schema.type_map["Money"]
        assert is_scalar_type(money)
        assert money.description == "An amount of money in the account currency."
        assert schema.query_type is not None and schema.query_type.name == "Query"

    def test_placeholder_passes_values_through(self, model: TypeSystemModel) -> None:
        money = model.placeholder_scalars["Money"]

        assert money.serialize("12.50") == "12.50"
        assert money.parse_value({"amount": 1}) == {"amount": 1}

    def test_conventional_query_type_is_the_root(self) -> None:
        schema = assemble([parse("type Query { hello: String }")]).build_schema()

        assert schema.query_type is not None
        assert schema.query_type.name == "Query"

    def test_builtin_scalar_redefinition_is_ignored(self) -> None:
        schema = assemble([parse("scalar String type Query { hello: String }")]).build_schema()

        assert schema.query_type is not None

    def test_strict_validation_rejects_unknown_types(self) -> None:
        model = assemble([parse("type Query { user: Missing }")])

        with pytest.raises(SchemaValidationError) as exc_info:
            model.build_schema()

        assert "Missing" in str(exc_info.value)

    def test_strict_validation_requires_a_query_type(self) -> None:
        model = assemble([parse("type User { id: ID! }")])

        with pytest.raises(SchemaValidationError) as exc_info:
            model.build_schema()

        assert any("Query root type must be provided" in error for error in exc_info.value.errors)

    def test_missing_query_type_is_accepted_without_strict_validation(self) -> None:
        model = assemble([parse("type User { id: ID! }")], strict_validation=False)

        schema = model.build_schema()

        assert schema.query_type is None
        assert "User" in schema.type_map

    def test_annotation_documents_do_not_reach_the_schema(self) -> None:
        model = assemble([parse("type Query { a: Int } extend type Query { b: Int }"), parse("type Query { c: Int }")])

        schema = model.build_schema()

        assert schema.query_type is not None
        assert list(schema.query_type.fields) == ["c"]


class TestAssignDefaultRootTypes:
    def test_schema_definition_is_kept(self) -> None:
        schema = build_sdl_schema("schema { query: Root } type Root { a: Int } type Query { b: Int }")

        assert assign_default_root_types(schema) is schema

    def test_all_conventional_names(self) -> None:
        base = assemble(
            [parse("type Query { a: Int } type Mutation { b: Int } type Subscription { c: Int }")],
            strict_validation=False,
        ).build_schema()

        assert base.mutation_type is not None and base.mutation_type.name == "Mutation"
        assert base.subscription_type is not None and base.subscription_type.name == "Subscription"


class TestLeafTypeInterceptor:
    def test_registered_entries(self, annotated_schema: AnnotatedSchema) -> None:
        assert annotated_schema.get_leaf_type("Money") == LeafTypeInfo("Money", "decimal.Decimal", "str")
        assert annotated_schema.get_leaf_type("Role") == LeafTypeInfo("Role", "accounts.Role", None)
        assert annotated_schema.get_leaf_type("Url") == LeafTypeInfo("Url", TypeNames.URI, TypeNames.STRING)
        assert annotated_schema.get_leaf_type("ID") == LeafTypeInfo("ID", TypeNames.STRING, TypeNames.STRING)

    def test_object_types_have_no_leaf_type(self, annotated_schema: AnnotatedSchema) -> None:
        assert annotated_schema.get_leaf_type("User") is None
        assert annotated_schema.get_leaf_type("__Schema") is None

    def test_unregistered_leaf_types_fall_back(self) -> None:
        schema = build_sdl_schema("type Query { color: Color status: Status } scalar Color enum Status { OPEN }")
        annotated = AnnotatedSchema(schema=schema)

        LeafTypeInterceptor({}).annotate(annotated)

        assert annotated.get_leaf_type("Color") == LeafTypeInfo("Color", TypeNames.STRING, TypeNames.STRING)
        assert annotated.get_leaf_type("Status") == LeafTypeInfo("Status", "Status", TypeNames.STRING)
        assert annotated.get_leaf_type("String") == LeafTypeInfo("String", TypeNames.STRING, TypeNames.STRING)


class TestEntityTypeInterceptor:
    def test_type_pattern_wins(self, annotated_schema: AnnotatedSchema) -> None:
        entity_key = annotated_schema.get_entity_key("User")

        assert entity_key is not None
        assert format_selection_set(entity_key) == "id orgId"

    def test_global_pattern_applies_to_matching_types(self, annotated_schema: AnnotatedSchema) -> None:
        entity_key = annotated_schema.get_entity_key("Organization")

        assert entity_key is not None
        assert format_selection_set(entity_key) == "id"
        assert annotated_schema.type_metadata["Organization"].is_entity

    def test_root_types_are_never_entities(self) -> None:
        schema = build_sdl_schema("type Query { id: ID! user: User } type User { id: ID! }")
        annotated = AnnotatedSchema(schema=schema)

        EntityTypeInterceptor([parse_selection_set("id")], {"Query": parse_selection_set("id")}).annotate(annotated)

        assert annotated.get_entity_key("Query") is None
        assert annotated.get_entity_key("User") is not None

    def test_first_matching_global_pattern(self) -> None:
        schema = build_sdl_schema("type Query { invoice: Invoice } type Invoice { uuid: ID! number: Int }")
        annotated = AnnotatedSchema(schema=schema)
        patterns = [parse_selection_set("id"), parse_selection_set("uuid"), parse_selection_set("number")]

        EntityTypeInterceptor(patterns, {}).annotate(annotated)

        entity_key = annotated.get_entity_key("Invoice")
        assert entity_key is not None
        assert format_selection_set(entity_key) == "uuid"

    def test_without_patterns_nothing_is_an_entity(self) -> None:
        model = assemble(
            load_graphql_files([TestSchemaData.SCHEMA, TestSchemaData.ANNOTATIONS]), skip_entity_extraction=True
        )

        annotated = model.build_annotated_schema()

        assert not any(metadata.is_entity for metadata in annotated.type_metadata.values())


class TestIsValidEntityPattern:
    SCHEMA = build_sdl_schema(
        """
        type Query { user: User }
        interface Node { id: ID! }
        type Organization implements Node { id: ID! name: String }
        type User implements Node { id: ID! owner: Organization tags: [String!]! }
        """
    )

    @pytest.mark.parametrize(
        ("fields", "expected"),
        [
            ("id", True),
            ("id tags", True),
            ("owner { id }", True),
            ("id owner { id name }", True),
            ("missing", False),
            ("owner", False),
            ("id { value }", False),
            ("owner { missing }", False),
            ("... on User { id }", False),
        ],
    )
    def test_pattern_shapes(self, fields: str, expected: bool) -> None:
        user = cast(GraphQLObjectType, self.SCHEMA.type_map["User"])
        assert is_valid_entity_pattern(parse_selection_set(fields), user) is expected


def _printed(directives: list[DirectiveNode]) -> list[str]:
    return [print_ast(directive) for directive in directives]


def _directives(sdl: str) -> list[DirectiveNode]:
    definition = parse(f"scalar Placeholder {sdl}").definitions[0]
    assert isinstance(definition, ScalarTypeDefinitionNode)
    return list(definition.directives)


class TestPrintAnnotatedSchema:
    def test_directive_map(self, annotated_schema: AnnotatedSchema) -> None:
        directive_map = build_directive_map(annotated_schema)

        assert _printed(directive_map["Money"]) == [
            '@runtimeType(name: "decimal.Decimal")',
            '@serializationType(name: "str")',
        ]
        assert _printed(directive_map["Role"]) == ['@runtimeType(name: "accounts.Role")']
        assert _printed(directive_map["User"]) == ['@key(fields: "id orgId")']
        assert "Query" not in directive_map

    def test_directive_map_skips_absent_values(self) -> None:
        annotated = AnnotatedSchema(schema=build_sdl_schema("type Query { a: Int }"))
        annotated.type_metadata["Color"] = TypeMetadata(leaf_type=LeafTypeInfo("Color"))

        assert build_directive_map(annotated) == {}

    def test_string_values_are_escaped(self) -> None:
        annotated = AnnotatedSchema(schema=build_sdl_schema("type Query { a: Int }"))
        annotated.type_metadata["Color"] = TypeMetadata(leaf_type=LeafTypeInfo("Color", 'say "hi"'))

        assert _printed(build_directive_map(annotated)["Color"]) == ['@runtimeType(name: "say \\"hi\\"")']

    def test_key_keeps_arguments_and_directives(self) -> None:
        annotated = AnnotatedSchema(schema=build_sdl_schema("type Query { a: Int }"))
        entity_key = parse_selection_set('id(scope: "org") owner @include(if: true) { id }')
        annotated.type_metadata["User"] = TypeMetadata(entity_key=entity_key)

        directive = build_directive_map(annotated)["User"][0]

        assert print_ast(directive) == '@key(fields: "id(scope: \\"org\\") owner @include(if: true) { id }")'

    def test_add_directives_to_schema(self) -> None:
        schema_str = "type User {\n  id: ID!\n}\n\nscalar Money\n\ntype UserProfile {\n  id: ID!\n}"
        directive_map = {"User": _directives('@key(fields: "id")'), "Money": _directives("@a @b")}

        result = add_directives_to_schema(schema_str, directive_map)

        assert result.splitlines() == [
            'type User @key(fields: "id") {',
            "  id: ID!",
            "}",
            "",
            "scalar Money @a @b",
            "",
            "type UserProfile {",
            "  id: ID!",
            "}",
        ]

    def test_existing_directives_are_kept(self) -> None:
        result = add_directives_to_schema("scalar Money @specifiedBy(url: \"x\")", {"Money": _directives("@a")})

        assert result == 'scalar Money @specifiedBy(url: "x") @a'

    def test_descriptions_are_left_untouched(self) -> None:
        schema_str = '"""\ntype User is the account holder\nsecond line\n"""\ntype User {\n  id: ID!\n}'

        result = add_directives_to_schema(schema_str, {"User": _directives('@key(fields: "id")')})

        user = parse(result).definitions[0]
        assert isinstance(user, ObjectTypeDefinitionNode)
        assert user.description is not None
        assert user.description.value == "type User is the account holder\nsecond line"
        assert _printed(list(user.directives)) == ['@key(fields: "id")']

    def test_printed_schema_round_trips(self, annotated_schema: AnnotatedSchema) -> None:
        printed = print_annotated_schema(annotated_schema)

        assert 'type User @key(fields: "id orgId") {' in printed
        assert 'type Organization @key(fields: "id") {' in printed
        assert 'scalar Money @runtimeType(name: "decimal.Decimal") @serializationType(name: "str")' in printed
        assert 'enum Role @runtimeType(name: "accounts.Role") {' in printed
        assert '"""An amount of money in the account currency."""' in printed
        assert "type Query {" in printed

        # The output is still valid SDL.
        assert parse(printed).definitions
