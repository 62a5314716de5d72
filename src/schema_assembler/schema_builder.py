from copy import copy
from typing import TYPE_CHECKING

from graphql import (
    GraphQLError,
    GraphQLObjectType,
    GraphQLSchema,
    extend_schema,
    parse,
    print_ast,
    print_schema,
    validate_schema,
)
from graphql.language.ast import (
    ArgumentNode,
    DefinitionNode,
    DirectiveNode,
    DocumentNode,
    NameNode,
    ScalarTypeDefinitionNode,
    StringValueNode,
    TypeDefinitionNode,
)

from schema_assembler import log
from schema_assembler.annotated_schema import AnnotatedSchema
from schema_assembler.entity_patterns import KEY_DIRECTIVE, KEY_FIELDS_ARGUMENT
from schema_assembler.errors import SchemaValidationError
from schema_assembler.interceptors import EntityTypeInterceptor, LeafTypeInterceptor
from schema_assembler.leaf_types import RUNTIME_TYPE_DIRECTIVE, SERIALIZATION_TYPE_DIRECTIVE
from schema_assembler.passthrough import is_builtin_scalar_type
from schema_assembler.utils.selection import format_selection_set

if TYPE_CHECKING:
    from schema_assembler.assembler import TypeSystemModel

DEFAULT_ROOT_TYPE_NAMES = {
    "query": "Query",
    "mutation": "Mutation",
    "subscription": "Subscription",
}


def _retained_definitions(model: "TypeSystemModel") -> list[DefinitionNode]:
    """Definitions to build from.

    Custom scalar definitions are replaced by their placeholders and redefinitions
    of the built-in scalars are dropped.
    """
    return [
        definition
        for definition in model.definitions
        if not (
            isinstance(definition, ScalarTypeDefinitionNode)
            and (definition.name.value in model.placeholder_scalars or is_builtin_scalar_type(definition.name.value))
        )
    ]


def assign_default_root_types(schema: GraphQLSchema) -> GraphQLSchema:
    """
    Use the conventionally named Query, Mutation and Subscription types as root types
    when the documents carry no schema definition.

    Args:
        schema (GraphQLSchema): The schema to check and potentially rebuild.

    Returns:
        GraphQLSchema: The original schema if nothing had to be assigned, otherwise a new schema.
    """
    if schema.ast_node is not None:
        return schema

    root_types: dict[str, GraphQLObjectType] = {}
    for operation, type_name in DEFAULT_ROOT_TYPE_NAMES.items():
        root_type = schema.type_map.get(type_name)
        if getattr(schema, f"{operation}_type") is None and isinstance(root_type, GraphQLObjectType):
            root_types[operation] = root_type

    if not root_types:
        return schema

    log.debug(f"Assigned conventional root operation types: {', '.join(t.name for t in root_types.values())}")
    return GraphQLSchema(**{**schema.to_kwargs(), **root_types})


def check_correct_schema(schema: GraphQLSchema) -> list[str]:
    """Validate a built schema against the GraphQL specification.

    Returns:
        list[str]: One message per validation error, empty if the schema is valid
    """
    return [error.message for error in validate_schema(schema)]


def build_schema(model: "TypeSystemModel") -> GraphQLSchema:
    """
    Build the introspectable GraphQL schema of an assembled model.

    The placeholder scalars are registered first and the retained definitions
    are added on top of them. With strict validation the SDL and the resulting
    schema are both validated.

    Args:
        model: The assembled type system model

    Returns:
        GraphQLSchema: The built schema

    Raises:
        SchemaValidationError: If the definitions do not form a valid schema
    """
    assume_valid = not model.strict_validation
    base_schema = GraphQLSchema(types=list(model.placeholder_scalars.values()))
    document = DocumentNode(definitions=tuple(_retained_definitions(model)))

    try:
        schema = extend_schema(base_schema, document, assume_valid=assume_valid, assume_valid_sdl=assume_valid)
    except (GraphQLError, TypeError) as error:
        raise SchemaValidationError([str(error)]) from error

    schema = assign_default_root_types(schema)

    if model.strict_validation:
        errors = check_correct_schema(schema)
        if errors:
            raise SchemaValidationError(errors)

    log.info(f"Built schema with {len(schema.type_map)} types")
    log.debug(f"Built schema: \n{print_schema(schema)}")
    return schema


def annotate_schema(schema: GraphQLSchema, model: "TypeSystemModel") -> AnnotatedSchema:
    """Run the leaf type and entity type interceptors over a built schema."""
    annotated_schema = AnnotatedSchema(schema=schema)
    LeafTypeInterceptor(model.leaf_types).annotate(annotated_schema)
    EntityTypeInterceptor(model.global_entity_patterns, model.type_entity_patterns).annotate(annotated_schema)
    return annotated_schema


def build_annotated_schema(model: "TypeSystemModel") -> AnnotatedSchema:
    return annotate_schema(build_schema(model), model)


def _name_directive(directive_name: str, argument_name: str, value: str) -> DirectiveNode:
    return DirectiveNode(
        name=NameNode(value=directive_name),
        arguments=(ArgumentNode(name=NameNode(value=argument_name), value=StringValueNode(value=value)),),
    )


def build_directive_map(annotated_schema: AnnotatedSchema) -> dict[str, list[DirectiveNode]]:
    """Render the metadata of each annotated type as directive nodes."""
    directive_map: dict[str, list[DirectiveNode]] = {}

    for type_name, metadata in annotated_schema.type_metadata.items():
        directives: list[DirectiveNode] = []

        leaf_type = metadata.leaf_type
        if leaf_type is not None:
            if leaf_type.runtime_type is not None:
                directives.append(_name_directive(RUNTIME_TYPE_DIRECTIVE, "name", leaf_type.runtime_type))
            if leaf_type.serialization_type is not None:
                directives.append(_name_directive(SERIALIZATION_TYPE_DIRECTIVE, "name", leaf_type.serialization_type))

        if metadata.entity_key is not None:
            fields = format_selection_set(metadata.entity_key)
            directives.append(_name_directive(KEY_DIRECTIVE, KEY_FIELDS_ARGUMENT, fields))

        if directives:
            directive_map[type_name] = directives

    return directive_map


def add_directives_to_schema(schema_str: str, directive_map: dict[str, list[DirectiveNode]]) -> str:
    """
    Append directives to the type definitions of a printed schema.

    The schema is parsed and the directives are added to the matching definition
    nodes, so descriptions and other text are never touched.

    Args:
        schema_str: SDL, as printed by ``print_schema``
        directive_map: Directives to append, keyed by type name

    Returns:
        str: The SDL with the directives attached
    """
    document = parse(schema_str, no_location=True)
    definitions: list[DefinitionNode] = []

    for definition in document.definitions:
        if isinstance(definition, TypeDefinitionNode) and definition.name.value in directive_map:
            definition = copy(definition)
            definition.directives = (*(definition.directives or ()), *directive_map[definition.name.value])
        definitions.append(definition)

    return print_ast(DocumentNode(definitions=tuple(definitions)))


def print_annotated_schema(annotated_schema: AnnotatedSchema) -> str:
    """Print a schema with its leaf type and entity key metadata rendered as directives."""
    directive_map = build_directive_map(annotated_schema)
    return add_directives_to_schema(print_schema(annotated_schema.schema), directive_map)
