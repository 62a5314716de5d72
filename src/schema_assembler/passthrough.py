from typing import cast

from graphql import GraphQLScalarType
from graphql.language.ast import DocumentNode, ScalarTypeDefinitionNode

from schema_assembler import log
from schema_assembler.documents import DefinitionKind, definitions_of_kind
from schema_assembler.utils.registry import FirstWinsRegistry

BUILTIN_SCALAR_NAMES = frozenset({"String", "Int", "Float", "Boolean", "ID"})

PlaceholderRegistry = FirstWinsRegistry[GraphQLScalarType]


def is_builtin_scalar_type(type_name: str) -> bool:
    return type_name in BUILTIN_SCALAR_NAMES


def create_placeholder_scalar(scalar: ScalarTypeDefinitionNode) -> GraphQLScalarType:
    """Create an opaque scalar standing in for a custom scalar definition.

    The placeholder passes values through unchanged; how the scalar is
    represented at runtime is decided by the leaf type registry.
    """
    return GraphQLScalarType(
        name=scalar.name.value,
        description=scalar.description.value if scalar.description else None,
        ast_node=scalar,
    )


def register_unknown_scalars(document: DocumentNode, placeholders: PlaceholderRegistry) -> None:
    """Register a placeholder for every custom scalar defined in a definition document."""
    scalars = cast(list[ScalarTypeDefinitionNode], definitions_of_kind(document, DefinitionKind.SCALAR_TYPE_DEFINITION))
    for scalar in scalars:
        type_name = scalar.name.value
        if is_builtin_scalar_type(type_name):
            continue

        if placeholders.try_add(type_name, create_placeholder_scalar(scalar)):
            log.debug(f"Registered placeholder scalar '{type_name}'")
