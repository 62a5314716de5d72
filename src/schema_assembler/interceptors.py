"""Interceptors that copy registry metadata onto the types of a built schema."""

from collections.abc import Mapping, Sequence
from typing import cast

from graphql import (
    GraphQLEnumType,
    GraphQLInterfaceType,
    GraphQLNamedType,
    GraphQLObjectType,
    GraphQLSchema,
    get_named_type,
    is_enum_type,
    is_interface_type,
    is_introspection_type,
    is_leaf_type,
    is_object_type,
)
from graphql.language.ast import FieldNode, SelectionSetNode

from schema_assembler import log
from schema_assembler.annotated_schema import AnnotatedSchema
from schema_assembler.leaf_types import LeafTypeInfo, TypeNames
from schema_assembler.utils.selection import format_selection_set


class LeafTypeInterceptor:
    """Attach a LeafTypeInfo to every scalar and enum type of a schema.

    Registered entries are attached as they are, absent fields included. Leaf
    types nobody registered fall back to their own name (enums) or ``str``
    (scalars) at runtime and are serialized as strings.
    """

    def __init__(self, leaf_types: Mapping[str, LeafTypeInfo]) -> None:
        self.leaf_types = leaf_types

    def resolve(self, named_type: GraphQLNamedType) -> LeafTypeInfo:
        info = self.leaf_types.get(named_type.name)
        if info is not None:
            return info

        if is_enum_type(named_type):
            enum_type = cast(GraphQLEnumType, named_type)
            return LeafTypeInfo(enum_type.name, enum_type.name, TypeNames.STRING)
        return LeafTypeInfo(named_type.name, TypeNames.STRING, TypeNames.STRING)

    def annotate(self, annotated_schema: AnnotatedSchema) -> None:
        for named_type in annotated_schema.schema.type_map.values():
            if is_introspection_type(named_type) or not is_leaf_type(named_type):
                continue
            annotated_schema.metadata_for(named_type.name).leaf_type = self.resolve(named_type)


def is_valid_entity_pattern(
    selection_set: SelectionSetNode, complex_type: GraphQLObjectType | GraphQLInterfaceType
) -> bool:
    """Check that every field a key pattern selects exists on the type with a matching shape.

    Leaf fields must be selected bare; object and interface fields need a
    nested selection that is itself valid. Fragments are not allowed in keys.
    """
    for selection in selection_set.selections:
        if not isinstance(selection, FieldNode):
            return False

        field = complex_type.fields.get(selection.name.value)
        if field is None:
            return False

        field_type = get_named_type(field.type)
        if selection.selection_set is None:
            if not is_leaf_type(field_type):
                return False
        elif is_object_type(field_type) or is_interface_type(field_type):
            nested_type = cast(GraphQLObjectType | GraphQLInterfaceType, field_type)
            if not is_valid_entity_pattern(selection.selection_set, nested_type):
                return False
        else:
            return False

    return True


class EntityTypeInterceptor:
    """Attach an entity key to every object type that has one.

    A type pattern registered for the type itself always applies. Otherwise
    the first global pattern whose fields all exist on the type is used.
    """

    def __init__(
        self,
        global_patterns: Sequence[SelectionSetNode],
        type_patterns: Mapping[str, SelectionSetNode],
    ) -> None:
        self.global_patterns = global_patterns
        self.type_patterns = type_patterns

    def resolve(self, object_type: GraphQLObjectType) -> SelectionSetNode | None:
        pattern = self.type_patterns.get(object_type.name)
        if pattern is not None:
            return pattern

        return next(
            (pattern for pattern in self.global_patterns if is_valid_entity_pattern(pattern, object_type)),
            None,
        )

    def annotate(self, annotated_schema: AnnotatedSchema) -> None:
        schema = annotated_schema.schema
        root_types = _root_types(schema)

        for named_type in schema.type_map.values():
            if is_introspection_type(named_type) or not is_object_type(named_type) or named_type in root_types:
                continue

            object_type = cast(GraphQLObjectType, named_type)
            pattern = self.resolve(object_type)
            if pattern is None:
                continue

            annotated_schema.metadata_for(object_type.name).entity_key = pattern
            log.debug(f"Type '{object_type.name}' is an entity keyed by '{format_selection_set(pattern)}'")


def _root_types(schema: GraphQLSchema) -> list[GraphQLObjectType]:
    return [
        root_type
        for root_type in (schema.query_type, schema.mutation_type, schema.subscription_type)
        if root_type is not None
    ]
