"""Entity key patterns: the field selections that identify an object for cache normalization.

Global patterns come from schema extensions and apply to any object type that
has the selected fields::

    extend schema @key(fields: "id")

Type patterns come from object type extensions and win over global ones::

    extend type User @key(fields: "id orgId")
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import cast

from graphql import GraphQLSyntaxError
from graphql.language.ast import (
    DirectiveNode,
    ObjectTypeExtensionNode,
    SchemaExtensionNode,
    SelectionSetNode,
    StringValueNode,
)

from schema_assembler import log
from schema_assembler.documents import DefinitionKind, GraphQLFile, definitions_of_kind
from schema_assembler.errors import KeyFieldsSyntaxError
from schema_assembler.utils.directive import get_directive, iter_directives
from schema_assembler.utils.registry import FirstWinsRegistry
from schema_assembler.utils.selection import format_selection_set, parse_selection_set

KEY_DIRECTIVE = "key"
KEY_FIELDS_ARGUMENT = "fields"
SCHEMA_SCOPE = "schema"


@dataclass
class EntityPatterns:
    global_patterns: list[SelectionSetNode] = field(default_factory=list)
    type_patterns: FirstWinsRegistry[SelectionSetNode] = field(default_factory=FirstWinsRegistry)


def is_key_directive(directive: DirectiveNode) -> bool:
    return directive.name.value == KEY_DIRECTIVE


def get_key_fields(directive: DirectiveNode) -> str | None:
    """Return the ``fields`` string of a ``@key`` directive.

    Only the exact shape ``@key(fields: "<string>")`` counts: no arguments,
    several arguments, another argument name or a non-string value all mean
    the directive carries no key.
    """
    arguments = directive.arguments or ()
    if len(arguments) != 1:
        return None

    argument = arguments[0]
    if argument.name.value != KEY_FIELDS_ARGUMENT or not isinstance(argument.value, StringValueNode):
        return None

    return argument.value.value


def parse_key_fields(fields: str, scope: str, file_name: str | None = None) -> SelectionSetNode:
    """Parse a key ``fields`` string, turning syntax errors into a KeyFieldsSyntaxError."""
    try:
        return parse_selection_set(fields)
    except GraphQLSyntaxError as error:
        raise KeyFieldsSyntaxError(fields, scope, file_name, error) from error


def try_get_keys(directive: DirectiveNode, scope: str, file_name: str | None = None) -> SelectionSetNode | None:
    fields = get_key_fields(directive)
    if fields is None:
        return None
    return parse_key_fields(fields, scope, file_name)


def collect_global_entity_patterns(
    schema_extensions: Iterable[SchemaExtensionNode],
    global_patterns: list[SelectionSetNode],
    file_name: str | None = None,
) -> None:
    for schema_extension in schema_extensions:
        for directive in iter_directives(schema_extension):
            if not is_key_directive(directive):
                continue

            selection_set = try_get_keys(directive, SCHEMA_SCOPE, file_name)
            if selection_set is not None:
                global_patterns.append(selection_set)
                log.debug(f"Registered global entity pattern '{format_selection_set(selection_set)}'")


def collect_type_entity_patterns(
    object_type_extensions: Iterable[ObjectTypeExtensionNode],
    type_patterns: FirstWinsRegistry[SelectionSetNode],
    file_name: str | None = None,
) -> None:
    for object_type_extension in object_type_extensions:
        type_name = object_type_extension.name.value

        # Only the first @key of an extension is looked at.
        directive = get_directive(object_type_extension, KEY_DIRECTIVE)
        if directive is None:
            continue

        selection_set = try_get_keys(directive, f"type '{type_name}'", file_name)
        if selection_set is None:
            log.debug(f"@key on type '{type_name}' has no usable 'fields' argument, ignoring it")
            continue

        if type_patterns.try_add(type_name, selection_set):
            log.debug(f"Registered entity pattern '{format_selection_set(selection_set)}' for type '{type_name}'")
        else:
            log.debug(f"Type '{type_name}' already has an entity pattern, skipping later @key")


def collect_document_entity_patterns(graphql_file: GraphQLFile, patterns: EntityPatterns) -> None:
    """Collect the schema-level and type-level key patterns of one annotation document."""
    document = graphql_file.document
    file_name = graphql_file.display_name

    schema_extensions = definitions_of_kind(document, DefinitionKind.SCHEMA_EXTENSION)
    object_type_extensions = definitions_of_kind(document, DefinitionKind.OBJECT_TYPE_EXTENSION)

    collect_global_entity_patterns(
        cast(list[SchemaExtensionNode], schema_extensions), patterns.global_patterns, file_name
    )
    collect_type_entity_patterns(
        cast(list[ObjectTypeExtensionNode], object_type_extensions), patterns.type_patterns, file_name
    )


def collect_entity_patterns(
    graphql_files: Iterable[GraphQLFile], patterns: EntityPatterns | None = None
) -> EntityPatterns:
    """
    Build (or extend) the entity key registries from annotation documents.

    Args:
        graphql_files: Annotation documents, in precedence order
        patterns: Registries to extend; new ones are created if omitted

    Returns:
        The global and per-type entity patterns

    Raises:
        KeyFieldsSyntaxError: If a ``fields`` string is not a valid selection set
    """
    if patterns is None:
        patterns = EntityPatterns()

    for graphql_file in graphql_files:
        collect_document_entity_patterns(graphql_file, patterns)

    return patterns
