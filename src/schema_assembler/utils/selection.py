from collections.abc import Sequence
from typing import cast

from graphql import Source, print_ast
from graphql.language import (
    DirectiveNode,
    FieldNode,
    FragmentSpreadNode,
    InlineFragmentNode,
    SelectionNode,
    SelectionSetNode,
    TokenKind,
)
from graphql.language.parser import Parser

KEY_FIELDS_SOURCE_NAME = "key fields"


def parse_selection_set(fields: str) -> SelectionSetNode:
    """Parse the body of a ``@key(fields: ...)`` argument as a standalone selection set.

    ``"id owner { id }"`` is parsed as ``{id owner { id }}``. The whole string
    must be consumed; trailing tokens are a syntax error.

    Args:
        fields: The selection set body, without the surrounding braces

    Returns:
        The parsed selection set

    Raises:
        GraphQLSyntaxError: If ``fields`` is not a valid selection set body
    """
    parser = Parser(Source(f"{{{fields}}}", KEY_FIELDS_SOURCE_NAME), no_location=True)
    parser.expect_token(TokenKind.SOF)
    selection_set = parser.parse_selection_set()
    parser.expect_token(TokenKind.EOF)
    return selection_set


def _print_directives(directives: Sequence[DirectiveNode] | None) -> str:
    return "".join(f" {print_ast(directive)}" for directive in directives or ())


def _print_selection(selection: SelectionNode) -> str:
    if isinstance(selection, FragmentSpreadNode):
        return f"...{selection.name.value}{_print_directives(selection.directives)}"

    if isinstance(selection, InlineFragmentNode):
        condition = f" on {selection.type_condition.name.value}" if selection.type_condition else ""
        directives = _print_directives(selection.directives)
        return f"...{condition}{directives} {{ {format_selection_set(selection.selection_set)} }}"

    field = cast(FieldNode, selection)
    printed = f"{field.alias.value}: {field.name.value}" if field.alias else field.name.value
    if field.arguments:
        printed += f"({', '.join(print_ast(argument) for argument in field.arguments)})"
    printed += _print_directives(field.directives)
    if field.selection_set:
        printed += f" {{ {format_selection_set(field.selection_set)} }}"
    return printed


def format_selection_set(selection_set: SelectionSetNode) -> str:
    """Render a selection set back to the compact ``fields`` notation, e.g. ``id owner { id }``.

    Arguments and directives are printed with graphql-core, so the result parses
    back into the same selection set.
    """
    return " ".join(_print_selection(selection) for selection in selection_set.selections)
