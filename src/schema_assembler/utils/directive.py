from graphql.language.ast import ArgumentNode, DirectiveNode, Node, StringValueNode, ValueNode


def iter_directives(node: Node) -> tuple[DirectiveNode, ...]:
    """Return the directives attached to an AST node, in source order."""
    return tuple(getattr(node, "directives", None) or ())


def get_directive(node: Node, directive_name: str) -> DirectiveNode | None:
    """
    Find the first directive with the given name on an AST node.

    Args:
        node: A definition or extension node carrying directives.
        directive_name: The directive name, without the leading ``@``.
    Returns:
        DirectiveNode | None: The first matching directive, or None if there is none.
    """
    return next((d for d in iter_directives(node) if d.name.value == directive_name), None)


def get_argument(directive: DirectiveNode, argument_name: str) -> ArgumentNode | None:
    return next((a for a in directive.arguments or () if a.name.value == argument_name), None)


def get_argument_value(directive: DirectiveNode, argument_name: str) -> ValueNode | None:
    argument = get_argument(directive, argument_name)
    return argument.value if argument else None


def get_string_argument(directive: DirectiveNode, argument_name: str) -> str | None:
    """
    Read a string literal argument of a directive.

    Args:
        directive: The directive to read from.
        argument_name: The argument whose content is to be extracted.

    Returns:
        str | None: The string value, or None if the argument is missing or not a string literal.
    """
    value = get_argument_value(directive, argument_name)
    return value.value if isinstance(value, StringValueNode) else None


def get_directive_value(node: Node, directive_name: str, argument_name: str = "name") -> str | None:
    """
    Read a string argument from the first directive of a given name on an AST node.

    A missing directive, a missing argument and a non-string argument all mean "not found".

    Args:
        node: The definition or extension node to inspect.
        directive_name: The directive whose argument is read, e.g. ``runtimeType``.
        argument_name: The argument to read (default: ``name``).

    Returns:
        str | None: The argument's string value if present, otherwise None.
    """
    directive = get_directive(node, directive_name)
    if directive is None:
        return None
    return get_string_argument(directive, argument_name)
