from graphql import GraphQLSyntaxError


class AssemblyError(Exception):
    """Base class for every failure surfaced by the schema assembler."""


class InvalidDocumentsError(AssemblyError, ValueError):
    """Raised when no document collection was passed to the assembler."""


class KeyFieldsSyntaxError(AssemblyError):
    """Raised when the ``fields`` argument of a ``@key`` directive is not a valid selection set.

    Attributes:
        fields: The raw ``fields`` string as written in the directive
        scope: The extended type name, or ``"schema"`` for schema extensions
        file_name: The document the directive was found in, if known
        syntax_error: The underlying graphql-core syntax error
    """

    def __init__(
        self,
        fields: str,
        scope: str,
        file_name: str | None,
        syntax_error: GraphQLSyntaxError,
    ) -> None:
        self.fields = fields
        self.scope = scope
        self.file_name = file_name
        self.syntax_error = syntax_error

        location = f" in '{file_name}'" if file_name else ""
        super().__init__(f'Invalid @key(fields: "{fields}") on {scope}{location}: {syntax_error.message}')


class SchemaValidationError(AssemblyError):
    """Raised when the assembled model does not build into a valid GraphQL schema."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__("Schema validation failed:\n" + "\n".join(f"  - {error}" for error in errors))


class RequestExecutionNotSupportedError(AssemblyError):
    """Raised on every attempt to execute a request against an assembled model."""

    def __init__(self) -> None:
        super().__init__("The assembled schema is for type introspection only; request execution is not supported.")


class ConfigError(AssemblyError, TypeError):
    """Raised when an assembler configuration file does not hold a mapping."""
