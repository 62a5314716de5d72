from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ariadne import load_schema_from_path
from graphql import Source, parse
from graphql.language.ast import (
    DefinitionNode,
    DocumentNode,
    EnumTypeExtensionNode,
    ObjectTypeExtensionNode,
    ScalarTypeDefinitionNode,
    ScalarTypeExtensionNode,
    SchemaExtensionNode,
    TypeSystemExtensionNode,
)

from schema_assembler import log


class DefinitionKind(str, Enum):
    """The definition kinds the assembler tells apart; everything else is ``OTHER``."""

    SCALAR_TYPE_DEFINITION = "scalarTypeDefinition"
    SCALAR_TYPE_EXTENSION = "scalarTypeExtension"
    ENUM_TYPE_EXTENSION = "enumTypeExtension"
    OBJECT_TYPE_EXTENSION = "objectTypeExtension"
    SCHEMA_EXTENSION = "schemaExtension"
    OTHER_EXTENSION = "otherExtension"
    OTHER = "other"

    @property
    def is_extension(self) -> bool:
        return self in EXTENSION_KINDS


EXTENSION_KINDS = frozenset(
    {
        DefinitionKind.SCALAR_TYPE_EXTENSION,
        DefinitionKind.ENUM_TYPE_EXTENSION,
        DefinitionKind.OBJECT_TYPE_EXTENSION,
        DefinitionKind.SCHEMA_EXTENSION,
        DefinitionKind.OTHER_EXTENSION,
    }
)

_DEFINITION_KINDS: dict[type[DefinitionNode], DefinitionKind] = {
    ScalarTypeDefinitionNode: DefinitionKind.SCALAR_TYPE_DEFINITION,
    ScalarTypeExtensionNode: DefinitionKind.SCALAR_TYPE_EXTENSION,
    EnumTypeExtensionNode: DefinitionKind.ENUM_TYPE_EXTENSION,
    ObjectTypeExtensionNode: DefinitionKind.OBJECT_TYPE_EXTENSION,
    SchemaExtensionNode: DefinitionKind.SCHEMA_EXTENSION,
}


class DocumentKind(str, Enum):
    ANNOTATION = "annotation"
    DEFINITION = "definition"


@dataclass(frozen=True)
class GraphQLFile:
    """A parsed GraphQL document together with the file it came from, if any."""

    document: DocumentNode
    file_name: str | None = None

    @classmethod
    def from_string(cls, source: str, file_name: str | None = None) -> "GraphQLFile":
        """Parse SDL text into a GraphQLFile; the file name doubles as the source name."""
        document = parse(Source(source, file_name or "GraphQL request"))
        return cls(document=document, file_name=file_name)

    @property
    def display_name(self) -> str | None:
        """Name used in diagnostics: the file name, else the parsed source's name."""
        if self.file_name:
            return self.file_name
        loc = self.document.loc
        return loc.source.name if loc else None


def classify_definition(definition: DefinitionNode) -> DefinitionKind:
    """Map a graphql-core definition node onto the closed set of kinds the assembler consumes."""
    kind = _DEFINITION_KINDS.get(type(definition))
    if kind is not None:
        return kind
    if isinstance(definition, TypeSystemExtensionNode):
        return DefinitionKind.OTHER_EXTENSION
    return DefinitionKind.OTHER


def classify_document(document: DocumentNode) -> DocumentKind:
    """Classify a whole document.

    A single extension node of any kind makes the entire document an annotation
    document, base type definitions in it included.
    """
    if any(classify_definition(definition).is_extension for definition in document.definitions):
        return DocumentKind.ANNOTATION
    return DocumentKind.DEFINITION


def definitions_of_kind(document: DocumentNode, kind: DefinitionKind) -> list[DefinitionNode]:
    """Return the definitions of one kind, in document order."""
    return [definition for definition in document.definitions if classify_definition(definition) is kind]


def resolve_graphql_files(paths: list[Path]) -> list[Path]:
    """Resolve a list of paths (files and directories) into a flat list of unique GraphQL files.

    Args:
        paths: List of file or directory paths

    Returns:
        Flat list of unique GraphQL file paths, sorted so that assembly order is reproducible
    """
    resolved_files: set[Path] = set()

    for path in paths:
        if path.is_file():
            resolved_files.add(path)
        elif path.is_dir():
            for file in path.rglob("*.graphql"):
                resolved_files.add(file)

    return sorted(resolved_files)


def load_graphql_file(path: Path) -> GraphQLFile:
    """Read and parse a single GraphQL file.

    Raises:
        GraphQLFileSyntaxError: If the file is not valid GraphQL
    """
    content = load_schema_from_path(path)
    document = parse(Source(content, str(path)))
    log.debug(f"Parsed {len(document.definitions)} definition(s) from {path}")
    return GraphQLFile(document=document, file_name=path.name)


def load_graphql_files(paths: Iterable[Path]) -> list[GraphQLFile]:
    """Load GraphQL files (or directories of them) in resolved order."""
    return [load_graphql_file(path) for path in resolve_graphql_files(list(paths))]
