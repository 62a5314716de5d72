from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, ClassVar, NoReturn

from graphql import GraphQLSchema
from graphql.language.ast import DefinitionNode, DocumentNode, SelectionSetNode

from schema_assembler import log
from schema_assembler.annotated_schema import AnnotatedSchema
from schema_assembler.config import AssemblerConfig
from schema_assembler.documents import DocumentKind, GraphQLFile, classify_document
from schema_assembler.entity_patterns import EntityPatterns, collect_document_entity_patterns
from schema_assembler.errors import InvalidDocumentsError, RequestExecutionNotSupportedError
from schema_assembler.leaf_types import LeafTypeRegistry, add_default_scalar_infos, collect_document_leaf_types
from schema_assembler.passthrough import PlaceholderRegistry, register_unknown_scalars
from schema_assembler.schema_builder import build_annotated_schema, build_schema
from schema_assembler.utils.registry import FirstWinsRegistry


@dataclass
class TypeSystemModel:
    """The merged type system of one assembly run.

    Holds the definitions of every definition document, the placeholder scalars
    standing in for custom scalars, and the leaf type and entity key registries
    for the interceptors that annotate the built schema.

    The model describes types only. It has no request pipeline and
    ``execute`` always fails.
    """

    is_executable: ClassVar[bool] = False

    definitions: list[DefinitionNode] = field(default_factory=list)
    placeholder_scalars: PlaceholderRegistry = field(default_factory=FirstWinsRegistry)
    leaf_types: LeafTypeRegistry = field(default_factory=FirstWinsRegistry)
    entity_patterns: EntityPatterns = field(default_factory=EntityPatterns)
    strict_validation: bool = True

    @property
    def global_entity_patterns(self) -> list[SelectionSetNode]:
        return self.entity_patterns.global_patterns

    @property
    def type_entity_patterns(self) -> FirstWinsRegistry[SelectionSetNode]:
        return self.entity_patterns.type_patterns

    @property
    def document(self) -> DocumentNode:
        """All retained definitions as a single document."""
        return DocumentNode(definitions=tuple(self.definitions))

    def build_schema(self) -> GraphQLSchema:
        """Build the introspectable schema for this model."""
        return build_schema(self)

    def build_annotated_schema(self) -> AnnotatedSchema:
        """Build the schema and attach leaf type and entity key metadata to its types."""
        return build_annotated_schema(self)

    def execute(self, *args: Any, **kwargs: Any) -> NoReturn:
        raise RequestExecutionNotSupportedError()


def _as_graphql_file(item: GraphQLFile | DocumentNode) -> GraphQLFile:
    if isinstance(item, GraphQLFile):
        return item
    return GraphQLFile(document=item)


def assemble(
    files: Iterable[GraphQLFile | DocumentNode] | None,
    strict_validation: bool = True,
    skip_entity_extraction: bool = False,
) -> TypeSystemModel:
    """Assemble parsed GraphQL documents into a type system model.

    Documents are processed in the given order, which decides precedence:
    the first extension of a leaf type and the first ``@key`` of an object
    type win. Documents holding any extension node are read for annotations
    only; all other documents contribute their definitions to the model.

    Args:
        files: Parsed documents, optionally with their file names
        strict_validation: Validate the model when the schema is built from it
        skip_entity_extraction: Ignore ``@key`` directives, for clients without a normalized cache

    Returns:
        The assembled model

    Raises:
        InvalidDocumentsError: If ``files`` is None
        KeyFieldsSyntaxError: If a ``@key`` fields string is not a valid selection set
    """
    if files is None:
        raise InvalidDocumentsError("No GraphQL documents were given to assemble")

    graphql_files = [_as_graphql_file(item) for item in files]

    model = TypeSystemModel(strict_validation=strict_validation)
    annotation_count = 0

    for graphql_file in graphql_files:
        document = graphql_file.document
        kind = classify_document(document)
        log.debug(f"Classified {graphql_file.display_name or 'document'} as {kind.value} document")

        if kind is DocumentKind.ANNOTATION:
            annotation_count += 1
            collect_document_leaf_types(document, model.leaf_types)
            if not skip_entity_extraction:
                collect_document_entity_patterns(graphql_file, model.entity_patterns)
        else:
            register_unknown_scalars(document, model.placeholder_scalars)
            model.definitions.extend(document.definitions)

    add_default_scalar_infos(model.leaf_types)

    log.info(
        f"Assembled {len(graphql_files)} document(s) ({annotation_count} annotation): "
        f"{len(model.definitions)} definition(s), {len(model.placeholder_scalars)} placeholder scalar(s), "
        f"{len(model.leaf_types)} leaf type(s), {len(model.global_entity_patterns)} global and "
        f"{len(model.type_entity_patterns)} type entity pattern(s)"
    )

    return model


def assemble_with_config(
    files: Iterable[GraphQLFile | DocumentNode] | None, config: AssemblerConfig
) -> TypeSystemModel:
    return assemble(
        files,
        strict_validation=config.strict_validation,
        skip_entity_extraction=config.skip_entity_extraction,
    )
