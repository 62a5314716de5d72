"""Leaf type registry: runtime and serialization representations of scalars and enums.

Leaf types are described in annotation documents through type extensions::

    extend scalar Money @runtimeType(name: "decimal.Decimal") @serializationType(name: "str")
    extend enum Episode @runtimeType(name: "starwars.Episode")

The first extension seen for a type name fixes its entry for good. A later
extension of the same name is skipped as a whole, even when it would supply a
value the first one left out, and the built-in defaults only fill names that
no annotation document mentioned. An entry created from a bare
``extend scalar Money @runtimeType(...)`` therefore keeps an absent
serialization type.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import cast

from graphql.language.ast import DocumentNode, EnumTypeExtensionNode, ScalarTypeExtensionNode

from schema_assembler import log
from schema_assembler.documents import DefinitionKind, definitions_of_kind
from schema_assembler.utils.directive import get_directive_value
from schema_assembler.utils.registry import FirstWinsRegistry

RUNTIME_TYPE_DIRECTIVE = "runtimeType"
SERIALIZATION_TYPE_DIRECTIVE = "serializationType"


class TypeNames:
    """Python runtime representations used by the built-in leaf types."""

    STRING = "str"
    BOOLEAN = "bool"
    BYTE = "int"
    INT16 = "int"
    INT32 = "int"
    INT64 = "int"
    FLOAT = "float"
    DECIMAL = "decimal.Decimal"
    URI = "pydantic.AnyUrl"
    UUID = "uuid.UUID"
    DATE_TIME_OFFSET = "datetime.datetime"
    DATE = "datetime.date"
    TIME_SPAN = "datetime.timedelta"
    BYTE_ARRAY = "bytes"


class ScalarNames:
    STRING = "String"
    ID = "ID"
    BOOLEAN = "Boolean"
    BYTE = "Byte"
    SHORT = "Short"
    INT = "Int"
    LONG = "Long"
    FLOAT = "Float"
    DECIMAL = "Decimal"
    URL = "Url"
    UUID = "Uuid"
    GUID = "Guid"
    DATE_TIME = "DateTime"
    DATE = "Date"
    TIME_SPAN = "TimeSpan"
    BYTE_ARRAY = "ByteArray"


@dataclass(frozen=True)
class LeafTypeInfo:
    type_name: str
    runtime_type: str | None = None
    serialization_type: str | None = None


LeafTypeRegistry = FirstWinsRegistry[LeafTypeInfo]

# (GraphQL name, runtime type, serialization type)
DEFAULT_LEAF_TYPES: tuple[tuple[str, str, str], ...] = (
    (ScalarNames.STRING, TypeNames.STRING, TypeNames.STRING),
    (ScalarNames.ID, TypeNames.STRING, TypeNames.STRING),
    (ScalarNames.BOOLEAN, TypeNames.BOOLEAN, TypeNames.BOOLEAN),
    (ScalarNames.BYTE, TypeNames.BYTE, TypeNames.BYTE),
    (ScalarNames.SHORT, TypeNames.INT16, TypeNames.INT16),
    (ScalarNames.INT, TypeNames.INT32, TypeNames.INT32),
    (ScalarNames.LONG, TypeNames.INT64, TypeNames.INT64),
    (ScalarNames.FLOAT, TypeNames.FLOAT, TypeNames.FLOAT),
    (ScalarNames.DECIMAL, TypeNames.DECIMAL, TypeNames.DECIMAL),
    (ScalarNames.URL, TypeNames.URI, TypeNames.STRING),
    (ScalarNames.UUID, TypeNames.UUID, TypeNames.UUID),
    (ScalarNames.GUID, TypeNames.UUID, TypeNames.UUID),
    (ScalarNames.DATE_TIME, TypeNames.DATE_TIME_OFFSET, TypeNames.STRING),
    (ScalarNames.DATE, TypeNames.DATE, TypeNames.STRING),
    (ScalarNames.TIME_SPAN, TypeNames.TIME_SPAN, TypeNames.STRING),
    (ScalarNames.BYTE_ARRAY, TypeNames.BYTE_ARRAY, TypeNames.BYTE_ARRAY),
)


def _try_add_leaf_type(
    leaf_types: LeafTypeRegistry,
    node: ScalarTypeExtensionNode | EnumTypeExtensionNode,
) -> None:
    type_name = node.name.value
    if type_name in leaf_types:
        log.debug(f"Leaf type '{type_name}' is already registered, skipping later extension")
        return

    info = LeafTypeInfo(
        type_name=type_name,
        runtime_type=get_directive_value(node, RUNTIME_TYPE_DIRECTIVE),
        serialization_type=get_directive_value(node, SERIALIZATION_TYPE_DIRECTIVE),
    )
    leaf_types.try_add(type_name, info)
    log.debug(f"Registered leaf type {info}")


def collect_scalar_infos(
    scalar_type_extensions: Iterable[ScalarTypeExtensionNode], leaf_types: LeafTypeRegistry
) -> None:
    for scalar_type_extension in scalar_type_extensions:
        _try_add_leaf_type(leaf_types, scalar_type_extension)


def collect_enum_infos(enum_type_extensions: Iterable[EnumTypeExtensionNode], leaf_types: LeafTypeRegistry) -> None:
    for enum_type_extension in enum_type_extensions:
        _try_add_leaf_type(leaf_types, enum_type_extension)


def collect_document_leaf_types(document: DocumentNode, leaf_types: LeafTypeRegistry) -> None:
    """Register the scalar extensions of one annotation document, then its enum extensions."""
    scalar_extensions = definitions_of_kind(document, DefinitionKind.SCALAR_TYPE_EXTENSION)
    enum_extensions = definitions_of_kind(document, DefinitionKind.ENUM_TYPE_EXTENSION)
    collect_scalar_infos(cast(list[ScalarTypeExtensionNode], scalar_extensions), leaf_types)
    collect_enum_infos(cast(list[EnumTypeExtensionNode], enum_extensions), leaf_types)


def collect_leaf_types(
    documents: Iterable[DocumentNode], leaf_types: LeafTypeRegistry | None = None
) -> LeafTypeRegistry:
    """
    Build (or extend) the leaf type registry from annotation documents.

    Args:
        documents: Annotation documents, in precedence order
        leaf_types: Registry to extend; a new one is created if omitted

    Returns:
        The registry holding one entry per leaf type name
    """
    if leaf_types is None:
        leaf_types = LeafTypeRegistry()

    for document in documents:
        collect_document_leaf_types(document, leaf_types)

    return leaf_types


def add_default_scalar_infos(leaf_types: LeafTypeRegistry) -> None:
    """Add the built-in leaf types whose names are not registered yet."""
    added = 0
    for type_name, runtime_type, serialization_type in DEFAULT_LEAF_TYPES:
        if leaf_types.try_add(type_name, LeafTypeInfo(type_name, runtime_type, serialization_type)):
            added += 1

    log.debug(f"Added {added} default leaf type(s)")
