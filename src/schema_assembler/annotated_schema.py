from dataclasses import dataclass, field

from graphql import GraphQLSchema
from graphql.language.ast import SelectionSetNode

from schema_assembler.leaf_types import LeafTypeInfo


@dataclass
class TypeMetadata:
    leaf_type: LeafTypeInfo | None = None
    entity_key: SelectionSetNode | None = None

    @property
    def is_entity(self) -> bool:
        return self.entity_key is not None


@dataclass
class AnnotatedSchema:
    schema: GraphQLSchema
    type_metadata: dict[str, TypeMetadata] = field(default_factory=dict)

    def metadata_for(self, type_name: str) -> TypeMetadata:
        """Return the metadata of a type, creating an empty entry on first access."""
        return self.type_metadata.setdefault(type_name, TypeMetadata())

    def get_leaf_type(self, type_name: str) -> LeafTypeInfo | None:
        metadata = self.type_metadata.get(type_name)
        return metadata.leaf_type if metadata else None

    def get_entity_key(self, type_name: str) -> SelectionSetNode | None:
        metadata = self.type_metadata.get(type_name)
        return metadata.entity_key if metadata else None
