from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from ariadne import gql
from hypothesis import strategies as st
from hypothesis.strategies import composite

from schema_assembler.documents import GraphQLFile

LEAF_TYPE_NAMES = ["Money", "Currency", "Color", "Timestamp"]
OBJECT_TYPE_NAMES = ["User", "Organization", "Invoice"]
FIELD_NAMES = ["id", "orgId", "key", "uuid"]


class TestSchemaData:
    TESTS_DATA_DIR: Path = Path(__file__).parent / "data"
    SCHEMA: Path = TESTS_DATA_DIR / "schema.graphql"
    ANNOTATIONS: Path = TESTS_DATA_DIR / "annotations.graphql"
    INVALID_KEY: Path = TESTS_DATA_DIR / "invalid_key.graphql"
    CONFIG: Path = TESTS_DATA_DIR / "assembler.yaml"


@pytest.fixture
def graphql_file() -> Callable[..., GraphQLFile]:
    """Factory parsing SDL into a GraphQLFile."""

    def _graphql_file(source: str, file_name: str | None = None) -> GraphQLFile:
        return GraphQLFile.from_string(gql(source), file_name)

    return _graphql_file


@pytest.fixture(scope="module")
def schema_paths() -> list[Path]:
    assert TestSchemaData.SCHEMA.exists(), f"Missing test file: {TestSchemaData.SCHEMA}"
    assert TestSchemaData.ANNOTATIONS.exists(), f"Missing test file: {TestSchemaData.ANNOTATIONS}"
    return [TestSchemaData.ANNOTATIONS, TestSchemaData.SCHEMA]


identifiers = st.from_regex(r"[A-Za-z][A-Za-z0-9_.]{0,12}", fullmatch=True)


@composite
def leaf_extension_strategy(draw: Callable[[st.SearchStrategy[Any]], Any]) -> tuple[str, str | None, str | None]:
    """A scalar extension as (type name, runtime type, serialization type); each directive is optional."""
    type_name = draw(st.sampled_from(LEAF_TYPE_NAMES))
    runtime_type = draw(st.none() | identifiers)
    serialization_type = draw(st.none() | identifiers)
    return type_name, runtime_type, serialization_type


def leaf_extension_sdl(type_name: str, runtime_type: str | None, serialization_type: str | None) -> str:
    # A scalar extension needs at least one directive to be valid SDL.
    directives = " @leaf"
    if runtime_type is not None:
        directives += f' @runtimeType(name: "{runtime_type}")'
    if serialization_type is not None:
        directives += f' @serializationType(name: "{serialization_type}")'
    return f"extend scalar {type_name}{directives}"


@composite
def type_key_strategy(draw: Callable[[st.SearchStrategy[Any]], Any]) -> tuple[str, list[str]]:
    """An object type extension as (type name, key field names)."""
    type_name = draw(st.sampled_from(OBJECT_TYPE_NAMES))
    fields = draw(st.lists(st.sampled_from(FIELD_NAMES), min_size=1, max_size=3, unique=True))
    return type_name, fields
