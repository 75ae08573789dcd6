"""Persisted search artifacts.

SearchRecord and LlmChunk are the durable outputs of the indexer and the
inputs of the query engine and context assembler. Both serialize with the
camelCase keys the browser widget reads; missing optional fields default to
empty values so partially-populated JSON never raises.
"""

from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
)
from pydantic.alias_generators import to_camel


def _default_if_none(model: type[BaseModel], value: Any, info: ValidationInfo) -> Any:
    if value is None and info.field_name is not None:
        return model.model_fields[info.field_name].get_default(
            call_default_factory=True
        )
    return value


class SearchRecord(BaseModel):
    """One independently addressable search hit: a single page section.

    ``content`` is a short preview for result lists; ``full_content`` keeps
    the untruncated section text used for scoring. ``search_text`` is the
    only field the inverted index reads.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    id: str = Field("", description="Truncated MD5 of the anchored URL")
    url: str = Field("", description="Page URL with optional #anchor")
    title: str = Field("", description="Page title")
    heading: str | None = Field(None, description="Section heading, if any")
    heading_level: int = Field(0, ge=0, le=4, description="1-4, 0 if none")
    content: str = Field("", description="Preview, at most 150 chars + '...'")
    full_content: str = Field("", description="Untruncated section text")
    category: str = Field("", description="Documentation area")
    version: str = Field("", description="Product version bucket")
    breadcrumb: list[str] = Field(default_factory=list)
    search_text: str = Field(
        "",
        alias="_searchText",
        validation_alias=AliasChoices("_searchText", "searchText", "search_text"),
        description="Lowercased title + heading + content",
    )

    @field_validator(
        "id",
        "url",
        "title",
        "heading_level",
        "content",
        "full_content",
        "category",
        "version",
        "breadcrumb",
        "search_text",
        mode="before",
    )
    @classmethod
    def _null_to_default(cls, value: Any, info: ValidationInfo) -> Any:
        """Read JSON nulls as the field's empty default."""
        return _default_if_none(cls, value, info)

    def to_json_dict(self) -> dict[str, Any]:
        """Serialize with wire keys for search-index.json."""
        return self.model_dump(by_alias=True)


class LlmChunk(BaseModel):
    """A token-budgeted slice of one page used as LLM context.

    Chunk positioning fields are only set when the page was split into two
    or more chunks and are omitted from the serialized form otherwise.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    id: str = ""
    url: str = ""
    title: str = ""
    category: str = ""
    version: str = ""
    content: str = ""
    token_estimate: int = Field(0, ge=0)
    chunk_index: int | None = None
    chunk_total: int | None = None
    section_range: str | None = None
    section_start_index: int | None = None
    section_end_index: int | None = None

    @field_validator(
        "id",
        "url",
        "title",
        "category",
        "version",
        "content",
        "token_estimate",
        mode="before",
    )
    @classmethod
    def _null_to_default(cls, value: Any, info: ValidationInfo) -> Any:
        return _default_if_none(cls, value, info)

    def to_json_dict(self) -> dict[str, Any]:
        """Serialize with wire keys for llm-chunks.json, dropping unset fields."""
        return self.model_dump(by_alias=True, exclude_none=True)
