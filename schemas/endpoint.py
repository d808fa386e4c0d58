"""
Pydantic schemas describing the upstream endpoints to ingest
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Dict, List


class NestedTableDescriptor(BaseModel):
    """
    An array field of the parent record that is stored in its own table.

    Each element of ``record[nested_key]`` becomes one row of ``child_table``
    carrying ``_parent_<parent_key>`` with the parent's value.
    """

    model_config = ConfigDict(frozen=True)

    nested_key: str = Field(..., min_length=1)
    child_table: str = Field(..., min_length=1, max_length=64)
    parent_key: str = Field(..., min_length=1)

    @property
    def parent_column(self) -> str:
        return f"_parent_{self.parent_key}"


class EndpointDescriptor(BaseModel):
    """A single upstream collection and the destination table it lands in"""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., min_length=1)
    table_name: str = Field(..., min_length=1, max_length=64)
    params: Dict[str, Any] = Field(default_factory=dict)
    nested_tables: List[NestedTableDescriptor] = Field(default_factory=list)
    requires_date: bool = False

    @field_validator("path")
    @classmethod
    def ensure_leading_slash(cls, v: str) -> str:
        """Paths are joined to the API base URL, so keep them absolute"""
        return v if v.startswith("/") else f"/{v}"
