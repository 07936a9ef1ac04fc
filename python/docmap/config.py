"""Mapper configuration.

MapperConfig is an immutable pydantic model handed to DocumentMapper:

    id_key:             document key of the identifier property ("_id")
    id_names:           property names treated as identifier when no field
                        is designated explicitly
    coerce_object_ids:  write ObjectId-formatted str identifiers as ObjectId
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class MapperConfig(BaseModel):
    """Settings shared by the descriptor resolver, writer and reader."""

    model_config = ConfigDict(frozen=True)

    id_key: str = Field(default="_id", min_length=1)
    id_names: tuple[str, ...] = ("id", "_id")
    coerce_object_ids: bool = True


__all__ = ["MapperConfig"]
