"""Per-property mapping overrides.

Two ways to attach overrides to an entity property:

    DocField: marker for typing.Annotated, works for any entity class
        (dataclasses, plain annotated classes, pydantic models):

        @dataclass
        class Person:
            pk: Annotated[str | None, DocField(id=True)] = None
            email: Annotated[str, DocField(key="mail")] = ""
            cache: Annotated[dict, DocField(transient=True)] = field(default_factory=dict)

    Field(): wraps pydantic.Field for pydantic models, storing the overrides
        in json_schema_extra:

        class Person(BaseModel):
            pk: str | None = Field(default=None, doc_id=True)
            email: str = Field(default="", doc_key="mail")

Override keys:
    key / doc_key:              document key (default: property name)
    id / doc_id:                designate the identifier property
    transient / doc_transient:  exclude the property from mapping
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import Field as PydanticField
from pydantic.fields import FieldInfo, PydanticUndefined


@dataclass(frozen=True, slots=True)
class DocField:
    """Mapping overrides for a single property."""

    key: str | None = None
    id: bool = False
    transient: bool = False

    def merge(self, other: DocField) -> DocField:
        return DocField(
            key=other.key if other.key is not None else self.key,
            id=self.id or other.id,
            transient=self.transient or other.transient,
        )


def Field(
    default: Any = PydanticUndefined,
    *,
    doc_key: str | None = None,
    doc_id: bool = False,
    doc_transient: bool = False,
    **kwargs: Any,
) -> Any:
    """pydantic.Field with document mapping overrides."""
    extra = kwargs.pop("json_schema_extra", None)
    if extra is not None and not isinstance(extra, dict):
        raise TypeError("Field() only merges dict json_schema_extra values")
    extra = dict(extra or {})
    if doc_key is not None:
        extra["doc_key"] = doc_key
    if doc_id:
        extra["doc_id"] = True
    if doc_transient:
        extra["doc_transient"] = True
    return PydanticField(default, json_schema_extra=extra or None, **kwargs)


def overrides_from(
    metadata: tuple[Any, ...] = (),
    field_info: FieldInfo | None = None,
) -> DocField:
    """Collect overrides from Annotated metadata and pydantic field info."""
    result = DocField()
    sources = list(metadata)
    if field_info is not None:
        sources.extend(field_info.metadata)
    for meta in sources:
        if isinstance(meta, DocField):
            result = result.merge(meta)

    extra = getattr(field_info, "json_schema_extra", None)
    if isinstance(extra, dict):
        result = result.merge(
            DocField(
                key=extra.get("doc_key"),
                id=bool(extra.get("doc_id", False)),
                transient=bool(extra.get("doc_transient", False)),
            )
        )
    return result


__all__ = ["DocField", "Field", "overrides_from"]
