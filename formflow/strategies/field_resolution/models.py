"""Field resolution domain models.

Pydantic and dataclass models shared by the catalog extractor, the
strategies and the substitution engine. Kept here to avoid circular
imports with the interfaces and API layers.
"""

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class FieldDescriptor(BaseModel):
    """One form field as authored in the form builder.

    `id` may change when the form is edited; `stable_id` never does once set.
    Unknown attributes (options, validation, styling) are kept but ignored.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="allow",
        frozen=True,
        coerce_numbers_to_str=True,
    )

    id: str = Field(default="", description="Current field id, unique within the form")
    stable_id: str | None = Field(default=None, alias="stableId", description="Immutable identity")
    mapping: str | None = Field(default=None, description="Author-supplied semantic key")
    label: str | None = Field(default=None, description="Human label")
    type: str | None = Field(default=None, description="Field type: text, email, tel, select, ...")
    key: str | None = Field(default=None, description="Optional UI-library key")


@dataclass(frozen=True)
class FieldCatalog:
    """Flattened, ordered list of a form's field descriptors."""

    form_id: str
    fields: tuple[FieldDescriptor, ...] = ()

    def __iter__(self) -> Iterator[FieldDescriptor]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def find(self, predicate: Callable[[FieldDescriptor], bool]) -> FieldDescriptor | None:
        """Return the first descriptor matching the predicate."""
        return next((f for f in self.fields if predicate(f)), None)

    def by_id(self, field_id: str) -> FieldDescriptor | None:
        return self.find(lambda f: f.id == field_id)

    @classmethod
    def empty(cls, form_id: str = "") -> "FieldCatalog":
        return cls(form_id=form_id)


@dataclass(frozen=True)
class MappedField:
    """An entry of the upstream `__mappedFields` side structure."""

    display_key: str
    value: Any = None


@dataclass(frozen=True)
class SubmissionPayload:
    """A submission normalized to a single flat representation.

    Attributes:
        values: fieldId -> value, whatever the original shape was.
        mapped_fields: Entries from `__mappedFields`, in original order.
        shape: 'flat' for a mapping payload, 'items' for an [{id, value}] list,
            'empty' for anything else.
    """

    values: Mapping[str, Any] = field(default_factory=dict)
    mapped_fields: tuple[MappedField, ...] = ()
    shape: str = "empty"

    def has(self, key: str) -> bool:
        return key in self.values

    def get(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    def truthy(self, *keys: str) -> Any:
        """Return the first value among `keys` that is present and truthy."""
        for key in keys:
            value = self.values.get(key)
            if value:
                return value
        return None

    @property
    def is_item_array(self) -> bool:
        return self.shape == "items"
