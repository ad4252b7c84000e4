"""
Read projections returned by collection listings.
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict

from tiny_firestore_odm.identifiers import DocumentName

T = TypeVar("T", bound=BaseModel)


class NamedDocument(BaseModel, Generic[T]):
    """A key/value pair, where the key (name) is the fully-qualified path to the document."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    name: DocumentName
    value: T

    @property
    def key(self) -> str:
        """Document key within its collection."""
        return self.name.leaf_name()
