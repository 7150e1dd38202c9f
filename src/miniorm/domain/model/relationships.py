"""Tagged relationship descriptors built from registered entity shapes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class Cardinality(StrEnum):
    MANY_TO_ONE = "many_to_one"
    ONE_TO_MANY = "one_to_many"
    MANY_TO_MANY = "many_to_many"


@dataclass(frozen=True, slots=True)
class ReferenceEdge:
    """Owning side of a foreign key: ``owner.foreign_key`` resolves into ``owner.navigation``."""

    owner: type
    foreign_key: str
    navigation: str
    target: type

    @property
    def cardinality(self) -> Cardinality:
        return Cardinality.MANY_TO_ONE


@dataclass(frozen=True, slots=True)
class OneToManyEdge:
    """Inverse side: element records whose ``join_field`` equals the owner's key."""

    owner: type
    navigation: str
    element: type
    join_field: str

    @property
    def cardinality(self) -> Cardinality:
        return Cardinality.ONE_TO_MANY


@dataclass(frozen=True, slots=True)
class ManyToManyEdge:
    """Inverse side through a join record with a composite key.

    The navigation collection holds join records; traversal to the opposite side
    goes through the join record's own reference field.
    """

    owner: type
    navigation: str
    element: type
    join_field: str

    @property
    def cardinality(self) -> Cardinality:
        return Cardinality.MANY_TO_MANY


type CollectionEdge = OneToManyEdge | ManyToManyEdge
type RelationshipEdge = ReferenceEdge | CollectionEdge
