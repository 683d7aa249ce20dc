"""Batch loading of associations for whole tables."""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING, Any, TypeVar

from recordkit.associations import BelongsToOptions, HasManyOptions
from recordkit.exceptions import AssociationError
from recordkit.relation import Relation

if TYPE_CHECKING:
    from recordkit.base import Base

T = TypeVar("T", bound="Base")


def includes(model: type[T], name: str) -> list[T]:
    """Load every ``model`` record with association ``name`` preloaded.

    Runs exactly two queries, one per table, whatever the number of
    records, and matches them up in memory. Each record's accessor then
    returns the preloaded value: for ``has_many`` an already-loaded
    :class:`Relation` (possibly empty), for ``belongs_to`` a record or None.
    Chaining ``where`` on a preloaded Relation queries again.

    Example:
        >>> humans = Human.includes("cats")
        >>> [len(h.cats) for h in humans]   # no further queries
        [1, 1, 2, 0]
    """
    assoc = model.__associations__.get(name)
    if assoc is None:
        raise AssociationError(f"{model.__name__} has no association '{name}'")
    if not isinstance(assoc, (BelongsToOptions, HasManyOptions)):
        raise AssociationError(
            f"'{name}' is a through association and cannot be loaded with includes()"
        )

    records = model.all()
    related = assoc.model_class.all()

    related_by_key: dict[Any, list[Base]] = defaultdict(list)
    for item in related:
        related_by_key[item.read_attribute(assoc.other_key)].append(item)

    for record in records:
        key = record.read_attribute(assoc.self_key)
        # SQL equality never matches NULL, so neither does the preload
        matches = related_by_key.get(key, []) if key is not None else []
        if assoc.collection:
            record._set_association(
                name, Relation._preloaded(assoc.model_class, {assoc.other_key: key}, matches)
            )
        else:
            record._set_association(name, matches[0] if matches else None)

    return records


__all__ = ["includes"]
