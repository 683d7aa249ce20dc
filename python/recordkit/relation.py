"""Lazy, chainable queries."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import TYPE_CHECKING, Any, Generic, TypeVar, overload

from recordkit.connection import get_database
from recordkit.exceptions import UnknownAttributeError, UnsupportedOperationError

if TYPE_CHECKING:
    from recordkit.base import Base

T = TypeVar("T", bound="Base")


class Relation(Generic[T]):
    """An equality filter over one model's table, evaluated on first read.

    Relations never change once built: ``where`` returns a new Relation
    with the criteria merged in (later keys win). The first read runs the
    query and caches the records; every later read reuses them, even if
    the table has changed since.

    Example:
        >>> humans = Human.where(house_id=1)     # no SQL yet
        >>> humans.where(fname="Matt")[0].lname  # SELECT ... WHERE house_id = ? AND fname = ?
        'Rubens'
    """

    __slots__ = ("_model", "_criteria", "_cache")

    def __init__(self, model: type[T], criteria: Mapping[str, Any] | None = None) -> None:
        self._model = model
        self._criteria = dict(criteria or {})
        self._cache: list[T] | None = None

    @classmethod
    def _preloaded(
        cls, model: type[T], criteria: Mapping[str, Any], records: Iterable[T]
    ) -> Relation[T]:
        """A Relation whose query is treated as already run, returning ``records``."""
        relation = cls(model, criteria)
        relation._cache = list(records)
        return relation

    @property
    def model(self) -> type[T]:
        return self._model

    @property
    def table_name(self) -> str:
        return self._model.__tablename__

    @property
    def criteria(self) -> dict[str, Any]:
        return dict(self._criteria)

    @property
    def loaded(self) -> bool:
        """Whether the query has already run."""
        return self._cache is not None

    def where(self, criteria: Mapping[str, Any] | None = None, /, **kwargs: Any) -> Relation[T]:
        """Return a new Relation filtered by these criteria as well."""
        return Relation(self._model, {**self._criteria, **(criteria or {}), **kwargs})

    def to_sql(self) -> tuple[str, list[Any]]:
        """Generate SQL string and parameters.

        Criteria keys are checked against the model's columns before they
        are written into the statement.
        """
        columns = self._model.columns()
        for column in self._criteria:
            if column not in columns:
                raise UnknownAttributeError(column)

        sql = f"SELECT * FROM {self.table_name}"
        if self._criteria:
            sql += " WHERE " + " AND ".join(f"{column} = ?" for column in self._criteria)
        return sql, list(self._criteria.values())

    def load(self) -> list[T]:
        """Run the query if it has not run yet and return the cached records."""
        if self._cache is None:
            sql, params = self.to_sql()
            result = get_database().execute(sql, *params)
            self._cache = self._model.parse_all(result)
        return self._cache

    def to_list(self) -> list[T]:
        return list(self.load())

    def first(self) -> T | None:
        records = self.load()
        return records[0] if records else None

    def __iter__(self) -> Iterator[T]:
        return iter(self.load())

    def __len__(self) -> int:
        return len(self.load())

    @overload
    def __getitem__(self, index: int) -> T: ...

    @overload
    def __getitem__(self, index: slice) -> list[T]: ...

    def __getitem__(self, index: int | slice) -> T | list[T]:
        return self.load()[index]

    def __contains__(self, item: object) -> bool:
        return item in self.load()

    def __bool__(self) -> bool:
        return bool(self.load())

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Relation):
            other = other.load()
        return self.load() == other

    __hash__ = None  # type: ignore[assignment]

    def __getattr__(self, name: str) -> Any:
        # Only reached for names Relation does not define
        raise UnsupportedOperationError(name)

    def __repr__(self) -> str:
        if self._cache is not None:
            return repr(self._cache)
        return f"<Relation {self.table_name} where {self._criteria!r}>"


__all__ = ["Relation"]
