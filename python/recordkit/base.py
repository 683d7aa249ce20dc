"""Declarative base for record classes."""

from __future__ import annotations

import operator
from collections.abc import Iterable, Mapping
from typing import Any, ClassVar, Self

from recordkit.associations import AssocOptions, register_model
from recordkit.connection import get_database
from recordkit.exceptions import RecordKitError, UnknownAttributeError
from recordkit.naming import tableize
from recordkit.reflection import columns_for
from recordkit.relation import Relation


class ModelMeta(type):
    """Metaclass for record classes.

    Each class gets its own table name, column cache and association map;
    none of these are shared with or inherited from a parent class.
    """

    def __new__(
        mcs,
        name: str,
        bases: tuple[type, ...],
        namespace: dict[str, Any],
        **kwargs: Any,
    ) -> ModelMeta:
        cls = super().__new__(mcs, name, bases, namespace, **kwargs)

        cls.__associations__ = {  # type: ignore[attr-defined]
            attr_name: attr_value
            for attr_name, attr_value in namespace.items()
            if isinstance(attr_value, AssocOptions)
        }

        # Skip table binding for the Base class itself
        if name == "Base" and not bases:
            return cls

        tablename = namespace.get("__tablename__")
        if tablename is None:
            tablename = tableize(name)
        cls.__tablename__ = tablename  # type: ignore[attr-defined]

        # Reflected from the database on first use, see Base.columns()
        cls.__columns__ = None  # type: ignore[attr-defined]
        cls.__finalized__ = False  # type: ignore[attr-defined]

        register_model(cls)  # type: ignore[arg-type]
        return cls


def _column_accessor(column: str) -> property:
    """Build the getter/setter pair for one column."""

    def getter(self: Base) -> Any:
        return self._attributes.get(column)

    def setter(self: Base, value: Any) -> None:
        self._attributes[column] = value

    return property(getter, setter, doc=f"The ``{column}`` column.")


def _record_id(value: Any) -> int:
    """Integer form of a record id, refusing anything that would round."""
    if isinstance(value, bool):
        raise ValueError(f"invalid record id: {value!r}")
    if isinstance(value, str):
        if not (value.isascii() and value.isdigit()):
            raise ValueError(f"invalid record id: {value!r}")
        return int(value)
    try:
        return operator.index(value)
    except TypeError:
        raise ValueError(f"invalid record id: {value!r}") from None


class Base(metaclass=ModelMeta):
    """Base class for all record classes.

    A subclass is bound to one table. Its columns are read from the
    database, and ``finalize()`` turns each of them into an attribute.

    Example:
        >>> class Cat(Base):
        ...     human = belongs_to(foreign_key="owner_id")
        >>> Cat.finalize()
        >>> cat = Cat(name="Gizmo", owner_id=1)
        >>> cat.save()
        >>> Cat.where(name="Gizmo").first().id == cat.id
        True
    """

    __tablename__: ClassVar[str]
    __columns__: ClassVar[list[str] | None]
    __associations__: ClassVar[dict[str, AssocOptions]]
    __finalized__: ClassVar[bool]

    _attributes: dict[str, Any]
    _loaded_associations: dict[str, Any]

    def __init__(self, attrs: Mapping[str, Any] | None = None, /, **kwargs: Any) -> None:
        """Initialize a record from a row or a literal mapping of column values."""
        object.__setattr__(self, "_attributes", {})
        object.__setattr__(self, "_loaded_associations", {})

        params = {**(attrs or {}), **kwargs}
        columns = type(self).columns()
        for key in params:
            if key not in columns:
                raise UnknownAttributeError(key)

        for key, value in params.items():
            setattr(self, key, value)

    # -- schema -----------------------------------------------------------

    @classmethod
    def table_name(cls) -> str:
        return cls.__tablename__

    @classmethod
    def columns(cls) -> list[str]:
        """Column names of the bound table, reflected once per class."""
        if cls.__columns__ is None:
            cls.__columns__ = columns_for(cls.__tablename__)
        return cls.__columns__

    @classmethod
    def finalize(cls) -> type[Self]:
        """Generate an attribute for every column.

        Call once per class, before any instance is built. Calling again
        is harmless. A column named after a ``Base`` member (``save``,
        ``where``, ...) raises :class:`RecordKitError` instead of replacing it.
        """
        columns = cls.columns()
        reserved = set(dir(Base))
        clashes = [column for column in columns if column in reserved]
        if clashes:
            raise RecordKitError(
                f"{cls.__name__}: columns {clashes!r} of table '{cls.__tablename__}' "
                "collide with record methods"
            )
        for column in columns:
            setattr(cls, column, _column_accessor(column))
        cls.__finalized__ = True
        return cls

    @classmethod
    def assoc_options(cls) -> dict[str, AssocOptions]:
        """Associations declared on this class (not on its parents)."""
        return cls.__associations__

    # -- querying ---------------------------------------------------------

    @classmethod
    def all(cls) -> list[Self]:
        result = get_database().execute(f"SELECT * FROM {cls.__tablename__}")
        return cls.parse_all(result)

    @classmethod
    def find(cls, id: int | str) -> Self | None:
        """Fetch one record by id, or None if there is no such row.

        ``id`` must be an integer or a string of digits; it is written into
        the SQL as an integer literal. Anything else (floats, bools, ``"1 OR 1=1"``)
        raises ``ValueError``.
        """
        table = cls.__tablename__
        record_id = _record_id(id)
        result = get_database().execute(f"SELECT * FROM {table} WHERE {table}.id = {record_id}")
        records = cls.parse_all(result)
        return records[0] if records else None

    @classmethod
    def parse_all(cls, rows: Iterable[Mapping[str, Any]]) -> list[Self]:
        return [cls(row) for row in rows]

    @classmethod
    def where(cls, criteria: Mapping[str, Any] | None = None, /, **kwargs: Any) -> Relation[Self]:
        """Start a lazy, chainable query.

        Example:
            >>> Human.where(house_id=1).where(fname="Matt").first()
        """
        return Relation(cls, {**(criteria or {}), **kwargs})

    @classmethod
    def includes(cls, name: str) -> list[Self]:
        """Load every record with association ``name`` preloaded (two queries)."""
        from recordkit.loading import includes

        return includes(cls, name)

    # -- attributes -------------------------------------------------------

    @property
    def attributes(self) -> dict[str, Any]:
        return self._attributes

    def attribute_values(self) -> list[Any]:
        """Attribute values in column order; unset columns give None."""
        return [self._attributes.get(column) for column in type(self).columns()]

    def read_attribute(self, name: str) -> Any:
        if name not in type(self).columns():
            raise UnknownAttributeError(name)
        return self._attributes.get(name)

    def write_attribute(self, name: str, value: Any) -> None:
        if name not in type(self).columns():
            raise UnknownAttributeError(name)
        self._attributes[name] = value

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_") or isinstance(getattr(type(self), name, None), property):
            object.__setattr__(self, name, value)
            return
        raise UnknownAttributeError(name)

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails
        if name.startswith("_"):
            raise AttributeError(f"'{type(self).__name__}' object has no attribute '{name}'")
        raise UnknownAttributeError(name)

    def _set_association(self, name: str, value: Any) -> None:
        """Store a preloaded association value so the accessor skips the query."""
        self._loaded_associations[name] = value

    # -- persistence ------------------------------------------------------

    def insert(self) -> None:
        cls = type(self)
        columns = cls.columns()
        placeholders = ", ".join("?" for _ in columns)
        db = get_database()
        db.execute(
            f"INSERT INTO {cls.__tablename__} ({', '.join(columns)}) VALUES ({placeholders})",
            *self.attribute_values(),
        )
        self.write_attribute("id", db.last_insert_row_id())

    def update(self) -> None:
        cls = type(self)
        table = cls.__tablename__
        set_clause = ", ".join(f"{column} = ?" for column in cls.columns())
        get_database().execute(
            f"UPDATE {table} SET {set_clause} WHERE {table}.id = ?",
            *self.attribute_values(),
            self.read_attribute("id"),
        )

    def save(self) -> Self:
        """Insert a new record or update a persisted one, depending on ``id``."""
        if self.read_attribute("id") is None:
            self.insert()
        else:
            self.update()
        return self

    def destroy(self) -> None:
        """Delete the record's row and clear its id."""
        record_id = self.read_attribute("id")
        if record_id is None:
            raise RecordKitError(f"cannot destroy an unsaved {type(self).__name__}")
        table = type(self).__tablename__
        get_database().execute(f"DELETE FROM {table} WHERE {table}.id = ?", record_id)
        self.write_attribute("id", None)

    # -- conversion -------------------------------------------------------

    def to_dict(self, include_associations: bool = False) -> dict[str, Any]:
        """Convert the record to a dictionary of column values."""
        result = {column: self._attributes.get(column) for column in type(self).columns()}

        if include_associations:
            for name, value in self._loaded_associations.items():
                if isinstance(value, (list, Relation)):
                    result[name] = [item.to_dict() for item in value]
                elif value is not None:
                    result[name] = value.to_dict()
                else:
                    result[name] = None

        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        """Build a record from ``data``, ignoring keys that are not columns."""
        columns = cls.columns()
        return cls({k: v for k, v in data.items() if k in columns})

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._attributes == other._attributes  # type: ignore[attr-defined]

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        if "id" in self._attributes:
            return f"<{type(self).__name__} id={self._attributes['id']!r}>"
        return f"<{type(self).__name__}>"
