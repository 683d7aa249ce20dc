"""Association declarations between record classes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from recordkit.connection import get_database
from recordkit.exceptions import AssociationError
from recordkit.naming import camelize, classify, underscore

if TYPE_CHECKING:
    from recordkit.base import Base
    from recordkit.relation import Relation


# Global model registry - maps class names to model classes
_model_registry: dict[str, type[Base]] = {}


def register_model(model_cls: type[Base]) -> None:
    """Register a model class for association resolution."""
    _model_registry[model_cls.__name__] = model_cls


def get_model(name: str) -> type[Base] | None:
    """Get a model class by class name."""
    return _model_registry.get(name)


class AssocOptions:
    """Metadata describing how two record classes relate.

    Instances are descriptors: declared in a class body they become the
    association accessor, and ``Model.__associations__`` maps the
    attribute name to them. Read on the class, the descriptor returns
    itself; read on a record it loads the associated value, unless
    ``includes()`` already preloaded it.
    """

    collection: ClassVar[bool] = False

    def __init__(
        self,
        name: str | None = None,
        *,
        foreign_key: str | None = None,
        primary_key: str | None = None,
        class_name: str | None = None,
    ) -> None:
        self.name = name
        self.owner: type[Base] | None = None
        self._foreign_key = foreign_key
        self._primary_key = primary_key
        self._class_name = class_name

    def __set_name__(self, owner: type[Base], name: str) -> None:
        self.owner = owner
        if self.name is None:
            self.name = name

    @property
    def foreign_key(self) -> str:
        raise NotImplementedError

    @property
    def primary_key(self) -> str:
        return self._primary_key or "id"

    @property
    def class_name(self) -> str:
        raise NotImplementedError

    @property
    def model_class(self) -> type[Base]:
        model = get_model(self.class_name)
        if model is None:
            raise AssociationError(
                f"Association '{self.name}' refers to '{self.class_name}', "
                "which is not a defined model"
            )
        return model

    @property
    def table_name(self) -> str:
        return self.model_class.__tablename__

    @property
    def self_key(self) -> str:
        """Column on the declaring record that the association matches on."""
        raise NotImplementedError

    @property
    def other_key(self) -> str:
        """Column on the associated records that must equal ``self_key``."""
        raise NotImplementedError

    def load(self, record: Base) -> Any:
        raise NotImplementedError

    def __get__(self, instance: Base | None, owner: type[Base]) -> Any:
        if instance is None:
            return self
        loaded = instance._loaded_associations
        if self.name in loaded:
            return loaded[self.name]
        return self.load(instance)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r} -> {self._describe_target()}>"

    def _describe_target(self) -> str:
        try:
            return self.class_name
        except (TypeError, AttributeError, AssociationError):
            return "?"


class BelongsToOptions(AssocOptions):
    """The foreign key lives on the declaring record's table.

    Defaults: ``foreign_key="<name>_id"``, ``primary_key="id"``,
    ``class_name=CamelCase(name)``.
    """

    @property
    def foreign_key(self) -> str:
        return self._foreign_key or f"{self.name}_id"

    @property
    def class_name(self) -> str:
        return self._class_name or camelize(self.name)  # type: ignore[arg-type]

    @property
    def self_key(self) -> str:
        return self.foreign_key

    @property
    def other_key(self) -> str:
        return self.primary_key

    def load(self, record: Base) -> Base | None:
        """First target whose primary key equals the record's foreign key, or None."""
        value = record.read_attribute(self.foreign_key)
        return self.model_class.where({self.primary_key: value}).first()


class HasManyOptions(AssocOptions):
    """The foreign key lives on the associated records' table.

    Defaults: ``foreign_key="<declaring_class>_id"``, ``primary_key="id"``,
    ``class_name=CamelCase(singular(name))``.
    """

    collection = True

    def __init__(
        self,
        name: str | None = None,
        self_class_name: str | None = None,
        **options: Any,
    ) -> None:
        super().__init__(name, **options)
        self.self_class_name = self_class_name

    def __set_name__(self, owner: type[Base], name: str) -> None:
        super().__set_name__(owner, name)
        if self.self_class_name is None:
            self.self_class_name = owner.__name__

    @property
    def foreign_key(self) -> str:
        return self._foreign_key or f"{underscore(self.self_class_name)}_id"  # type: ignore[arg-type]

    @property
    def class_name(self) -> str:
        return self._class_name or classify(self.name)  # type: ignore[arg-type]

    @property
    def self_key(self) -> str:
        return self.primary_key

    @property
    def other_key(self) -> str:
        return self.foreign_key

    def load(self, record: Base) -> Relation[Base]:
        """Lazy relation over the targets pointing back at ``record``."""
        value = record.read_attribute(self.primary_key)
        return self.model_class.where({self.foreign_key: value})


class _ThroughAssociation(AssocOptions):
    """Two hops: ``through`` on the declaring class, then ``source`` on its target.

    Both names are resolved when the accessor runs, so the source
    association may be declared on a class defined later.
    """

    def __init__(self, through_name: str, source_name: str, name: str | None = None) -> None:
        super().__init__(name)
        self.through_name = through_name
        self.source_name = source_name

    @property
    def class_name(self) -> str:
        return self.source.class_name

    @property
    def through(self) -> AssocOptions:
        owner = self.owner
        through = owner.__associations__.get(self.through_name) if owner is not None else None
        if through is None:
            raise AssociationError(
                f"'{self.name}' goes through '{self.through_name}', "
                f"which is not an association of {getattr(owner, '__name__', None)}"
            )
        return through

    @property
    def source(self) -> AssocOptions:
        through_model = self.through.model_class
        source = through_model.__associations__.get(self.source_name)
        if source is None:
            raise AssociationError(
                f"'{self.name}' needs '{self.source_name}', "
                f"which is not an association of {through_model.__name__}"
            )
        return source

    def _select(self, record: Base) -> list[Base]:
        through = self.through
        source = self.source
        through_table = through.table_name
        source_model = source.model_class
        source_table = source_model.__tablename__

        sql = (
            f"SELECT {source_table}.* FROM {through_table} "
            f"JOIN {source_table} "
            f"ON {through_table}.{source.self_key} = {source_table}.{source.other_key} "
            f"WHERE {through_table}.{through.other_key} = ?"
        )
        result = get_database().execute(sql, record.read_attribute(through.self_key))
        return source_model.parse_all(result)


class HasOneThrough(_ThroughAssociation):
    def load(self, record: Base) -> Base | None:
        records = self._select(record)
        return records[0] if records else None


class HasManyThrough(_ThroughAssociation):
    collection = True

    def load(self, record: Base) -> list[Base]:
        return self._select(record)


def belongs_to(
    *,
    foreign_key: str | None = None,
    primary_key: str | None = None,
    class_name: str | None = None,
) -> Any:
    """Declare that this record points at one record of another class.

    Example:
        >>> class Cat(Base):
        ...     human = belongs_to(foreign_key="owner_id")
        >>> Cat.find(1).human
        <Human id=1>
    """
    return BelongsToOptions(foreign_key=foreign_key, primary_key=primary_key, class_name=class_name)


def has_many(
    *,
    foreign_key: str | None = None,
    primary_key: str | None = None,
    class_name: str | None = None,
) -> Any:
    """Declare that records of another class point at this one.

    The accessor returns a lazy :class:`~recordkit.relation.Relation`.

    Example:
        >>> class Human(Base):
        ...     cats = has_many(foreign_key="owner_id")
        >>> Human.find(3).cats.where(name="Markov").first()
        <Cat id=4>
    """
    return HasManyOptions(foreign_key=foreign_key, primary_key=primary_key, class_name=class_name)


def has_one_through(through: str, source: str) -> Any:
    """Declare a single record reached through two associations.

    Example:
        >>> class Cat(Base):
        ...     human = belongs_to(foreign_key="owner_id")
        ...     home = has_one_through("human", "house")
    """
    return HasOneThrough(through, source)


def has_many_through(through: str, source: str) -> Any:
    """Declare a list of records reached through two associations.

    The list is loaded eagerly with a single JOIN.
    """
    return HasManyThrough(through, source)
