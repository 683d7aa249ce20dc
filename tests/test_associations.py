"""Tests for belongs_to, has_many and through associations."""

import pytest

from recordkit import (
    AssociationError,
    Base,
    BelongsToOptions,
    HasManyOptions,
    Relation,
    belongs_to,
    has_one_through,
)

from models import Cat, House, Human


class TestAssocOptions:
    def test_belongs_to_defaults(self):
        options = BelongsToOptions("house")

        assert options.foreign_key == "house_id"
        assert options.class_name == "House"
        assert options.primary_key == "id"

    def test_belongs_to_overrides(self):
        options = BelongsToOptions(
            "owner",
            foreign_key="human_id",
            class_name="Human",
            primary_key="human_id",
        )

        assert options.foreign_key == "human_id"
        assert options.class_name == "Human"
        assert options.primary_key == "human_id"

    def test_has_many_defaults(self):
        options = HasManyOptions("cats", "Human")

        assert options.foreign_key == "human_id"
        assert options.class_name == "Cat"
        assert options.primary_key == "id"

    def test_has_many_overrides(self):
        options = HasManyOptions(
            "cats",
            "Human",
            foreign_key="owner_id",
            class_name="Kitten",
            primary_key="human_id",
        )

        assert options.foreign_key == "owner_id"
        assert options.class_name == "Kitten"
        assert options.primary_key == "human_id"

    def test_model_class_and_table_name(self):
        assert BelongsToOptions("human").model_class is Human
        assert BelongsToOptions("human").table_name == "humans"
        assert HasManyOptions("cats", "Human").model_class is Cat
        assert HasManyOptions("cats", "Human").table_name == "cats"

    def test_unknown_target_model(self):
        options = BelongsToOptions("unicorn")
        with pytest.raises(AssociationError, match="Unicorn"):
            options.model_class

    def test_declared_options_are_named_by_attribute(self):
        options = Cat.assoc_options()["human"]

        assert isinstance(options, BelongsToOptions)
        assert options.name == "human"
        assert options.foreign_key == "owner_id"
        assert options.class_name == "Human"
        assert options.primary_key == "id"

    def test_has_many_default_foreign_key_uses_declaring_class(self):
        options = House.assoc_options()["humans"]
        assert options.foreign_key == "house_id"
        assert options.model_class is Human

    def test_class_access_returns_descriptor(self):
        assert Cat.human is Cat.assoc_options()["human"]


class TestAssociationMaps:
    def test_defaults_to_empty(self):
        class TempRecord(Base):
            pass

        assert TempRecord.assoc_options() == {}

    def test_maps_are_per_class(self):
        assert "human" in Cat.assoc_options()
        assert "human" not in Human.assoc_options()

        assert "house" in Human.assoc_options()
        assert "house" not in Cat.assoc_options()

    def test_subclasses_do_not_share_parent_map(self):
        class ShowCat(Cat):
            __tablename__ = "cats"
            breeder = belongs_to(foreign_key="owner_id", class_name="Human")

        assert set(ShowCat.assoc_options()) == {"breeder"}
        assert "breeder" not in Cat.assoc_options()


class TestBelongsTo:
    def test_fetches_human_for_cat(self):
        human = Cat.find(1).human

        assert isinstance(human, Human)
        assert human.fname == "Devon"

    def test_fetches_house_for_human(self):
        house = Human.find(1).house

        assert isinstance(house, House)
        assert house.address == "26th and Guerrero"

    def test_missing_foreign_key_returns_none(self):
        assert Cat.find(5).human is None

    def test_dangling_foreign_key_returns_none(self):
        assert Cat(name="Lost", owner_id=999).human is None

    def test_association_is_read_only(self):
        cat = Cat.find(1)
        with pytest.raises(AttributeError):
            cat.human = Human.find(2)


class TestHasMany:
    def test_fetches_cats_for_human(self):
        cats = Human.find(3).cats

        assert isinstance(cats, Relation)
        assert len(cats) == 2
        for cat, name in zip(cats, ["Haskell", "Markov"]):
            assert isinstance(cat, Cat)
            assert cat.name == name

    def test_fetches_humans_for_house(self):
        humans = House.find(2).humans

        assert len(humans) == 1
        assert isinstance(humans[0], Human)
        assert humans[0].fname == "Ned"

    def test_no_matches_is_empty(self):
        cats = Human.find(4).cats
        assert cats == []
        assert cats is not None

    def test_result_can_be_filtered_further(self):
        markov = Human.find(3).cats.where(name="Markov").first()
        assert markov.id == 4


class TestHasOneThrough:
    def test_fetches_home_for_cat(self):
        house = Cat.find(1).home

        assert isinstance(house, House)
        assert house.address == "26th and Guerrero"

    def test_issues_a_single_join(self, sql_log):
        cat = Cat.find(3)
        sql_log.clear()

        assert cat.home.address == "Dolores and Market"
        assert sql_log.statements == [
            "SELECT houses.* FROM humans JOIN houses ON humans.house_id = houses.id "
            "WHERE humans.id = ?"
        ]

    def test_missing_link_returns_none(self):
        assert Cat.find(5).home is None

    def test_human_without_house(self):
        cat = Cat(name="Tom", owner_id=4)
        assert cat.home is None

    def test_unknown_through_association(self):
        class Stray(Base):
            __tablename__ = "cats"
            home = has_one_through("owner", "house")

        Stray.finalize()
        with pytest.raises(AssociationError, match="owner"):
            Stray.find(1).home

    def test_unknown_source_association(self):
        class Alley(Base):
            __tablename__ = "cats"
            human = belongs_to(foreign_key="owner_id")
            street = has_one_through("human", "street")

        Alley.finalize()
        with pytest.raises(AssociationError, match="street"):
            Alley.find(1).street


class TestHasManyThrough:
    def test_through_belongs_to(self):
        housemates = Human.find(1).housemates

        assert isinstance(housemates, list)
        assert sorted(h.fname for h in housemates) == ["Devon", "Matt"]

    def test_through_has_many(self):
        cats = House.find(2).cats

        assert all(isinstance(cat, Cat) for cat in cats)
        assert sorted(cat.name for cat in cats) == ["Haskell", "Markov"]

    def test_no_matches_is_empty_list(self):
        assert Human.find(4).housemates == []
