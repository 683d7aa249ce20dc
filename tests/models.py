"""Record classes over the fixtures/cats.sql schema, shared by the tests."""

from recordkit import Base, belongs_to, has_many, has_many_through, has_one_through


class Cat(Base):
    human = belongs_to(foreign_key="owner_id")
    home = has_one_through("human", "house")


class Human(Base):
    __tablename__ = "humans"

    cats = has_many(foreign_key="owner_id")
    house = belongs_to()
    housemates = has_many_through("house", "humans")


class House(Base):
    humans = has_many()
    cats = has_many_through("humans", "cats")
