"""Name inflection used to derive table, class and key names."""

from __future__ import annotations

import re

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_SIBILANT_ENDINGS = ("s", "sh", "ch", "x", "z")
_VOWELS = "aeiou"


def underscore(name: str) -> str:
    """Convert ``CamelCase`` to ``snake_case``.

    Example:
        >>> underscore("BlogPost")
        'blog_post'
    """
    return _CAMEL_BOUNDARY.sub("_", name).replace("-", "_").lower()


def camelize(name: str) -> str:
    """Convert ``snake_case`` to ``CamelCase``."""
    return "".join(part[:1].upper() + part[1:] for part in name.split("_") if part)


def pluralize(word: str) -> str:
    """Naive English plural: ``cat -> cats``, ``box -> boxes``, ``city -> cities``."""
    if not word:
        return word
    if word.endswith("y") and len(word) > 1 and word[-2] not in _VOWELS:
        return word[:-1] + "ies"
    if word.endswith(_SIBILANT_ENDINGS):
        return word + "es"
    return word + "s"


def singularize(word: str) -> str:
    """Inverse of :func:`pluralize` for the words it produces."""
    if word.endswith("ies") and len(word) > 3:
        return word[:-3] + "y"
    if word.endswith(("sses", "shes", "ches", "xes", "zes")):
        return word[:-2]
    if word.endswith("s") and not word.endswith("ss"):
        return word[:-1]
    return word


def tableize(class_name: str) -> str:
    """Default table name for a model class: ``Human -> humans``."""
    return pluralize(underscore(class_name))


def classify(name: str) -> str:
    """Model class name for a table or collection name: ``cats -> Cat``."""
    return camelize(singularize(name))
