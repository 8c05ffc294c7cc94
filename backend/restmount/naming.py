"""
restmount — Resource Naming
=============================

What:  Derives the canonical, URL-safe collection name of a resource.
How:   Two tiers, decided once at registration:
       1. A model implementing EntityNamer supplies its name verbatim.
       2. Otherwise the class name is split into words, the last word is
          pluralized, and the words are lower-cased and joined with "-".

Examples:
    Post          → posts
    BlogPost      → blog-posts
    Category      → categories
    Address       → addresses
    HTTPRequest   → http-requests
    Person        → people
"""

import re
from typing import Any, List, Protocol, runtime_checkable

_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")

_IRREGULAR = {
    "person": "people",
    "man": "men",
    "woman": "women",
    "child": "children",
    "mouse": "mice",
    "goose": "geese",
    "tooth": "teeth",
    "foot": "feet",
    "ox": "oxen",
}

_UNCOUNTABLE = {
    "data",
    "metadata",
    "equipment",
    "information",
    "news",
    "series",
    "species",
    "sheep",
    "fish",
}

_SIBILANT_ENDINGS = ("s", "x", "z", "ch", "sh")
_VOWELS = set("aeiou")


@runtime_checkable
class EntityNamer(Protocol):
    """
    Optional capability: a model that names its own collection.

    `get_name` may be a classmethod, staticmethod or plain method; it is
    called on a template instance.
    """

    def get_name(self) -> str: ...


def _match_case(source: str, plural: str) -> str:
    if source.isupper() and len(source) > 1:
        return plural.upper()
    if source[:1].isupper():
        return plural[:1].upper() + plural[1:]
    return plural


def pluralize(word: str) -> str:
    """Pluralize a single English word with simple rules."""
    if not word:
        return word
    lower = word.lower()
    if lower in _UNCOUNTABLE:
        return word
    if lower in _IRREGULAR:
        return _match_case(word, _IRREGULAR[lower])
    if lower.endswith(_SIBILANT_ENDINGS):
        suffix = "es"
    elif lower.endswith("y") and len(lower) > 1 and lower[-2] not in _VOWELS:
        return word[:-1] + ("IES" if word.isupper() else "ies")
    else:
        suffix = "s"
    return word + (suffix.upper() if word.isupper() and len(word) > 1 else suffix)


def split_words(name: str) -> List[str]:
    """Split CamelCase, ACRONYMCase, snake_case and kebab-case identifiers."""
    spaced = _WORD_BOUNDARY.sub(" ", name)
    return [part for part in re.split(r"[\s_\-]+", spaced) if part]


def kebabify(name: str) -> str:
    return "-".join(word.lower() for word in split_words(name))


def default_name(class_name: str) -> str:
    words = split_words(class_name)
    if not words:
        return ""
    words[-1] = pluralize(words[-1])
    return "-".join(word.lower() for word in words)


def resource_name(model: type, template: Any) -> str:
    """
    Canonical name for `model`.

    `template` is the instance passed to add_resource, or a zero-value
    instance when a bare class was registered.
    """
    if isinstance(template, EntityNamer):
        return template.get_name()
    return default_name(model.__name__)
