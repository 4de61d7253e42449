import re

import inflect
from caseconverter import snakecase

_inflect_engine = inflect.engine()

# "HTTPRequest" -> "HTTP_Request", so acronyms stay one word
_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
# Last word of a PascalCase name: an acronym ("ID") or a capitalized word ("Category")
_LAST_WORD = re.compile(r"([A-Z]+|[A-Z]?[a-z0-9]+)$")


def snake(name: str) -> str:
    """Convert an entity name to snake_case (``UserGroup`` -> ``user_group``, ``APIKey`` -> ``api_key``)."""
    return str(snakecase(_ACRONYM_BOUNDARY.sub(r"\1_\2", name)))


def plural(name: str) -> str:
    """Pluralize the last word of an entity name, keeping its case (``User`` -> ``Users``, ``Person`` -> ``People``).

    inflect leaves capitalized words it takes for proper nouns alone (``Category`` -> ``Categorys``),
    so the last word is pluralized in lowercase and its capital restored.
    """
    match = _LAST_WORD.search(name)
    if match is None:
        return str(_inflect_engine.plural(name))

    word = match.group(1)
    if len(word) > 1 and word.isupper():
        return f"{name}s"

    plural_word = str(_inflect_engine.plural(word.lower()))
    if word[0].isupper():
        plural_word = plural_word[0].upper() + plural_word[1:]
    return name[: match.start()] + plural_word
