import re

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    """Lowercase ``text`` and collapse every run of non-alphanumerics into a hyphen.

    >>> slugify("Amul Taaza  Milk (1L)")
    'amul-taaza-milk-1l'
    """
    return _NON_ALNUM.sub("-", (text or "").lower()).strip("-")
