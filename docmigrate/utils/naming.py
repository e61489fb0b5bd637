# docmigrate/utils/naming.py
"""
Identifier helpers shared by the registry and the join-table naming rules.

Table and column names in the target schema were generated by the CMS with
lodash-style word splitting (letters and digits are separate words) and an
English inflector, so both have to agree with it. Inflection is delegated to
the ``inflection`` package with a few overrides where the CMS inflector
disagrees with it.
"""

import re
from typing import List

import inflection

_CAMEL_BOUNDARY = re.compile(r'([a-z0-9])([A-Z])')
_ACRONYM_BOUNDARY = re.compile(r'([A-Z]+)([A-Z][a-z])')
_DIGIT_BOUNDARY = re.compile(r'(?<=[A-Za-z])(?=[0-9])|(?<=[0-9])(?=[A-Za-z])')
_SEPARATORS = re.compile(r'[^A-Za-z0-9]+')

UNCOUNTABLE = {
    'media', 'data', 'metadata', 'information', 'equipment', 'news',
    'series', 'species', 'software', 'audio', 'analytics', 'research',
}

# leaf -> leaves, half -> halves, scarf -> scarves
_F_TO_VES = (re.compile(r'(?i)(ar|l|[eo][ao])f$'), r'\1ves')
_VES_TO_F = (re.compile(r'(?i)(ar|(?:wo|[ae])l|[eo][ao])ves$'), r'\1f')


def split_words(value: str) -> List[str]:
    value = _CAMEL_BOUNDARY.sub(r'\1 \2', value)
    value = _ACRONYM_BOUNDARY.sub(r'\1 \2', value)
    value = _DIGIT_BOUNDARY.sub(' ', value)
    return [word for word in _SEPARATORS.split(value) if word]


def snake_case(value: str) -> str:
    return '_'.join(word.lower() for word in split_words(value))


def camel_case(value: str) -> str:
    words = [word.lower() for word in split_words(value)]
    if not words:
        return ''
    return words[0] + ''.join(word.capitalize() for word in words[1:])


def pascal_case(value: str) -> str:
    camel = camel_case(value)
    return camel[:1].upper() + camel[1:]


def _split_tail(word: str):
    """Split off the last alphabetic run so 'users-permissions_role' inflects 'role'."""
    match = re.search(r'[A-Za-z]+$', word)
    if not match:
        return word, ''
    return word[:match.start()], match.group(0)


def pluralize(word: str) -> str:
    head, tail = _split_tail(word)
    if not tail or tail.lower() in UNCOUNTABLE:
        return word

    pattern, plural = _F_TO_VES
    if pattern.search(tail):
        return head + pattern.sub(plural, tail)

    return head + inflection.pluralize(tail)


def singularize(word: str) -> str:
    head, tail = _split_tail(word)
    if not tail or tail.lower() in UNCOUNTABLE:
        return word

    pattern, singular = _VES_TO_F
    if pattern.search(tail):
        return head + pattern.sub(singular, tail)

    return head + inflection.singularize(tail)


def is_plural(word: str) -> bool:
    _, tail = _split_tail(word)
    if not tail:
        return False
    if tail.lower() in UNCOUNTABLE:
        return True
    return singularize(tail) != tail
