"""
Geography — Attribute Inheritance

Inheritable fields (phone, postal) flow down the hierarchy:
Hood -> City -> Region -> Nation. A record's own value always wins;
an empty value defers to the parent. Nothing here writes back.

@file geography/inheritance.py
"""

INHERITABLE_FIELDS = ('phone', 'postal')


def lineage(entity):
    """Ancestors of ``entity``, nearest first."""
    chain = []
    current = entity.geo_parent
    while current is not None:
        chain.append(current)
        current = current.geo_parent
    return chain


def resolve(entity, field):
    """Effective value of ``field``: own value or the nearest non-empty ancestor's."""
    if field not in INHERITABLE_FIELDS:
        raise ValueError(f'{field} is not an inheritable field.')
    current = entity
    while current is not None:
        value = getattr(current, field, None)
        if value:
            return value
        current = current.geo_parent
    return None


def effective_phone(entity):
    return resolve(entity, 'phone')


def effective_postal(entity):
    return resolve(entity, 'postal')
