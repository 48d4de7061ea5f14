"""Helpers shared across motor_populate."""
from collections.abc import Mapping, MutableMapping

from bson import json_util


def validate_boolean(option, value):
    if not isinstance(value, bool):
        raise TypeError('%s must be True or False, not %r.' % (option, value))
    return value


def validate_boolean_or_none(option, value):
    if value is None:
        return value
    return validate_boolean(option, value)


def validate_string(option, value):
    if not isinstance(value, str):
        raise TypeError('%s must be a string, not %r.' % (option, value))
    return value


def validate_string_or_none(option, value):
    if value is None:
        return value
    return validate_string(option, value)


def validate_mapping_or_none(option, value):
    if value is None or isinstance(value, Mapping):
        return value
    raise TypeError('%s must be a mapping, not %r.' % (option, value))


def validate_callable_or_none(option, value):
    if value is None or callable(value):
        return value
    raise TypeError('%s must be callable, not %r.' % (option, value))


def validate_positive_int_or_none(option, value):
    if value is None:
        return value
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise TypeError(
            '%s must be a non-negative integer, not %r.' % (option, value))
    return value


def validate_list_or_tuple(option, value):
    if not isinstance(value, (list, tuple)):
        raise TypeError('%s must be a list or a tuple, not %r.'
                        % (option, value))
    return value


def get_value(document, path, default=None):
    """Read the value at `path` (dot notation) from a tree of mappings.

    Returns `default` as soon as a segment is missing or an intermediate
    value is not a mapping.
    """
    current = document
    for part in path.split('.'):
        if not isinstance(current, Mapping) or part not in current:
            return default
        current = current[part]
    return current


def set_value(document, path, value):
    """Write `value` at `path` (dot notation), creating intermediate dicts.

    Intermediate values that exist but are not mappings are left alone and
    the write is dropped.
    """
    parts = path.split('.')
    target = document
    for part in parts[:-1]:
        if not isinstance(target, MutableMapping):
            return
        nested = target.get(part)
        if nested is None:
            nested = target[part] = {}
        target = nested
    if isinstance(target, MutableMapping):
        target[parts[-1]] = value


def canonical_id(value):
    """Return the canonical string key for an id-like value.

    Strings are returned unchanged. Documents and arrays used as ids are
    unhashable, so they are keyed by their extended JSON with sorted keys.
    Anything else (ObjectId, UUID, numbers...) uses its string conversion.
    """
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (Mapping, list, tuple)):
        return json_util.dumps(value, sort_keys=True)
    return str(value)
