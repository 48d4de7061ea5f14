"""Work out what kind of reference a populate request points at."""
from collections import namedtuple

from .options import normalize_populate

__all__ = ['DIRECT', 'VIRTUAL', 'UNRESOLVED', 'ReferenceDescriptor',
           'resolve_reference', 'resolve_ref_model', 'collect_populate_paths']

DIRECT = 'direct'
VIRTUAL = 'virtual'
UNRESOLVED = 'unresolved'


ReferenceDescriptor = namedtuple(
    'ReferenceDescriptor',
    ('path', 'kind', 'target_collection', 'is_array', 'local_field',
     'foreign_field', 'just_one'))
ReferenceDescriptor.__doc__ = """How a path is populated.

``is_array`` is ``None`` when the cardinality is not declared anywhere and
has to be read from each document's stored value.
"""


def _path_info(schema, path):
    if schema is None:
        return None
    return schema.path_info(path)


def _virtual_info(schema, path):
    if schema is None:
        return None
    return schema.virtual_info(path)


def resolve_reference(path, request, schema):
    """Return a :class:`ReferenceDescriptor` for `request`.

    :parameters:
      - `path`: The path being populated.
      - `request`: The :class:`~motor_populate.options.PopulateOptions`.
      - `schema`: Metadata provider for the documents owning `path`, exposing
        ``path_info(name)`` and ``virtual_info(name)``. May be ``None``.

    """
    virtual = _virtual_info(schema, path)

    if request.local_field and request.foreign_field:
        target = request.model or (virtual and virtual.ref_collection)
        just_one = request.just_one
        if just_one is None:
            just_one = bool(virtual and virtual.just_one)
        return _virtual_descriptor(path, target, request.local_field,
                                   request.foreign_field, just_one)

    if virtual is not None and virtual.foreign_field:
        target = request.model or virtual.ref_collection
        just_one = request.just_one
        if just_one is None:
            just_one = virtual.just_one
        return _virtual_descriptor(path, target, virtual.local_field or '_id',
                                   virtual.foreign_field, just_one)

    info = _path_info(schema, path)
    if info is not None and info.ref_collection:
        return ReferenceDescriptor(
            path, DIRECT, request.model or info.ref_collection,
            info.is_array_of_ref, path, None, request.just_one)

    if request.model:
        return ReferenceDescriptor(
            path, DIRECT, request.model, None, path, None, request.just_one)

    return ReferenceDescriptor(
        path, UNRESOLVED, None, False, path, None, request.just_one)


def _virtual_descriptor(path, target, local_field, foreign_field, just_one):
    if not target:
        return ReferenceDescriptor(
            path, UNRESOLVED, None, False, local_field, foreign_field,
            just_one)
    return ReferenceDescriptor(
        path, VIRTUAL, target, not just_one, local_field, foreign_field,
        just_one)


def resolve_ref_model(schema, path):
    """Return the name of the collection `path` refers to, or ``None``."""
    virtual = _virtual_info(schema, path)
    if virtual is not None and virtual.ref_collection:
        return virtual.ref_collection
    info = _path_info(schema, path)
    if info is not None:
        return info.ref_collection
    return None


def collect_populate_paths(schema, spec):
    """Resolve every request in a populate `spec` against `schema`.

    No query is issued. Unresolvable paths are returned with the
    ``UNRESOLVED`` kind rather than raising.
    """
    return [resolve_reference(request.path, request, schema)
            for request in normalize_populate(spec)]

