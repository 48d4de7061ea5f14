"""Reference metadata for a collection's documents."""
from collections import namedtuple

from .common import (
    validate_boolean, validate_string, validate_string_or_none)
from .fields import Field, ListField, ReferenceField

__all__ = ['Schema', 'Virtual', 'PathInfo', 'VirtualInfo']


PathInfo = namedtuple('PathInfo', ('ref_collection', 'is_array_of_ref'))
VirtualInfo = namedtuple(
    'VirtualInfo',
    ('ref_collection', 'local_field', 'foreign_field', 'just_one'))


class Virtual(object):
    """A computed reverse join populated from another collection.

    :parameters:
      - `ref`: Name of the registered model holding the matching documents.
      - `foreign_field`: Field on the referenced documents that stores this
        document's `local_field` value.
      - `local_field`: Field on this document to match against. Defaults
        to ``_id``.
      - `just_one`: Whether the virtual resolves to a single document
        (or ``None``) instead of a list.

    """

    def __init__(self, ref=None, foreign_field=None, local_field='_id',
                 just_one=False):
        self.ref = validate_string_or_none('ref', ref)
        self.foreign_field = validate_string_or_none(
            'foreign_field', foreign_field)
        self.local_field = validate_string('local_field', local_field)
        self.just_one = validate_boolean('just_one', just_one)

    def __repr__(self):
        return ('Virtual(ref=%r, foreign_field=%r, local_field=%r, '
                'just_one=%r)' % (self.ref, self.foreign_field,
                                  self.local_field, self.just_one))


class Schema(object):
    """Describe which paths of a document refer to other collections.

    Paths are keyed by their full dotted name, so a reference stored inside
    an embedded document is declared as ``'profile.avatar'``::

        post_schema = Schema(
            fields={
                'title': Field(),
                'author': ReferenceField('users'),
                'tags': ListField(ReferenceField('tags')),
            },
            virtuals={
                'comments': Virtual('comments', foreign_field='post'),
            })

    """

    def __init__(self, fields=None, virtuals=None):
        self._fields = {}
        self._virtuals = {}
        for name, field in (fields or {}).items():
            self.add_field(name, field)
        for name, virtual in (virtuals or {}).items():
            self.add_virtual(name, virtual)

    def add_field(self, name, field):
        validate_string('name', name)
        if not isinstance(field, Field):
            raise TypeError('field must be a Field instance, not %r.'
                            % (field,))
        self._fields[name] = field
        return self

    def add_virtual(self, name, virtual):
        validate_string('name', name)
        if not isinstance(virtual, Virtual):
            raise TypeError('virtual must be a Virtual instance, not %r.'
                            % (virtual,))
        self._virtuals[name] = virtual
        return self

    @property
    def fields(self):
        return dict(self._fields)

    @property
    def virtuals(self):
        return dict(self._virtuals)

    def path_info(self, name):
        """Return a :class:`PathInfo` for `name`, or ``None``."""
        field = self._fields.get(name)
        if field is None:
            return None
        if isinstance(field, ReferenceField):
            return PathInfo(field.ref, False)
        if isinstance(field, ListField) and field.field.ref:
            return PathInfo(field.field.ref, True)
        return PathInfo(None, False)

    def virtual_info(self, name):
        """Return a :class:`VirtualInfo` for `name`, or ``None``."""
        virtual = self._virtuals.get(name)
        if virtual is None:
            return None
        return VirtualInfo(virtual.ref, virtual.local_field,
                           virtual.foreign_field, virtual.just_one)
