"""Field declarations understood by :class:`~motor_populate.schema.Schema`.

Fields only carry the reference metadata the population engine needs; they
do not validate or convert values.
"""
from .common import validate_string

__all__ = ['Field', 'ReferenceField', 'ListField']


class Field(object):
    """A plain field that does not refer to another collection."""

    ref = None

    def __repr__(self):
        return '%s()' % type(self).__name__


class ReferenceField(Field):
    """A field holding the id of a document in another collection.

    :parameters:
      - `ref`: The name under which the referenced model is registered in a
        :class:`~motor_populate.models.ModelRegistry`.

    """

    def __init__(self, ref):
        self.ref = validate_string('ref', ref)

    def __repr__(self):
        return 'ReferenceField(%r)' % self.ref


class ListField(Field):
    """A field holding a list of values of another field type.

    ``ListField(ReferenceField('tags'))`` declares an array of references.
    """

    def __init__(self, field=None):
        if field is None:
            field = Field()
        if not isinstance(field, Field):
            raise TypeError('field must be a Field instance, not %r.'
                            % (field,))
        self.field = field

    def __repr__(self):
        return 'ListField(%r)' % (self.field,)
