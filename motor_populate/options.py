"""Normalization of populate specifications."""
from collections.abc import Mapping

from .common import (
    validate_boolean, validate_boolean_or_none, validate_callable_or_none,
    validate_mapping_or_none, validate_positive_int_or_none,
    validate_string, validate_string_or_none)

__all__ = ['PopulateOptions', 'normalize_populate', 'select_to_projection']


_QUERY_OPTIONS = frozenset(('sort', 'skip', 'limit'))


class PopulateOptions(object):
    """A request to populate one path.

    :parameters:
      - `path`: The path to populate, in dot notation.
      - `select`: Fields to return for the populated documents. Either a
        space separated string (``'name -password'``), a list of names or a
        projection document. The fields the join needs (``_id``, or the
        foreign field of a virtual) are always fetched.
      - `match`: Extra filter the populated documents must match.
      - `model`: Name of the registered model to query, overriding the one
        declared in the schema.
      - `options`: Query options (``sort``, ``skip``, ``limit``) for the
        batched query.
      - `populate`: Nested populate specification, applied to the
        populated documents.
      - `just_one`: Force a single document (``True``) or a list
        (``False``).
      - `local_field`, `foreign_field`: Fields joining this document to the
        populated ones. Giving both makes the path a virtual join.
      - `transform`: Callable applied to every populated document. On a
        reference path a ``None`` result drops the document; on a virtual
        path the result is kept as is.
      - `skip`: Ignore this request.
      - `strict`: Raise instead of skipping when the path cannot be
        resolved. ``None`` defers to the call-level setting.
      - `per_document_limit`: Maximum number of documents kept per parent.

    """

    __slots__ = ('path', 'select', 'match', 'model', 'options', 'populate',
                 'just_one', 'local_field', 'foreign_field', 'transform',
                 'skip', 'strict', 'per_document_limit')

    def __init__(self, path, select=None, match=None, model=None,
                 options=None, populate=None, just_one=None,
                 local_field=None, foreign_field=None, transform=None,
                 skip=False, strict=None, per_document_limit=None):
        self.path = validate_string('path', path)
        if select is not None and not isinstance(
                select, (str, list, tuple, Mapping)):
            raise TypeError('select must be a string, a list or a mapping, '
                            'not %r.' % (select,))
        self.select = select
        self.match = validate_mapping_or_none('match', match)
        self.model = validate_string_or_none('model', model)
        self.options = validate_mapping_or_none('options', options)
        if self.options:
            unknown = set(self.options) - _QUERY_OPTIONS
            if unknown:
                raise ValueError('Unrecognized query options: %s'
                                 % ', '.join(sorted(unknown)))
        self.populate = populate
        self.just_one = validate_boolean_or_none('just_one', just_one)
        self.local_field = validate_string_or_none('local_field', local_field)
        self.foreign_field = validate_string_or_none(
            'foreign_field', foreign_field)
        self.transform = validate_callable_or_none('transform', transform)
        self.skip = validate_boolean('skip', skip)
        self.strict = validate_boolean_or_none('strict', strict)
        self.per_document_limit = validate_positive_int_or_none(
            'per_document_limit', per_document_limit)

    def nested(self):
        """Return the nested requests as a list of PopulateOptions."""
        return normalize_populate(self.populate)

    def __eq__(self, other):
        if not isinstance(other, PopulateOptions):
            return NotImplemented
        return all(getattr(self, name) == getattr(other, name)
                   for name in self.__slots__)

    def __repr__(self):
        given = ', '.join(
            '%s=%r' % (name, getattr(self, name))
            for name in self.__slots__[1:]
            if getattr(self, name) not in (None, False))
        if given:
            return 'PopulateOptions(%r, %s)' % (self.path, given)
        return 'PopulateOptions(%r)' % self.path


def normalize_populate(spec):
    """Turn a populate specification into a flat list of PopulateOptions.

    `spec` may be ``None``, a path name, several path names separated by
    whitespace, a mapping of options, a :class:`PopulateOptions` or a list
    or tuple mixing any of those. Nested ``populate`` values are kept as
    given.
    """
    if spec is None:
        return []
    if isinstance(spec, PopulateOptions):
        return [spec]
    if isinstance(spec, str):
        return [PopulateOptions(path) for path in spec.split()]
    if isinstance(spec, (list, tuple)):
        requests = []
        for item in spec:
            requests.extend(normalize_populate(item))
        return requests
    if isinstance(spec, Mapping):
        return _options_from_mapping(spec)
    raise TypeError('populate must be a string, a mapping, PopulateOptions '
                    'or a list of those, not %r.' % (spec,))


def _options_from_mapping(spec):
    unknown = set(spec) - set(PopulateOptions.__slots__)
    if unknown:
        raise ValueError('Unrecognized populate options: %s'
                         % ', '.join(sorted(unknown)))
    if 'path' not in spec:
        raise ValueError('populate options must specify a path.')
    kwargs = dict(spec)
    path = validate_string('path', kwargs.pop('path'))
    # {'path': 'author editor', ...} populates both paths the same way.
    return [PopulateOptions(name, **kwargs) for name in path.split()]


def select_to_projection(select):
    """Convert a `select` value into a MongoDB projection document.

    Names prefixed with ``-`` are excluded, names with no prefix or a ``+``
    prefix are included. Mappings are returned unchanged.
    """
    if not select:
        return None
    if isinstance(select, Mapping):
        return dict(select)
    if isinstance(select, str):
        select = select.split()
    projection = {}
    for name in select:
        if not name:
            continue
        if name.startswith('-'):
            projection[name[1:]] = 0
        elif name.startswith('+'):
            projection[name[1:]] = 1
        else:
            projection[name] = 1
    return projection or None
