"""Async QuerySet using motor."""
import copy

from .common import validate_list_or_tuple, validate_positive_int_or_none
from .document import Document
from .errors import DoesNotExist
from .options import PopulateOptions, normalize_populate

__all__ = ['MotorQuerySet']


class MotorQuerySet(object):
    """A lazy query over a :class:`~motor_populate.models.MotorModel`.

    Every chaining method returns a new QuerySet. Nothing is sent to the
    database until the QuerySet is iterated or one of its coroutines is
    awaited.
    """

    def __init__(self, model, query=None):
        self._model = model
        self._query = query or {}
        self._projection = None
        self._sort = None
        self._skip = None
        self._limit = None
        self._populate = []

    def _clone(self):
        clone = type(self)(self._model, copy.deepcopy(self._query))
        clone._projection = copy.copy(self._projection)
        clone._sort = copy.copy(self._sort)
        clone._skip = self._skip
        clone._limit = self._limit
        clone._populate = list(self._populate)
        return clone

    @property
    def raw_query(self):
        return self._query

    def raw(self, raw_query):
        """Filter using a raw MongoDB query document."""
        clone = self._clone()
        clone._query.update(raw_query)
        return clone

    def only(self, *fields):
        """Only return the given fields (and ``_id``)."""
        clone = self._clone()
        clone._projection = dict.fromkeys(fields, 1)
        return clone

    def order_by(self, ordering):
        """Sort by a list of ``(key, direction)`` pairs.

        example::

            posts = Post.objects.order_by([('date', pymongo.DESCENDING)])

        """
        clone = self._clone()
        clone._sort = list(validate_list_or_tuple('ordering', ordering))
        return clone

    def skip(self, skip):
        clone = self._clone()
        clone._skip = validate_positive_int_or_none('skip', skip)
        return clone

    def limit(self, limit):
        clone = self._clone()
        clone._limit = validate_positive_int_or_none('limit', limit)
        return clone

    def populate(self, path, select=None, **options):
        """Populate references on the returned documents.

        :parameters:
          - `path`: A path name, or anything
            :func:`~motor_populate.options.normalize_populate` accepts.
          - `select`: Fields to return for the populated documents, when
            `path` is a path name.
          - `options`: Further
            :class:`~motor_populate.options.PopulateOptions` arguments
            when `path` is a path name.

        example::

            posts = await Post.objects.populate(
                'author', select='handle').populate('comments').to_list()

        """
        clone = self._clone()
        if isinstance(path, str) and (select is not None or options):
            clone._populate.extend(
                PopulateOptions(name, select=select, **options)
                for name in path.split())
        else:
            clone._populate.extend(normalize_populate(path))
        return clone

    def _get_raw_cursor(self):
        kwargs = {}
        if self._sort:
            kwargs['sort'] = self._sort
        if self._skip:
            kwargs['skip'] = self._skip
        if self._limit:
            kwargs['limit'] = self._limit
        return self._model.collection.find(
            self._query, self._projection, **kwargs)

    async def __aiter__(self):
        if self._populate:
            for document in await self.to_list():
                yield document
            return
        async for document in self._get_raw_cursor():
            yield Document(document)

    async def to_list(self):
        """Coroutine returning every matching document as a list.

        Requested paths are populated over the whole list at once.
        """
        documents = [Document(document)
                     async for document in self._get_raw_cursor()]
        if self._populate:
            await self._model.populate(documents, self._populate)
        return documents

    async def first(self):
        """Coroutine returning the first matching document."""
        documents = await self.limit(1).to_list()
        if not documents:
            raise DoesNotExist(
                'No %r document matches %r.' % (self._model.name, self._query))
        return documents[0]

    async def count(self):
        """Coroutine returning the number of matching documents."""
        kwargs = {}
        if self._skip:
            kwargs['skip'] = self._skip
        if self._limit:
            kwargs['limit'] = self._limit
        return await self._model.collection.count_documents(
            self._query, **kwargs)
