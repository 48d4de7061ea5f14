"""Models the population engine fetches referenced documents from."""
from .common import validate_string, validate_string_or_none
from .connection import DEFAULT_CONNECTION_ALIAS, _get_db
from .document import Document
from .errors import OperationError
from .populate import populate
from .queryset import MotorQuerySet
from .schema import Schema

__all__ = ['ModelRegistry', 'MotorModel']


class ModelRegistry(object):
    """Models available to the population engine, by name.

    A registry is an ordinary object: create one per application (or per
    test) and pass it to :func:`~motor_populate.populate.populate`.
    """

    def __init__(self, models=()):
        self._models = {}
        for model in models:
            self.register(model)

    def register(self, model, name=None):
        """Register `model` under `name` (defaults to ``model.name``)."""
        name = validate_string('name', name or getattr(model, 'name', None))
        self._models[name] = model
        if hasattr(model, 'registry'):
            model.registry = self
        return model

    def unregister(self, name):
        self._models.pop(name, None)

    def lookup(self, name):
        """Return the model registered under `name`, or ``None``."""
        return self._models.get(name)

    def __contains__(self, name):
        return name in self._models

    def __iter__(self):
        return iter(self._models)

    def __len__(self):
        return len(self._models)


class MotorModel(object):
    """A MongoDB collection accessed through Motor.

    :parameters:
      - `name`: The name other schemas use to refer to this model.
      - `schema`: The :class:`~motor_populate.schema.Schema` describing the
        references held by this collection's documents.
      - `collection_name`: The collection to read. Defaults to `name`.
      - `connection_alias`: Alias of the connection registered with
        :func:`~motor_populate.connection.connect`.

    Models are usually created and registered together::

        registry = ModelRegistry()
        users = registry.register(MotorModel('users'))
        posts = registry.register(MotorModel('posts', schema=Schema(
            fields={'author': ReferenceField('users')})))

        post_list = await posts.objects.raw({}).populate('author').to_list()

    """

    def __init__(self, name, schema=None, collection_name=None,
                 connection_alias=DEFAULT_CONNECTION_ALIAS):
        self.name = validate_string('name', name)
        self.schema = schema if schema is not None else Schema()
        self.collection_name = validate_string_or_none(
            'collection_name', collection_name) or name
        self.connection_alias = connection_alias
        self.registry = None

    @property
    def collection(self):
        return _get_db(self.connection_alias)[self.collection_name]

    @property
    def objects(self):
        return MotorQuerySet(self)

    async def find(self, filter, projection=None, **kwargs):
        """Coroutine returning the documents matching `filter`.

        :parameters:
          - `filter`: A MongoDB query document.
          - `projection`: An optional projection document.
          - `kwargs`: Additional arguments for
            :meth:`~motor.motor_asyncio.AsyncIOMotorCollection.find`, such
            as ``sort``, ``skip``, ``limit`` or ``session``.

        """
        cursor = self.collection.find(filter, projection, **kwargs)
        return [Document(document) async for document in cursor]

    async def populate(self, documents, paths, strict=False, session=None):
        """Populate documents of this model using its schema and registry."""
        if self.registry is None:
            raise OperationError(
                'Model %r must be registered in a ModelRegistry before it '
                'can populate references.' % self.name)
        return await populate(documents, paths, self.schema, self.registry,
                              strict=strict, session=session)

    def __repr__(self):
        return 'MotorModel(%r)' % self.name
