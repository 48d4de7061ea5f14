"""Tools for managing connections in motor_populate."""
from collections import namedtuple

from pymongo import uri_parser

from .errors import ConnectionError

__all__ = ['connect', 'DEFAULT_CONNECTION_ALIAS',
           'MOTOR_ASYNCIO_DRIVER', 'MOTOR_TORNADO_DRIVER']

DEFAULT_CONNECTION_ALIAS = 'default'

MOTOR_ASYNCIO_DRIVER = 'motor_asyncio'
MOTOR_TORNADO_DRIVER = 'motor_tornado'

ConnectionInfo = namedtuple(
    'ConnectionInfo', ('parsed_uri', 'conn_string', 'database'))

# Connection alias --> ConnectionInfo.
_CONNECTIONS = {}


def connect(mongodb_uri, alias=DEFAULT_CONNECTION_ALIAS,
            mongo_driver=MOTOR_ASYNCIO_DRIVER, **kwargs):
    """Register a connection to MongoDB, optionally providing a name for it.

    :parameters:
      - `mongodb_uri`: A MongoDB connection string. Any options may be passed
        within the string that are supported by Motor. `mongodb_uri` must
        specify a database, which will be used by any
        :class:`~motor_populate.models.MotorModel` that uses this
        connection.
      - `alias`: An optional name for this connection, backed by a
        `MotorClient` instance that is cached under this name.
        A MotorModel picks its connection through its `connection_alias`.
        Note that calling `connect()` multiple times with the same alias will
        replace any previous connections.
      - `mongo_driver`: Specify mongodb driver to use. Possible values are
        ``motor_populate.connection.MOTOR_ASYNCIO_DRIVER`` and
        ``motor_populate.connection.MOTOR_TORNADO_DRIVER``.
      - `kwargs`: Additional keyword arguments to pass to the underlying
        :class:`~motor.motor_asyncio.AsyncIOMotorClient` or
        :class:`~motor.motor_tornado.MotorClient`.

    """
    # Make sure the database is provided.
    parsed_uri = uri_parser.parse_uri(mongodb_uri)
    if not parsed_uri.get('database'):
        raise ValueError('Connection must specify a database.')

    if mongo_driver == MOTOR_ASYNCIO_DRIVER:
        from motor.motor_asyncio import AsyncIOMotorClient
        client = AsyncIOMotorClient(mongodb_uri, **kwargs)
    elif mongo_driver == MOTOR_TORNADO_DRIVER:
        from motor.motor_tornado import MotorClient
        client = MotorClient(mongodb_uri, **kwargs)
    else:
        raise ValueError('Connection must specify a valid mongo_driver.')

    _CONNECTIONS[alias] = ConnectionInfo(
        parsed_uri=parsed_uri,
        conn_string=mongodb_uri,
        database=client[parsed_uri['database']])


def _get_connection(alias=DEFAULT_CONNECTION_ALIAS):
    """Return the ConnectionInfo registered under `alias`."""
    try:
        return _CONNECTIONS[alias]
    except KeyError:
        raise ConnectionError(
            'You have not defined a connection with the alias %r. Did you '
            'forget to call connect()?' % alias)


def _get_db(alias=DEFAULT_CONNECTION_ALIAS):
    """Return the motor database registered under `alias`."""
    return _get_connection(alias).database
