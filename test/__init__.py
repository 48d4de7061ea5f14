# Copyright 2016 MongoDB, Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Base classes for motor_populate test cases."""

import asyncio
import functools
import gc
import os
import unittest

import pymongo
from pymongo.errors import PyMongoError

try:
    import motor.motor_tornado
    import tornado.ioloop
    TORNADO_TEST = True
except ImportError:
    TORNADO_TEST = False

try:
    import motor.motor_asyncio
    assert motor.motor_asyncio  # silence pyflakes
    ASYNCIO_TEST = True
except ImportError:
    ASYNCIO_TEST = False

from motor_populate.common import get_value
from motor_populate.connection import (
    connect, DEFAULT_CONNECTION_ALIAS,
    MOTOR_ASYNCIO_DRIVER, MOTOR_TORNADO_DRIVER)
from motor_populate.document import Document


def get_test_suite():
    test_loader = unittest.TestLoader()
    test_suite = test_loader.discover('test', pattern='test_*.py')
    return test_suite


MONGO_URI = os.environ.get('MONGO_URI', 'mongodb://localhost:27017')

CLIENT = pymongo.MongoClient(
    MONGO_URI, serverSelectionTimeoutMS=500, connect=False)
DB = CLIENT.populate_test


def _server_available():
    try:
        CLIENT.admin.command('ping')
    except PyMongoError:
        return False
    return True


# Tests talking to a real server are skipped when none is reachable.
MONGO_TEST = _server_available()


def _matches(document, query):
    for key, condition in query.items():
        value = get_value(document, key)
        values = value if isinstance(value, list) else [value]
        if isinstance(condition, dict) and '$in' in condition:
            if not any(item in condition['$in'] for item in values):
                return False
        elif condition != value and condition not in values:
            return False
    return True


def _project(document, projection):
    if not projection:
        return Document(document)
    if any(projection.values()):
        keep = {name for name, flag in projection.items() if flag}
        if projection.get('_id', 1):
            keep.add('_id')
        return Document((name, value) for name, value in document.items()
                        if name in keep)
    return Document((name, value) for name, value in document.items()
                    if name not in projection)


class MemoryModel(object):
    """In-memory stand-in for a MotorModel that records its queries."""

    def __init__(self, name, documents=(), schema=None):
        self.name = name
        self.schema = schema
        self.documents = [dict(document) for document in documents]
        self.queries = []
        self.error = None
        self.registry = None

    async def find(self, filter, projection=None, **kwargs):
        self.queries.append((filter, projection, kwargs))
        if self.error is not None:
            raise self.error
        return [_project(document, projection)
                for document in self.documents if _matches(document, filter)]


class PopulateTestCase(unittest.TestCase):
    """Base class for test cases running coroutines on their own loop."""

    def setUp(self):
        self.loop = asyncio.new_event_loop()
        asyncio.set_event_loop(None)

    def tearDown(self):
        """Teardown and cleanup the event loop created by setUp."""
        if not self.loop.is_closed():
            self.loop.call_soon(self.loop.stop)
            self.loop.run_forever()
            self.loop.close()
        gc.collect()
        asyncio.set_event_loop(None)


class MotorODMTestCase(unittest.TestCase):
    """Base class for motor test cases."""

    def setUp(self):
        self.loop = self.setup_test_loop()
        self.connect_to_db(MONGO_URI, DB.name)

    def tearDown(self):
        CLIENT.drop_database(DB.name)
        self.teardown_test_loop()

    def setup_test_loop(self):
        pass

    def teardown_test_loop(self):
        pass

    def connect_to_db(self, uri, db_name, alias=DEFAULT_CONNECTION_ALIAS):
        pass


class AsyncIOMotorODMTestCase(MotorODMTestCase):
    """Base motor test case class with AsyncIO driver."""

    def setup_test_loop(self):
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(None)
        return loop

    def teardown_test_loop(self):
        """Teardown and cleanup an event loop created by setup_test_loop."""
        closed = self.loop.is_closed()
        if not closed:
            self.loop.call_soon(self.loop.stop)
            self.loop.run_forever()
            self.loop.close()
        gc.collect()
        asyncio.set_event_loop(None)

    def connect_to_db(self, uri, db_name, alias=DEFAULT_CONNECTION_ALIAS):
        self.mongo_driver = MOTOR_ASYNCIO_DRIVER
        connect('%s/%s' % (uri, db_name),
                alias=alias,
                mongo_driver=self.mongo_driver,
                io_loop=self.loop)


class TornadoMotorODMTestCase(MotorODMTestCase):
    """Base motor test case class with Tornado driver."""

    def setup_test_loop(self):
        return tornado.ioloop.IOLoop.current()

    def teardown_test_loop(self):
        pass

    def connect_to_db(self, uri, db_name, alias=DEFAULT_CONNECTION_ALIAS):
        self.mongo_driver = MOTOR_TORNADO_DRIVER
        connect('%s/%s' % (uri, db_name),
                alias=alias,
                mongo_driver=self.mongo_driver,
                io_loop=self.loop)


def unittest_run_loop(func):
    """A decorator to use with asynchronous test methods.

    Handles executing an asynchronous function, using
    the self.loop of the test case.
    """
    @functools.wraps(func)
    def new_func(self):
        if isinstance(self.loop, asyncio.AbstractEventLoop):
            return self.loop.run_until_complete(func(self))
        else:
            return self.loop.run_sync(functools.partial(func, self))

    return new_func
