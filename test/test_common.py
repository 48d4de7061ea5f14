import unittest
import uuid

from bson import ObjectId

from motor_populate.common import canonical_id, get_value, set_value
from motor_populate.fields import Field, ListField, ReferenceField
from motor_populate.schema import PathInfo, Schema, Virtual, VirtualInfo


class DotPathTestCase(unittest.TestCase):

    def test_get_value(self):
        doc = {'a': {'b': {'c': 1}}, 'list': [1, 2], 'none': None}
        self.assertEqual(1, get_value(doc, 'a.b.c'))
        self.assertEqual({'c': 1}, get_value(doc, 'a.b'))
        self.assertIsNone(get_value(doc, 'a.x.c'))
        self.assertIsNone(get_value(doc, 'none.x'))
        self.assertIsNone(get_value(doc, 'list.0'))
        self.assertEqual('absent', get_value(doc, 'a.z', 'absent'))

    def test_set_value_creates_containers(self):
        doc = {}
        set_value(doc, 'a.b.c', 1)
        self.assertEqual({'a': {'b': {'c': 1}}}, doc)
        set_value(doc, 'a.d', 2)
        self.assertEqual({'a': {'b': {'c': 1}, 'd': 2}}, doc)

    def test_set_value_through_scalar(self):
        doc = {'a': 'scalar'}
        set_value(doc, 'a.b', 1)
        self.assertEqual({'a': 'scalar'}, doc)


class CanonicalIdTestCase(unittest.TestCase):

    def test_strings_and_none(self):
        self.assertIsNone(canonical_id(None))
        self.assertEqual('abc', canonical_id('abc'))

    def test_object_id(self):
        oid = ObjectId()
        self.assertEqual(str(oid), canonical_id(oid))
        self.assertEqual(canonical_id(str(oid)), canonical_id(oid))

    def test_other_scalars(self):
        value = uuid.uuid4()
        self.assertEqual(str(value), canonical_id(value))
        self.assertEqual('42', canonical_id(42))

    def test_documents_as_ids(self):
        self.assertEqual(canonical_id({'rank': 4, 'suit': 3}),
                         canonical_id({'suit': 3, 'rank': 4}))
        self.assertNotEqual(canonical_id({'rank': 4, 'suit': 3}),
                            canonical_id({'rank': 12, 'suit': 2}))
        self.assertEqual(canonical_id([1, 2]), canonical_id((1, 2)))


class SchemaTestCase(unittest.TestCase):

    def setUp(self):
        self.schema = Schema(
            fields={
                'title': Field(),
                'author': ReferenceField('users'),
                'tags': ListField(ReferenceField('tags')),
            },
            virtuals={'comments': Virtual('comments', foreign_field='post')})

    def test_path_info(self):
        self.assertEqual(PathInfo('users', False),
                         self.schema.path_info('author'))
        self.assertEqual(PathInfo('tags', True),
                         self.schema.path_info('tags'))
        self.assertEqual(PathInfo(None, False),
                         self.schema.path_info('title'))
        self.assertIsNone(self.schema.path_info('missing'))

    def test_virtual_info(self):
        self.assertEqual(VirtualInfo('comments', '_id', 'post', False),
                         self.schema.virtual_info('comments'))
        self.assertIsNone(self.schema.virtual_info('author'))

    def test_add_field_and_virtual(self):
        self.schema.add_field('editor', ReferenceField('users'))
        self.schema.add_virtual(
            'pinned', Virtual('comments', foreign_field='post',
                              just_one=True))
        self.assertEqual('users', self.schema.path_info('editor').ref_collection)
        self.assertTrue(self.schema.virtual_info('pinned').just_one)
        self.assertIn('editor', self.schema.fields)
        self.assertIn('pinned', self.schema.virtuals)

    def test_validation(self):
        with self.assertRaises(TypeError):
            self.schema.add_field('bad', 'users')
        with self.assertRaises(TypeError):
            self.schema.add_virtual('bad', {'ref': 'users'})
        with self.assertRaises(TypeError):
            ReferenceField(None)
        with self.assertRaises(TypeError):
            ListField('users')
        with self.assertRaises(TypeError):
            Virtual('comments', foreign_field='post', just_one='yes')
