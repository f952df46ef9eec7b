import re
import unittest

from mongofilter import MongoFilterQuery, MongoFilterSettingsDict
from mongofilter.exc import DisabledError, InvalidQueryError

from . import models
from .util import RecordingModel


class SettingsTest(unittest.TestCase):
    """ Test MongoFilterQuery settings """

    ID = '5b0e1f2a3c4d5e6f7a8b9c0d'

    def test_settings_dict(self):
        settings = MongoFilterSettingsDict(default_size=10, max_size=50)
        self.assertEqual(settings['default_size'], 10)
        self.assertEqual(settings['max_size'], 50)
        self.assertEqual(settings['default_page'], 1)
        self.assertTrue(settings['sort_enabled'])

        # Accepted as is
        model = RecordingModel()
        MongoFilterQuery(model, settings).filter({'pagination': {'size': 100}})
        self.assertEqual(model.calls, [('find', None), ('limit', 50), ('skip', 0)])

    def test_pagination_settings(self):
        model = RecordingModel()
        MongoFilterQuery(model, dict(default_page=2, default_size=10)).filter()
        self.assertEqual(model.calls, [('find', None), ('limit', 10), ('skip', 10)])

        model = RecordingModel()
        MongoFilterQuery(model, dict(max_size=5)).filter({'pagination': {'page': 3, 'size': 10}})
        self.assertEqual(model.calls, [('find', None), ('limit', 5), ('skip', 10)])

    def test_force_include(self):
        model = RecordingModel()
        MongoFilterQuery(model, dict(force_include=['id'])).filter({'fields': ['name']})
        self.assertEqual(model.calls[1], ('select', 'name id'))

        # Not when all fields are loaded
        model = RecordingModel()
        MongoFilterQuery(model, dict(force_include=['id'])).filter()
        self.assertEqual(model.calls[1], ('limit', 30))

    def test_custom_operators(self):
        operators = {'^': lambda key, value: {key: re.compile('^' + re.escape(value))}}

        model = RecordingModel()
        MongoFilterQuery(model, dict(operators=operators)).filter({'filters': [
            {'key': 'name', 'operator': '^', 'value': 'Adm.'},
            {'key': 'points', 'operator': '>', 'value': 1},
        ]})
        predicate = model.calls[0][1]
        self.assertEqual(predicate['name'].pattern, '^Adm\\.')
        self.assertEqual(predicate['points'], {'$gt': 1})

        # Built-in operators can't be replaced
        with self.assertRaises(ValueError):
            MongoFilterQuery(RecordingModel(), dict(operators={'~': lambda key, value: {}}))

    def test_disabled_sections(self):
        # A disabled section with no input is fine
        model = RecordingModel()
        MongoFilterQuery(model, dict(sort_enabled=False, filters_enabled=False)).filter({'fields': ['name']})
        self.assertEqual(model.calls[0], ('find', None))

        # Any input for a disabled section is an error
        for section, value in (('fields', ['name']),
                               ('embed', ['permissions']),
                               ('sort', ['name']),
                               ('filters', [{'key': 'name', 'operator': '==', 'value': 'a'}]),
                               ('pagination', {'page': 1})):
            model = RecordingModel()
            with self.assertRaises(DisabledError) as e:
                MongoFilterQuery(model, {section + '_enabled': False}).filter({section: value})
            self.assertIsInstance(e.exception, InvalidQueryError)
            self.assertIn(section, str(e.exception))
            self.assertEqual(model.queries, [])

        # Extra fields are fields as well
        with self.assertRaises(DisabledError):
            MongoFilterQuery(RecordingModel(), dict(fields_enabled=False)).filter({'extraFields': ['name']})

        # Sections that do not apply to single documents are not checked
        model = RecordingModel()
        MongoFilterQuery(model, dict(sort_enabled=False)).filter(self.ID, {'sort': ['name']})
        self.assertEqual(model.calls, [('find_one', {'_id': self.ID})])

    def test_invalid_settings(self):
        # Typos are reported
        with self.assertRaises(KeyError) as e:
            MongoFilterQuery(RecordingModel(), dict(default_size=10, max_page_size=10, sort_enable=False))
        self.assertIn('max_page_size,sort_enable', str(e.exception))

        # Not a dict
        with self.assertRaises(TypeError):
            MongoFilterQuery(RecordingModel(), [('default_size', 10)])


class ModelSettingsTest(unittest.TestCase):
    """ Test per-model settings of MongoFilterBase """

    @classmethod
    def setUpClass(cls):
        cls.engine, cls.Session = models.get_working_db_for_tests()
        cls.db = cls.Session()
        models.Base.mongofilter_bind(cls.db)

    @classmethod
    def tearDownClass(cls):
        models.Base.mongofilter_bind(None)
        cls.db.close()

    def tearDown(self):
        # Back to defaults
        models.Role.mongofilter_configure({})
        models.Permission.mongofilter_configure({})

    def test_mongofilter_configure(self):
        Role, Permission = models.Role, models.Permission

        Role.mongofilter_configure(dict(default_size=2, embed_enabled=False))

        # Applies to every query of this model
        self.assertEqual(len(Role.filter().exec()), 2)
        self.assertEqual(len(Role.filter_many({'pagination': {'page': 2}}).exec()), 2)
        with self.assertRaises(DisabledError):
            Role.filter({'embed': ['permissions']})

        # ... and not to other models
        self.assertEqual(len(Permission.filter().exec()), len(models.PERMISSION_SAMPLES))

    def test_mongofilter_query(self):
        # A fresh MongoFilterQuery every time
        a, b = models.Role.mongofilter(), models.Role.mongofilter()
        self.assertIsNot(a, b)
        self.assertIs(a.model, models.Role)

        roles = a.query({'sort': ['-points'], 'pagination': {'size': 1}}).end().exec()
        self.assertEqual([r.name for r in roles], ['Admin'])
        roles = b.query({'sort': ['points'], 'pagination': {'size': 1}}).end().exec()
        self.assertEqual([r.name for r in roles], ['Banned'])
