# tests/test_settings.py
"""
Unit tests for ExpenseClient.settings.lib
(covers the validators, ConfigPaths and SettingsAPI).

Run with:
    python -m unittest tests.test_settings
"""
import json
import os
from typing import Any, Dict, List, Tuple
from unittest.mock import patch

from ExpenseClient.settings import lib
from ExpenseClient.settings.lib import (
    CLIENT_SCHEMA,
    SettingsAPI,
    _validate_metadata,
    _validate_server,
)
from ExpenseClient.status import status
from ExpenseClient.ui.actions import signals
from tests.base import BaseTestCase


def template_data() -> Dict[str, Any]:
    with lib.settings.client_template.open('r', encoding='utf-8') as f:
        return json.load(f)


class ValidatorTests(BaseTestCase):

    def test_template_is_valid(self):
        data = template_data()
        lib.settings.validate_client_data(data)

    def test_server_requires_base_url(self):
        with self.assertRaises(ValueError):
            _validate_server({'timeout': 30}, CLIENT_SCHEMA['server'])

    def test_server_rejects_empty_base_url(self):
        with self.assertRaises(ValueError):
            _validate_server({'base_url': '  ', 'timeout': 30}, CLIENT_SCHEMA['server'])

    def test_server_rejects_non_positive_timeout(self):
        with self.assertRaises(ValueError):
            _validate_server({'base_url': 'http://api', 'timeout': 0}, CLIENT_SCHEMA['server'])

    def test_server_rejects_wrong_type(self):
        with self.assertRaises(TypeError):
            _validate_server({'base_url': 'http://api', 'timeout': '30'}, CLIENT_SCHEMA['server'])

    def test_metadata_rejects_out_of_range_loess(self):
        meta = template_data()['metadata']
        meta['loess_fraction'] = 1.5
        with self.assertRaises(ValueError):
            _validate_metadata(meta, CLIENT_SCHEMA['metadata'])

    def test_metadata_accepts_int_loess(self):
        meta = template_data()['metadata']
        meta['loess_fraction'] = 1
        _validate_metadata(meta, CLIENT_SCHEMA['metadata'])

    def test_metadata_rejects_bool_for_int(self):
        meta = template_data()['metadata']
        meta['top_expenses'] = True
        with self.assertRaises(TypeError):
            _validate_metadata(meta, CLIENT_SCHEMA['metadata'])

    def test_metadata_rejects_unknown_page_size(self):
        meta = template_data()['metadata']
        meta['page_size'] = 15
        with self.assertRaises(ValueError):
            _validate_metadata(meta, CLIENT_SCHEMA['metadata'])


class ConfigPathsTests(BaseTestCase):

    def test_config_dir_follows_environment(self):
        cp = lib.ConfigPaths()
        self.assertEqual(str(cp.config_dir), os.environ[lib.CONFIG_DIR_ENV])

    def test_client_config_is_seeded_from_template(self):
        cp = lib.ConfigPaths()
        self.assertTrue(cp.client_template.exists())
        self.assertTrue(cp.client_path.exists())
        with cp.client_path.open('r', encoding='utf-8') as f:
            self.assertEqual(json.load(f), template_data())

    def test_stylesheet_exists(self):
        self.assertTrue(lib.ConfigPaths().stylesheet_path.exists())


class SettingsAPIBehaviour(BaseTestCase):

    def setUp(self) -> None:
        super().setUp()
        self.api: SettingsAPI = lib.settings

        self.changes: List[Tuple[str, Any]] = []
        signals.metadataChanged.connect(self._on_metadata_changed)

    def tearDown(self) -> None:
        signals.metadataChanged.disconnect(self._on_metadata_changed)
        super().tearDown()

    def _on_metadata_changed(self, key, value):
        self.changes.append((key, value))

    def test_defaults(self):
        self.assertEqual(self.api['locale'], 'en_US')
        self.assertEqual(self.api['currency'], 'USD')
        self.assertEqual(self.api['page_size'], 10)
        self.assertEqual(self.api['loess_fraction'], 0.5)
        self.assertEqual(self.api.base_url, lib.DEFAULT_BASE_URL)
        self.assertEqual(self.api.timeout, lib.DEFAULT_TIMEOUT)

    def test_unknown_key(self):
        with self.assertRaises(KeyError):
            _ = self.api['bogus']
        with self.assertRaises(KeyError):
            self.api['bogus'] = 1

    def test_set_persists_and_emits(self):
        self.api['currency'] = 'EUR'
        self.assertEqual(self.api['currency'], 'EUR')
        self.assertIn(('currency', 'EUR'), self.changes)

        reloaded = SettingsAPI()
        self.assertEqual(reloaded['currency'], 'EUR')

    def test_set_coerces_type(self):
        self.api['dashboard_months'] = '6'
        self.assertEqual(self.api['dashboard_months'], 6)

    def test_set_conversion_failure(self):
        with self.assertRaises(ValueError):
            self.api['loess_fraction'] = 'not-a-float'

    def test_set_invalid_value_is_not_applied(self):
        with self.assertRaises(ValueError):
            self.api['page_size'] = 15
        self.assertEqual(self.api['page_size'], 10)

    def test_block_signals(self):
        self.api.block_signals(True)
        try:
            self.api['theme'] = 'dark'
        finally:
            self.api.block_signals(False)
        self.assertEqual(self.changes, [])
        self.assertEqual(self.api['theme'], 'dark')

    def test_set_section_server(self):
        received: List[str] = []

        def _on_section_changed(section: str) -> None:
            received.append(section)

        signals.configSectionChanged.connect(_on_section_changed)
        try:
            self.api.set_section('server', {'base_url': 'https://api.example.com/v1/', 'timeout': 5})
        finally:
            signals.configSectionChanged.disconnect(_on_section_changed)

        self.assertEqual(received, ['server'])
        self.assertEqual(self.api.base_url, 'https://api.example.com/v1')
        self.assertEqual(self.api.timeout, 5)

    def test_set_section_invalid_is_not_applied(self):
        with self.assertRaises(ValueError):
            self.api.set_section('server', {'base_url': '', 'timeout': 5})
        self.assertEqual(self.api.base_url, lib.DEFAULT_BASE_URL)

    def test_set_section_unknown(self):
        with self.assertRaises(ValueError):
            self.api.set_section('bogus', {})

    def test_revert_section(self):
        self.api.set_section('server', {'base_url': 'https://other', 'timeout': 10})
        self.api.revert_section('server')
        self.assertEqual(self.api.get_section('server'), template_data()['server'])

    def test_set_section_metadata_emits_each_key(self):
        meta = self.api.get_section('metadata')
        meta['top_expenses'] = 8
        self.api.set_section('metadata', meta)
        self.assertIn(('top_expenses', 8), self.changes)
        self.assertIn(('locale', 'en_US'), self.changes)

    def test_get_section_returns_copy(self):
        section = self.api.get_section('server')
        section['timeout'] = 999
        self.assertEqual(self.api.timeout, lib.DEFAULT_TIMEOUT)

    def test_base_url_environment_override(self):
        with patch.dict(os.environ, {lib.BASE_URL_ENV: 'http://override:9000/api/'}):
            self.assertEqual(self.api.base_url, 'http://override:9000/api')
        self.assertEqual(self.api.base_url, lib.DEFAULT_BASE_URL)

    def test_invalid_file_raises(self):
        with self.api.client_path.open('w', encoding='utf-8') as f:
            json.dump({'server': {'base_url': 'x'}}, f)
        with self.assertRaises(status.ClientConfigInvalidException):
            self.api.load_client()

    def test_missing_file_raises(self):
        self.api.client_path.unlink()
        with self.assertRaises(status.ClientConfigNotFoundException):
            self.api.load_client()

    def test_revert_client_to_template(self):
        self.api.client_path.unlink()
        self.api.revert_client_to_template()
        self.assertEqual(self.api.load_client(), template_data())

    def test_save_section_unknown(self):
        with self.assertRaises(ValueError):
            self.api.save_section('does_not_exist')
