"""Tests for structured JSON logging."""

import json
import logging
import unittest
from datetime import datetime, timezone
from unittest.mock import patch
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from domain.model.user import UserRole
from utils.logging import JSONFormatter, setup_structured_logging


def _record(msg='hello', **extra) -> logging.LogRecord:
    record = logging.LogRecord('audit', logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter(unittest.TestCase):

    def test_formats_standard_fields(self):
        data = json.loads(JSONFormatter().format(_record()))

        self.assertEqual(data['level'], 'INFO')
        self.assertEqual(data['logger'], 'audit')
        self.assertEqual(data['message'], 'hello')
        self.assertEqual(data['service'], 'user-management-api')
        self.assertTrue(data['timestamp'].endswith('Z'))
        self.assertNotIn('msg', data)

    def test_extra_fields_become_top_level_keys(self):
        record = _record(userId='user-1', role=UserRole.ADMIN,
                         occurredAt=datetime(2024, 6, 15, tzinfo=timezone.utc))

        data = json.loads(JSONFormatter().format(record))

        self.assertEqual(data['userId'], 'user-1')
        self.assertEqual(data['role'], 'Admin')
        self.assertTrue(data['occurredAt'].startswith('2024-06-15'))

    def test_exception_is_included(self):
        try:
            raise ValueError("bad")
        except ValueError:
            record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", None, sys.exc_info())

        data = json.loads(JSONFormatter().format(record))
        self.assertIn('ValueError: bad', data['exception'])


class TestSetupStructuredLogging(unittest.TestCase):

    def setUp(self):
        root = logging.getLogger()
        self._saved = (root.level, list(root.handlers))

    def tearDown(self):
        root = logging.getLogger()
        root.setLevel(self._saved[0])
        root.handlers = self._saved[1]

    def test_level_from_env(self):
        with patch.dict('os.environ', {'LOG_LEVEL': 'debug'}):
            setup_structured_logging()

        root = logging.getLogger()
        self.assertEqual(root.level, logging.DEBUG)
        self.assertIsInstance(root.handlers[0].formatter, JSONFormatter)

    def test_explicit_level_wins(self):
        with patch.dict('os.environ', {'LOG_LEVEL': 'debug'}):
            setup_structured_logging('warning')
        self.assertEqual(logging.getLogger().level, logging.WARNING)


if __name__ == '__main__':
    unittest.main()
