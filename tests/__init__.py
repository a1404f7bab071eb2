"""
ChillGamer core unit tests
"""

import unittest
from .test_api import GenericAPITests, ListingAPITests, ReviewAPITests, WatchlistAPITests
from .test_cli import CommandLineTests
from .test_crud import DispatcherTests, DocumentStoreTests, IdentifierTests
from .test_settings import ConfigSchemaTests, LoggingTests, SettingsTests


TEST_CLASSES = [
    CommandLineTests,
    ConfigSchemaTests,
    DispatcherTests,
    DocumentStoreTests,
    GenericAPITests,
    IdentifierTests,
    ListingAPITests,
    LoggingTests,
    ReviewAPITests,
    SettingsTests,
    WatchlistAPITests,
]


def get_suite() -> unittest.TestSuite:
    suite = unittest.TestSuite()
    for cls in TEST_CLASSES:
        for fixture in filter(lambda f: f.startswith("test_"), dir(cls)):
            suite.addTest(cls(fixture))
    return suite
