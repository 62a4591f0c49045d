import io
import os
import unittest
from contextlib import redirect_stdout
from unittest import mock

import numpy as np

import chargefield.logging as logging
import chargefield.util as util


class TestSplitCollect(unittest.TestCase):
    def test_order(self):
        array = np.arange(10.)

        for threads in ['1', '3', '16']:
            with mock.patch.dict(os.environ, {'CHARGEFIELD_THREADS': threads}):
                results = util.split_collect(lambda chunk: list(2*chunk), array)
                assert np.array_equal(np.concatenate(results), 2*array)

    def test_number_of_threads(self):
        with mock.patch.dict(os.environ, {'CHARGEFIELD_THREADS': '0'}):
            assert util.get_number_of_threads() == 1

        with mock.patch.dict(os.environ, {'CHARGEFIELD_THREADS': '5'}):
            assert util.get_number_of_threads() == 5


class TestLogging(unittest.TestCase):
    def tearDown(self):
        logging.set_log_level(logging.LogLevel.SILENT)

    def test_levels(self):
        logging.set_log_level(logging.LogLevel.WARNING)
        out = io.StringIO()

        with redirect_stdout(out):
            logging.log_debug('debug message')
            logging.log_info('info message')
            logging.log_warning('warning message')
            logging.log_error('error message')

        text = out.getvalue()
        assert 'debug' not in text and 'info' not in text
        assert 'WARNING' in text and 'ERROR' in text
        assert logging.get_log_level() == logging.LogLevel.WARNING

    def test_duration(self):
        logging.set_log_level(logging.LogLevel.DEBUG)
        out = io.StringIO()

        with redirect_stdout(out):
            with logging.log_duration('Sleeping'):
                pass

        assert 'Sleeping took' in out.getvalue()

    def test_invalid_level(self):
        with self.assertRaises(AssertionError):
            logging.set_log_level(2)
