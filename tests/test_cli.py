"""
Tests for the apsak-miner command line
"""

import io
import os
import sys
import logging
import tempfile
import unittest
from contextlib import redirect_stdout, redirect_stderr

# Add parent to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from apsakminer import __version__, config
from apsakminer.cli import build_parser, options_from_args, main, setup_logging


class TestParser(unittest.TestCase):
    """Test command line parsing."""

    def parse(self, *argv):
        return build_parser().parse_args(list(argv))

    def parse_error(self, *argv):
        stderr = io.StringIO()
        with redirect_stderr(stderr):
            with self.assertRaises(SystemExit) as ctx:
                self.parse(*argv)
        self.assertEqual(ctx.exception.code, 2)
        return stderr.getvalue()

    def test_defaults(self):
        """Test default values."""
        args = self.parse('--mining-address', 'apsak:abc')
        self.assertEqual(args.mining_address, 'apsak:abc')
        self.assertEqual(args.apsakd_address, '127.0.0.1')
        self.assertEqual(args.devfund_percent, 500)
        self.assertIsNone(args.port)
        self.assertIsNone(args.threads)
        self.assertFalse(args.testnet)
        self.assertFalse(args.mine_when_not_synced)
        self.assertFalse(args.debug)

    def test_short_flags(self):
        """Test short option names."""
        args = self.parse('-a', 'apsak:abc', '-s', 'node:1', '-p', '4000',
                          '-t', '4', '-m', '-d')
        self.assertEqual(args.apsakd_address, 'node:1')
        self.assertEqual(args.port, 4000)
        self.assertEqual(args.threads, 4)
        self.assertTrue(args.mine_when_not_synced)
        self.assertTrue(args.debug)

    def test_devfund_percent(self):
        """Test the devfund percent goes through the parser."""
        self.assertEqual(self.parse('-a', 'x', '--devfund-percent', '12.34').devfund_percent, 1234)
        self.assertEqual(self.parse('-a', 'x', '--devfund-percent=0').devfund_percent, 200)

    def test_bad_devfund_percent(self):
        """Test a malformed devfund percent aborts with the usage hint."""
        message = self.parse_error('-a', 'x', '--devfund-percent', '5.5.5')
        self.assertIn(config.DEVFUND_PERCENT_ERROR, message)

    def test_mining_address_required(self):
        """Test that the mining address is required."""
        self.parse_error()

    def test_bad_port(self):
        """Test port bounds."""
        self.parse_error('-a', 'x', '--port', '70000')
        self.parse_error('-a', 'x', '--port', '-1')
        self.parse_error('-a', 'x', '--port', 'abc')
        self.assertEqual(self.parse('-a', 'x', '--port', '0').port, 0)
        self.assertEqual(self.parse('-a', 'x', '--port', '65535').port, 65535)

    def test_bad_threads(self):
        """Test thread count bounds."""
        self.parse_error('-a', 'x', '--threads', '-2')
        self.parse_error('-a', 'x', '--threads', '65536')
        self.assertEqual(self.parse('-a', 'x', '--threads', '65535').threads, 65535)
        self.assertEqual(self.parse('-a', 'x', '--threads', '0').threads, 0)

    def test_options_from_args(self):
        """Test building options from parsed arguments."""
        args = self.parse('-a', 'apsak:abc', '--testnet', '-t', '2')
        options = options_from_args(args)
        self.assertEqual(options.mining_address, 'apsak:abc')
        self.assertTrue(options.testnet)
        self.assertEqual(options.num_threads, 2)
        self.assertEqual(options.devfund_percent, 500)

    def test_version(self):
        """Test --version."""
        stdout = io.StringIO()
        with redirect_stdout(stdout):
            with self.assertRaises(SystemExit) as ctx:
                self.parse('--version')
        self.assertEqual(ctx.exception.code, 0)
        self.assertIn(__version__, stdout.getvalue())


class TestMain(unittest.TestCase):
    """Test the main entry point."""

    def tearDown(self):
        logger = logging.getLogger('apsak-miner')
        for handler in list(logger.handlers):
            handler.close()
        logger.handlers.clear()

    def run_main(self, *argv):
        stdout = io.StringIO()
        stderr = io.StringIO()
        with redirect_stdout(stdout), redirect_stderr(stderr):
            code = main(list(argv))
        return code, stdout.getvalue(), stderr.getvalue()

    def test_main_defaults(self):
        """Test resolving with defaults."""
        code, out, err = self.run_main('-a', 'apsak:xyz', '-s', '')
        self.assertEqual(code, 0)
        self.assertIn('grpc://127.0.0.1:16110', out)
        self.assertIn('Threads: auto', out)
        self.assertIn('Devfund: 5.00%', out)
        self.assertIn('apsakd address: grpc://127.0.0.1:16110', err)

    def test_main_other_network(self):
        """Test a foreign address disables the devfund."""
        code, out, err = self.run_main('-a', 'other:xyz', '--testnet', '-t', '3')
        self.assertEqual(code, 0)
        self.assertIn('grpc://127.0.0.1:16211', out)
        self.assertIn('Threads: 3', out)
        self.assertIn('Devfund: 0.00%', out)
        self.assertIn('Disabling devfund', err)

    def test_main_debug_level(self):
        """Test --debug sets the logger level."""
        self.run_main('-a', 'apsak:xyz', '--debug')
        self.assertEqual(logging.getLogger('apsak-miner').level, logging.DEBUG)

        self.run_main('-a', 'apsak:xyz')
        self.assertEqual(logging.getLogger('apsak-miner').level, logging.INFO)

    def test_main_bad_percent(self):
        """Test a malformed percent stops startup."""
        stderr = io.StringIO()
        with redirect_stdout(io.StringIO()), redirect_stderr(stderr):
            with self.assertRaises(SystemExit) as ctx:
                main(['-a', 'apsak:xyz', '--devfund-percent', '5.5.5'])
        self.assertNotEqual(ctx.exception.code, 0)
        self.assertIn('devfund-percent should be', stderr.getvalue())

    def test_log_file(self):
        """Test logging to a file."""
        temp_dir = tempfile.mkdtemp()
        log_path = os.path.join(temp_dir, 'miner.log')
        try:
            code, _, _ = self.run_main('-a', 'apsak:xyz', '--log-file', log_path)
            self.assertEqual(code, 0)
            self.tearDown()
            with open(log_path) as f:
                self.assertIn('apsakd address: grpc://127.0.0.1:16110', f.read())
        finally:
            if os.path.exists(log_path):
                os.remove(log_path)
            os.rmdir(temp_dir)


class TestSetupLogging(unittest.TestCase):
    """Test logging setup."""

    def test_handlers_replaced(self):
        """Test repeated setup doesn't stack handlers."""
        logger = setup_logging(logging.INFO)
        setup_logging(logging.DEBUG)
        self.assertEqual(len(logger.handlers), 1)
        self.assertEqual(logger.level, logging.DEBUG)
        logger.handlers.clear()

    def test_file_handler_follows_level(self):
        """Test the file handler uses the selected level."""
        temp_dir = tempfile.mkdtemp()
        log_path = os.path.join(temp_dir, 'miner.log')
        logger = setup_logging(logging.INFO, log_path)
        try:
            self.assertEqual(len(logger.handlers), 2)
            self.assertTrue(all(h.level == logging.INFO for h in logger.handlers))

            logger.debug("hidden")
            logger.info("shown")
            logger.handlers[1].flush()
            with open(log_path) as f:
                content = f.read()
            self.assertIn("shown", content)
            self.assertNotIn("hidden", content)
        finally:
            for handler in list(logger.handlers):
                handler.close()
            logger.handlers.clear()
            os.remove(log_path)
            os.rmdir(temp_dir)


if __name__ == '__main__':
    unittest.main()
