import os, json, pdb, logging, tempfile
import unittest as test

import yaml

from ucam.base import config, UCamException

tmpdir = tempfile.TemporaryDirectory(prefix="_test_config.")

def tearDownModule():
    tmpdir.cleanup()

class TestConfig(test.TestCase):

    def test_load_yaml(self):
        cfgfile = os.path.join(tmpdir.name, "cfg.yml")
        with open(cfgfile, 'w') as fd:
            yaml.safe_dump({"service_endpoint": "https://goob.net/", "auth": {"user": "gurn"}}, fd)
        cfg = config.load_from_file(cfgfile)
        self.assertEqual(cfg["service_endpoint"], "https://goob.net/")
        self.assertEqual(cfg["auth"], {"user": "gurn"})

        with open(cfgfile, 'w') as fd:
            fd.write("")
        self.assertEqual(config.load_from_file(cfgfile), {})

    def test_load_json(self):
        cfgfile = os.path.join(tmpdir.name, "cfg.json")
        with open(cfgfile, 'w') as fd:
            json.dump({"timeout": 3}, fd)
        self.assertEqual(config.load_from_file(cfgfile), {"timeout": 3})

        with open(cfgfile, 'w') as fd:
            fd.write("{ goob")
        with self.assertRaises(ValueError):
            config.load_from_file(cfgfile)

    def test_configure_log(self):
        logfile = os.path.join(tmpdir.name, "logs", "test.log")
        rootlog = logging.getLogger()
        level = rootlog.level
        try:
            hdlr = config.configure_log(logfile, "debug")
            self.assertIn(hdlr, rootlog.handlers)
            self.assertEqual(rootlog.level, logging.DEBUG)
            logging.getLogger("ucam.test").info("hello")
            hdlr.flush()
            with open(logfile) as fd:
                self.assertIn("ucam.test INFO: hello", fd.read())

            hdlr2 = config.configure_log(config={"logfile": logfile, "loglevel": "WARNING"})
            self.assertNotIn(hdlr, rootlog.handlers)
            self.assertEqual(rootlog.level, logging.WARNING)
        finally:
            rootlog.removeHandler(config._log_handler)
            config._log_handler.close()
            config._log_handler = None
            rootlog.setLevel(level)

        with self.assertRaises(config.ConfigurationException):
            config.configure_log()
        with self.assertRaises(config.ConfigurationException):
            config.configure_log(logfile, "goober")

    def test_exception(self):
        ex = config.ConfigurationException("bad config")
        self.assertTrue(isinstance(ex, UCamException))
        self.assertEqual(str(ex), "bad config")
        self.assertIsNone(ex.cause)

        ex = UCamException(cause=ValueError("oops"))
        self.assertEqual(str(ex), "oops")


if __name__ == '__main__':
    test.main()
