import os
import unittest
from unittest import mock

from config.runtime import RuntimeSettings
from tools.calculator import EvalError


class TestRuntimeSettings(unittest.TestCase):
    def test_defaults(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            settings = RuntimeSettings.from_env()
        self.assertTrue(settings.postfix_operators)
        self.assertEqual(settings.max_depth, 128)
        self.assertEqual(settings.workers, 10)
        self.assertEqual(settings.log_mode, "normal")

    def test_env_overrides(self):
        env = {
            "CALC_POSTFIX_OPERATORS": "off",
            "CALC_MAX_DEPTH": "16",
            "CALC_WORKERS": "2",
            "CALC_LOG_MODE": "Detail",
        }
        with mock.patch.dict(os.environ, env, clear=True):
            settings = RuntimeSettings.from_env()
        self.assertFalse(settings.postfix_operators)
        self.assertEqual(settings.max_depth, 16)
        self.assertEqual(settings.workers, 2)
        self.assertEqual(settings.log_mode, "detail")

    def test_unknown_log_mode_falls_back(self):
        with mock.patch.dict(os.environ, {"CALC_LOG_MODE": "loud"}, clear=True):
            self.assertEqual(RuntimeSettings.from_env().log_mode, "normal")

    def test_build_calculator(self):
        calc = RuntimeSettings(postfix_operators=False, max_depth=5).build_calculator()
        self.assertEqual(calc.max_depth, 5)
        with self.assertRaises(EvalError):
            calc.run("5!")


if __name__ == "__main__":
    unittest.main()
