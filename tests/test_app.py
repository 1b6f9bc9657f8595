import contextlib
import io
import os
import unittest
from unittest import mock

import app
from config.runtime import RuntimeSettings


class TestBatchMode(unittest.TestCase):
    def run_main(self, argv):
        out = io.StringIO()
        with mock.patch.dict(os.environ, {}, clear=True), contextlib.redirect_stdout(out):
            code = app.main(argv)
        return code, out.getvalue()

    def test_results_printed_in_order(self):
        code, output = self.run_main(["2^3*2", "sqrt(9+16)", "5!"])
        self.assertEqual(code, 0)
        lines = output.splitlines()
        self.assertEqual(len(lines), 3)
        self.assertIn("Result:", lines[0])
        self.assertTrue(lines[0].endswith(" 16.0"))
        self.assertIn("Result:", lines[1])
        self.assertTrue(lines[1].endswith(" 5.0"))
        self.assertIn("Result:", lines[2])
        self.assertTrue(lines[2].endswith(" 120.0"))

    def test_failure_sets_exit_code(self):
        code, output = self.run_main(["1+1", "foo5"])
        self.assertEqual(code, 1)
        self.assertIn("Error: Unknown function: foo", output)

    def test_strict_flag(self):
        code, output = self.run_main(["--strict", "5%"])
        self.assertEqual(code, 1)
        self.assertIn("Error: Unexpected: %", output)


class TestInteractiveMode(unittest.TestCase):
    def test_lines_are_evaluated_until_blank(self):
        stream = io.StringIO("1+2\n1.2.3\n\n9*9\n")
        out = io.StringIO()
        settings = RuntimeSettings(log_mode="off", workers=2)
        with contextlib.redirect_stdout(out):
            code = app.run_interactive(settings, stream=stream)
        self.assertEqual(code, 0)
        self.assertEqual(out.getvalue().splitlines(), ["3.0", "Error: Malformed number: 1.2.3"])

    def test_quit_ends_loop(self):
        stream = io.StringIO("quit\n2+2\n")
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            app.run_interactive(RuntimeSettings(log_mode="off"), stream=stream)
        self.assertEqual(out.getvalue(), "")

    def test_key_labels_are_typed_as_text(self):
        stream = io.StringIO("=\n<=\nClear\n1+1\n")
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            app.run_interactive(RuntimeSettings(log_mode="off"), stream=stream)
        self.assertEqual(
            out.getvalue().splitlines(),
            ["Error: Unexpected: =", "Error: Unexpected: <", "Error: Unexpected: C", "2.0"],
        )

    def test_windows_line_endings(self):
        stream = io.StringIO("1+1\r\n2*3\r\n")
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            app.run_interactive(RuntimeSettings(log_mode="off"), stream=stream)
        self.assertEqual(out.getvalue().splitlines(), ["2.0", "6.0"])


if __name__ == "__main__":
    unittest.main()
