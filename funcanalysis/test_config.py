#!/usr/bin/env python3

import os.path as op
import shutil
import tempfile
import unittest
import sys

from testutils import DpkTestCase
from .config import Settings, ensure_settings


class TestSettingsObject(DpkTestCase):
    def test_defaults(self):
        s = Settings()
        self.assertEqual(s.default_point, 1.0)
        self.assertEqual(s.default_range, (-10.0, 10.0))
        self.assertEqual(s.critical_seeds, 24)
        self.assertEqual(ensure_settings(None), s)
        self.assertIs(ensure_settings(s), s)

    def test_overrides(self):
        s = Settings(default_point="2.5", warmup=0, default_range=[-1, 2])
        self.assertEqual(s.default_point, 2.5)
        self.assertIsType(s.warmup, int)
        self.assertEqual(s.default_range, (-1.0, 2.0))
        with self.assertRaises(TypeError):
            Settings(colour='red')

    def test_invalid_values(self):
        cases = [
            dict(critical_seeds=0), dict(warmup=-1), dict(tolerance=0),
            dict(dedup_tolerance=-1e-6), dict(default_point=float('nan')),
            dict(default_range=(5, -5)), dict(default_range="1, 1"),
            dict(default_range=(0, float('inf'))),
        ]
        for kw in cases:
            with self.subTest(**kw):
                with self.assertRaises(ValueError):
                    Settings(**kw)
        with self.assertRaises(ValueError):
            Settings().replace(critical_seeds=0)
        self.assertEqual(Settings(default_point=-2, warmup=0).default_point, -2.0)

    def test_read_only(self):
        s = Settings()
        with self.assertRaises(AttributeError):
            s.default_point = 3.0
        t = s.replace(default_point=3.0)
        self.assertEqual(t.default_point, 3.0)
        self.assertEqual(s.default_point, 1.0)
        self.assertEqual(t.warmup, s.warmup)

    def test_equality(self):
        self.assertEqual(Settings(warmup=2), Settings(warmup=2.0))
        self.assertNotEqual(Settings(warmup=2), Settings())
        self.assertEqual(len({Settings(), Settings(), Settings(warmup=1)}), 2)
        self.assertIn("warmup=5", repr(Settings()))


class TestConfigFiles(DpkTestCase):
    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def write(self, name, content):
        fname = op.join(self.tmpdir, name)
        with open(fname, 'w') as f:
            f.write(content)
        return fname

    def test_from_config(self):
        shared = self.write("funcanalysis.cfg",
                            "[funcanalysis]\ndefault_point = 0.5\n"
                            "default_range = -5, 5\nwarmup = 10\n")
        mine = self.write("funcanalysis.mine.cfg",
                          "[funcanalysis]\nwarmup = 3\n")
        missing = op.join(self.tmpdir, "missing.cfg")
        s = Settings.from_config(shared, mine, missing)
        self.assertEqual(s.default_point, 0.5)
        self.assertEqual(s.default_range, (-5.0, 5.0))
        self.assertEqual(s.warmup, 3)
        s = Settings.from_config(shared, warmup=7)
        self.assertEqual(s.warmup, 7)

    def test_other_sections_ignored(self):
        fname = self.write("other.cfg", "[other]\ncolour = red\n")
        self.assertEqual(Settings.from_config(fname), Settings())
        self.assertEqual(Settings.from_config(), Settings())

    def test_invalid_value(self):
        fname = self.write("bad.cfg", "[funcanalysis]\ndefault_range = 5, -5\n")
        with self.assertRaises(ValueError):
            Settings.from_config(fname)

    def test_unknown_key(self):
        fname = self.write("bad.cfg", "[funcanalysis]\ncolour = red\n")
        with self.assertRaises(TypeError):
            Settings.from_config(fname)


def run_tests():
    suite = unittest.TestLoader().loadTestsFromModule(sys.modules[__name__])
    return len(unittest.TextTestRunner(verbosity=2).run(suite).failures)


if __name__ == '__main__':
    unittest.main()
