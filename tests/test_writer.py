"""
Tests for writing certificate material to disk.
"""
import os
import shutil
import stat
import tempfile
import unittest
from unittest.mock import patch

from gencert.common.config import GenerationConfig
from gencert.crypto.chain import generate
from gencert.storage import writer


class TestWriter(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.chain = generate(GenerationConfig(hosts=["localhost"]))

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_write_material(self):
        out = os.path.join(self.temp_dir, "nested", "certs")
        cert_path, key_path = writer.write_material(self.chain.leaf, "leaf", out)
        self.assertEqual(cert_path, os.path.join(out, "leaf.pem"))
        self.assertEqual(key_path, os.path.join(out, "leaf.key"))
        with open(cert_path, "rb") as f:
            self.assertEqual(f.read(), self.chain.leaf.certificate_pem)
        with open(key_path, "rb") as f:
            self.assertEqual(f.read(), self.chain.leaf.private_key_pem)

    def test_permissions(self):
        cert_path, key_path = writer.write_material(self.chain.root, "root", self.temp_dir)
        self.assertEqual(stat.S_IMODE(os.stat(cert_path).st_mode), 0o644)
        self.assertEqual(stat.S_IMODE(os.stat(key_path).st_mode), 0o600)

    def test_overwrite_resets_key_mode(self):
        key_path = os.path.join(self.temp_dir, "root.key")
        with open(key_path, "wb") as f:
            f.write(b"stale")
        os.chmod(key_path, 0o666)
        writer.write_material(self.chain.root, "root", self.temp_dir)
        self.assertEqual(stat.S_IMODE(os.stat(key_path).st_mode), 0o600)
        with open(key_path, "rb") as f:
            self.assertEqual(f.read(), self.chain.root.private_key_pem)

    def test_mode_is_set_before_writing(self):
        key_path = os.path.join(self.temp_dir, "root.key")
        with open(key_path, "wb") as f:
            f.write(b"stale")
        os.chmod(key_path, 0o666)
        real_fdopen = os.fdopen
        modes = []

        def checking_fdopen(fd, *args, **kwargs):
            modes.append(stat.S_IMODE(os.fstat(fd).st_mode))
            return real_fdopen(fd, *args, **kwargs)

        with patch("gencert.storage.writer.os.fdopen", side_effect=checking_fdopen):
            writer.write_material(self.chain.root, "root", self.temp_dir)
        self.assertEqual(modes, [0o644, 0o600])

    def test_write_all(self):
        paths = writer.write_all(self.chain.items(), self.temp_dir)
        self.assertEqual([os.path.basename(p) for p in paths], [
            "root.pem", "root.key", "leaf.pem", "leaf.key", "client.pem", "client.key",
        ])


if __name__ == "__main__":
    unittest.main()
