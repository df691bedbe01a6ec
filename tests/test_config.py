"""
Tests for run configuration validation.
"""
import unittest
from datetime import timedelta

from pydantic import ValidationError

from gencert.common.config import GenerationConfig, TieredConfig


class TestGenerationConfig(unittest.TestCase):

    def test_comma_separated_hosts(self):
        config = GenerationConfig(hosts="localhost, 127.0.0.1")
        self.assertEqual(config.hosts, ["localhost", "127.0.0.1"])

    def test_defaults(self):
        config = GenerationConfig(hosts=["localhost"])
        self.assertEqual(config.organization, "Acme Co")
        self.assertEqual(config.valid_for, timedelta(hours=8760))

    def test_duration_string(self):
        config = GenerationConfig(hosts=[], valid_for="48h")
        self.assertEqual(config.valid_for, timedelta(days=2))

    def test_rejects_non_positive_duration(self):
        for value in [timedelta(0), timedelta(seconds=-1)]:
            with self.subTest(value=value):
                with self.assertRaises(ValidationError):
                    GenerationConfig(hosts=[], valid_for=value)

    def test_rejects_fractional_seconds(self):
        with self.assertRaises(ValidationError):
            GenerationConfig(hosts=[], valid_for=timedelta(seconds=1, microseconds=5))

    def test_rejects_empty_organization(self):
        with self.assertRaises(ValidationError):
            GenerationConfig(hosts=[], organization="  ")

    def test_frozen(self):
        config = GenerationConfig(hosts=["a"])
        with self.assertRaises(ValidationError):
            config.organization = "Other"


    def test_rejects_non_list_hosts(self):
        for hosts in [None, 42, [1], ["localhost", None]]:
            with self.subTest(hosts=hosts):
                with self.assertRaises(ValidationError):
                    GenerationConfig(hosts=hosts)

    def test_hosts_tuple(self):
        self.assertEqual(GenerationConfig(hosts=(" a ", "")).hosts, ["a"])


class TestTieredConfig(unittest.TestCase):

    def test_defaults(self):
        config = TieredConfig()
        self.assertEqual(config.server_names, ["server1.local", "server2.local", "server3.local"])
        self.assertEqual(config.client_names, ["client1", "client2", "client3"])

    def test_duplicate_names(self):
        with self.assertRaises(ValidationError):
            TieredConfig(server_names=["a", "a"])

    def test_names_must_not_overlap(self):
        with self.assertRaises(ValidationError):
            TieredConfig(server_names=["shared"], client_names=["shared"])

    def test_reserved_names(self):
        for name in ["root", "intermediate-server", "intermediate-client"]:
            with self.subTest(name=name):
                with self.assertRaises(ValidationError):
                    TieredConfig(server_names=[name])
                with self.assertRaises(ValidationError):
                    TieredConfig(client_names=[name])

    def test_names_must_be_file_names(self):
        for name in ["", ".", "..", "../root", "a/b", "a\\b"]:
            with self.subTest(name=name):
                with self.assertRaises(ValidationError):
                    TieredConfig(client_names=[name])


if __name__ == "__main__":
    unittest.main()
