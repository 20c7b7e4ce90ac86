"""Tests for environment label helpers."""

from orcpublish.core.labels import is_dev_env, normalize_labels


class TestNormalizeLabels:
    def test_env_pairs_and_case(self):
        assert normalize_labels(["ENV=Dev", " prod ", "", "team=x"]) == frozenset({"dev", "prod", "team=x"})

    def test_none(self):
        assert normalize_labels(None) == frozenset()


class TestIsDevEnv:
    def test_dev(self):
        assert is_dev_env(["dev"]) is True
        assert is_dev_env(["env=dev"]) is True

    def test_not_dev(self):
        assert is_dev_env(["prod"]) is False
        assert is_dev_env([]) is False
        assert is_dev_env(["developer"]) is False
