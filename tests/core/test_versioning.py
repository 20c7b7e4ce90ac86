"""Tests for version token allocation."""

import pytest

from orcpublish.core.errors import VersionFormatError
from orcpublish.core.versioning import (
    INITIAL_VERSION,
    VersionAllocator,
    generate_new_version,
    increase_version,
    version_number,
)


class TestIncreaseVersion:
    @pytest.mark.parametrize(
        "old, new",
        [
            ("v1", "v2"),
            ("v9", "v10"),
            ("v000001", "v000002"),
            ("v000009", "v000010"),
            ("v999999", "v1000000"),
            ("7", "8"),
        ],
    )
    def test_increments_and_keeps_padding(self, old, new):
        assert increase_version(old) == new

    @pytest.mark.parametrize("bad", ["", "v", "vX", "v1a", "latest"])
    def test_rejects_tokens_without_numeric_suffix(self, bad):
        with pytest.raises(VersionFormatError):
            increase_version(bad)

    def test_result_is_strictly_greater(self):
        token = "v000001"
        for _ in range(25):
            nxt = increase_version(token)
            assert version_number(nxt) > version_number(token)
            token = nxt


class TestVersionAllocator:
    def test_first_version(self):
        assert generate_new_version() == INITIAL_VERSION == "v1"
        assert VersionAllocator().next_version(None) == "v1"

    def test_next_version(self):
        assert VersionAllocator().next_version("v1") == "v2"

    def test_fallback_on_unparsable_previous(self):
        assert VersionAllocator().next_version("garbage") == INITIAL_VERSION

    def test_strict_mode_raises(self):
        with pytest.raises(VersionFormatError) as excinfo:
            VersionAllocator(fallback_to_initial=False).next_version("garbage")
        assert excinfo.value.version == "garbage"
