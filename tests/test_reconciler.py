"""
Tests for jarstore reconciler.

Version comparison is exact string equality; the "1.9" vs "1.9.0" case
reporting an update is intended behaviour.
"""

import pytest
from pathlib import Path

from jarstore.installed import InstalledRecord
from jarstore.reconciler import (
    LAUNCHABLE, NOT_INSTALLED, Launchable, NotInstalled, UpdateAvailable,
    classify_catalog, reconcile, remote_versions,
)

from conftest import make_app


def _installed(name, version):
    return InstalledRecord(sanitized_name=name, artifact_path=Path(f"installed_apps/{name}.jar"), version=version)


class TestReconcile:

    @pytest.mark.unit
    def test_equal_versions_launchable(self):
        result = reconcile([make_app("Weather", "2.0")], [_installed("Weather", "2.0")])
        assert result == [(_installed("Weather", "2.0"), Launchable())]

    @pytest.mark.unit
    def test_different_version_update_available(self):
        [(record, status)] = reconcile([make_app("Weather", "2.0")], [_installed("Weather", "1.0")])
        assert status == UpdateAvailable("2.0")

    @pytest.mark.unit
    def test_trailing_zero_is_a_different_version(self):
        [(_, status)] = reconcile([make_app("Weather", "1.9.0")], [_installed("Weather", "1.9")])
        assert status == UpdateAvailable("1.9.0")

    @pytest.mark.unit
    def test_no_semantic_ordering(self):
        # "1.10" is newer than "1.9" semantically, and an older remote still counts
        [(_, status)] = reconcile([make_app("Weather", "1.9")], [_installed("Weather", "1.10")])
        assert status == UpdateAvailable("1.9")

    @pytest.mark.unit
    @pytest.mark.parametrize("local_version", ["1.0", "0.0.1", "", "anything"])
    def test_unmatched_always_launchable(self, local_version):
        [(_, status)] = reconcile([make_app("Other", "9.9")], [_installed("Weather", local_version)])
        assert status is LAUNCHABLE

    @pytest.mark.unit
    def test_match_by_sanitized_name(self):
        [(_, status)] = reconcile([make_app("My Cool App", "2.0")], [_installed("MyCoolApp", "1.0")])
        assert status == UpdateAvailable("2.0")

    @pytest.mark.unit
    def test_duplicate_catalog_names_last_wins(self):
        catalog = [make_app("Weather", "2.0"), make_app("Wea ther", "3.0")]
        assert remote_versions(catalog) == {"Weather": "3.0"}
        [(_, status)] = reconcile(catalog, [_installed("Weather", "2.0")])
        assert status == UpdateAvailable("3.0")

    @pytest.mark.unit
    def test_empty_catalog(self):
        installed = [_installed("A", "1"), _installed("B", "2")]
        assert [s for _, s in reconcile([], installed)] == [LAUNCHABLE, LAUNCHABLE]

    @pytest.mark.unit
    def test_keeps_installed_order(self):
        installed = [_installed("B", "1"), _installed("A", "1")]
        assert [r.sanitized_name for r, _ in reconcile([make_app("A", "1")], installed)] == ["B", "A"]

    @pytest.mark.unit
    def test_deterministic_and_pure(self):
        catalog = [make_app("Weather", "2.0"), make_app("Snake", "1.0")]
        installed = [_installed("Weather", "1.0"), _installed("Snake", "1.0")]
        catalog_before = list(catalog)
        installed_before = list(installed)

        assert reconcile(catalog, installed) == reconcile(catalog, installed)
        assert catalog == catalog_before
        assert installed == installed_before

    @pytest.mark.unit
    def test_accepts_iterators(self):
        result = reconcile(iter([make_app("A", "2")]), iter([_installed("A", "1")]))
        assert result[0][1] == UpdateAvailable("2")


class TestClassifyCatalog:

    @pytest.mark.unit
    def test_statuses(self):
        catalog = [make_app("New", "1.0"), make_app("Same", "1.0"), make_app("Old", "2.0")]
        installed = [_installed("Same", "1.0"), _installed("Old", "1.0")]

        statuses = [s for _, s in classify_catalog(catalog, installed)]
        assert statuses == [NOT_INSTALLED, LAUNCHABLE, UpdateAvailable("2.0")]
        assert isinstance(statuses[0], NotInstalled)

    @pytest.mark.unit
    def test_keeps_catalog_order(self):
        catalog = [make_app("Z"), make_app("A")]
        assert [a.name for a, _ in classify_catalog(catalog, [])] == ["Z", "A"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
