from __future__ import annotations

import pytest

from depradar.exceptions import (
    ConfigError,
    DepRadarError,
    FileOperationError,
    ManifestError,
    NetworkError,
    RegistryError,
    ReleaseNotesError,
    SnapshotError,
)


@pytest.mark.unit
class TestDepRadarError:
    """Tests for the base exception."""

    def test_message_only(self) -> None:
        error = DepRadarError("boom")

        assert str(error) == "boom"
        assert error.details == {}

    def test_details_in_str_not_message(self) -> None:
        error = DepRadarError("boom", {"package": "react"})

        assert error.message == "boom"
        assert str(error) == "boom (package=react)"

    def test_repr(self) -> None:
        assert repr(DepRadarError("x")) == "DepRadarError(message='x', details={})"

    @pytest.mark.parametrize(
        "cls",
        [ConfigError, FileOperationError, ManifestError, NetworkError, SnapshotError],
    )
    def test_hierarchy(self, cls: type) -> None:
        assert issubclass(cls, DepRadarError)


@pytest.mark.unit
class TestNetworkErrors:
    """Tests for NetworkError and its subclasses."""

    def test_network_error_fields(self) -> None:
        error = NetworkError(
            "404 Not Found",
            url="https://registry.npmjs.org/nope",
            status_code=404,
            response_body="x" * 500,
        )

        assert error.status_code == 404
        assert error.details["url"] == "https://registry.npmjs.org/nope"
        assert error.details["response"].endswith("...")
        assert len(error.details["response"]) == 203

    def test_registry_error(self) -> None:
        error = RegistryError("404 Not Found", package_name="nope", status_code=404)

        assert isinstance(error, NetworkError)
        assert error.message == "404 Not Found"
        assert error.details == {"status_code": 404, "package": "nope"}

    def test_release_notes_error(self) -> None:
        error = ReleaseNotesError("403 Forbidden", repository="o/r")

        assert error.repository == "o/r"
        assert "repository=o/r" in str(error)


@pytest.mark.unit
class TestOtherErrors:
    """Tests for the remaining error types."""

    def test_manifest_error_source(self) -> None:
        error = ManifestError("Invalid JSON: x", source="package.json")

        assert error.source == "package.json"
        assert error.details == {"source": "package.json"}

    def test_config_error(self) -> None:
        error = ConfigError("bad", config_path="depradar.toml", option="timeout")

        assert error.details == {"path": "depradar.toml", "option": "timeout"}

    def test_file_operation_error(self) -> None:
        cause = OSError("denied")
        error = FileOperationError(
            "Failed", file_path="a.json", operation="read", original_error=cause
        )

        assert error.original_error is cause
        assert error.details["original_error"] == "denied"
