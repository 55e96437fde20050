"""
Tests for the host document models.
"""

import pytest
from pydantic import ValidationError

from scripthost.dependency_models import ExtensionManifest, MavenDependenciesConfig, MavenDependency
from scripthost.scripthost_exceptions import ConfigurationError


class TestMavenDependency:
    """Tests for the MavenDependency descriptor."""

    @pytest.fixture
    def example_record(self):
        """A record as found under [dependencies.lib]."""
        return {
            "groupId": "org.example",
            "artifactId": "lib",
            "version": "1.0",
            "repository": "https://repo/",
        }

    def test_relative_path_replaces_group_dots(self, example_record):
        """Test the deterministic storage path."""
        dependency = MavenDependency.from_record("lib", example_record)
        assert dependency.relative_path == "org/example/lib/1.0/lib-1.0.jar"

    def test_download_and_checksum_urls(self, example_record):
        """Test that the checksum URL sits next to the artifact URL."""
        dependency = MavenDependency.from_record("lib", example_record)
        assert dependency.download_url == "https://repo/org/example/lib/1.0/lib-1.0.jar"
        assert dependency.checksum_url == "https://repo/org/example/lib/1.0/lib-1.0.jar.sha512"

    def test_repository_without_trailing_slash(self, example_record):
        """Test that a repository base without a trailing slash still yields a valid URL."""
        example_record["repository"] = "https://repo.example.com/maven2"
        dependency = MavenDependency.from_record("lib", example_record)
        assert dependency.download_url == "https://repo.example.com/maven2/org/example/lib/1.0/lib-1.0.jar"

    def test_custom_extension(self, example_record):
        """Test a non-jar artifact."""
        example_record["extension"] = "whl"
        dependency = MavenDependency.from_record("lib", example_record)
        assert dependency.file_name == "lib-1.0.whl"

    def test_descriptor_is_immutable(self, example_record):
        """Test that descriptors cannot be changed once parsed."""
        dependency = MavenDependency.from_record("lib", example_record)
        with pytest.raises(ValidationError):
            dependency.version = "2.0"

    def test_model_settings(self):
        """Test that settings are declared through model_config rather than a nested Config class."""
        assert "Config" not in vars(MavenDependency)
        assert MavenDependency.model_config["frozen"] is True
        assert MavenDependency.model_config["populate_by_name"] is True
        assert "Config" not in vars(ExtensionManifest)
        assert ExtensionManifest.model_config["extra"] == "allow"

    def test_snake_case_fields_accepted(self):
        """Test population by field name as well as by alias."""
        dependency = MavenDependency(
            key="lib", group_id="org.example", artifact_id="lib", version="1.0", repository="https://repo/"
        )
        assert dependency.coordinates == "org.example:lib:1.0"

    @pytest.mark.parametrize(
        "field,value",
        [
            ("version", "../1.0"),
            ("artifactId", ""),
            ("repository", "file:///etc/"),
        ],
    )
    def test_invalid_record_rejected(self, example_record, field, value):
        """Test that unsafe or incomplete records raise ConfigurationError."""
        example_record[field] = value
        with pytest.raises(ConfigurationError):
            MavenDependency.from_record("lib", example_record)

    def test_missing_field_rejected(self, example_record):
        del example_record["groupId"]
        with pytest.raises(ConfigurationError, match="lib"):
            MavenDependency.from_record("lib", example_record)


class TestMavenDependenciesConfig:
    """Tests for MavenDependenciesConfig."""

    def test_one_bad_entry_does_not_hide_others(self):
        """Test that parsing is per entry."""
        config = MavenDependenciesConfig(
            dependencies={
                "good": {"groupId": "a.b", "artifactId": "c", "version": "1", "repository": "https://r/"},
                "bad": {"groupId": "a.b"},
                "scalar": "not-a-table",
            }
        )
        parsed, invalid = config.get_dependencies()

        assert [d.key for d in parsed] == ["good"]
        assert set(invalid) == {"bad", "scalar"}

    def test_get_dependency(self):
        config = MavenDependenciesConfig(
            dependencies={"good": {"groupId": "a.b", "artifactId": "c", "version": "1", "repository": "https://r/"}}
        )
        assert config.get_dependency("good").artifact_id == "c"
        assert config.get_dependency("missing") is None


class TestExtensionManifest:
    """Tests for ExtensionManifest."""

    def test_name_defaults_to_folder(self):
        manifest = ExtensionManifest.from_record("greeter", {"author": "someone"})
        assert manifest.display_name == "greeter"
        assert manifest.author == "someone"

    def test_empty_record_allowed(self):
        manifest = ExtensionManifest.from_record("greeter", None)
        assert manifest.folder == "greeter"

    @pytest.mark.parametrize("folder", ["..", "a/b", ""])
    def test_folder_must_be_plain_name(self, folder):
        with pytest.raises(ConfigurationError):
            ExtensionManifest.from_record(folder, {})
