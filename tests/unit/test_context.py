"""Unit tests for context and manifest loading."""

from pathlib import Path

import pytest

from whitelabel.context import ContextError, apply_overrides, load_context, load_manifest


class TestLoadContext:
    """Tests for load_context()."""

    def test_load_yaml(self, acme_context_file: Path) -> None:
        """Test loading a YAML context."""
        context = load_context(acme_context_file)

        assert context["namespace"] == "com.acme.fieldapp"
        assert [b["name"] for b in context["buildTypes"]] == ["release", "debug"]
        assert context["buildTypes"][0]["isMinifyEnabled"] is True

    def test_load_json(self, contexts_dir: Path) -> None:
        """Test loading a JSON context."""
        context = load_context(contexts_dir / "acme.json")

        assert context["appName"] == "Acme Field"
        assert context["signingConfigs"] == []

    def test_empty_file_is_empty_context(self, tmp_path: Path) -> None:
        """Test that an empty YAML document yields an empty mapping."""
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert load_context(path) == {}

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test a path that does not exist."""
        with pytest.raises(FileNotFoundError):
            load_context(tmp_path / "nope.yaml")

    def test_unsupported_suffix(self, tmp_path: Path) -> None:
        """Test that unknown formats are rejected."""
        path = tmp_path / "context.toml"
        path.write_text("a = 1")

        with pytest.raises(ContextError, match="Unsupported context format"):
            load_context(path)

    def test_top_level_must_be_mapping(self, tmp_path: Path) -> None:
        """Test that a list document is rejected."""
        path = tmp_path / "context.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ContextError, match="mapping"):
            load_context(path)

    def test_invalid_json(self, tmp_path: Path) -> None:
        """Test malformed JSON."""
        path = tmp_path / "context.json"
        path.write_text("{not json")

        with pytest.raises(ContextError, match="Invalid JSON"):
            load_context(path)

    def test_env_expansion(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test ${VAR} substitution inside nested values."""
        monkeypatch.setenv("KEY_PASSWORD", "from-env")
        path = tmp_path / "context.yaml"
        path.write_text("signingConfigs:\n  - keyPassword: ${KEY_PASSWORD}\n")

        context = load_context(path)

        assert context["signingConfigs"][0]["keyPassword"] == "from-env"

    def test_env_expansion_disabled(self, tmp_path: Path) -> None:
        """Test that expansion can be turned off."""
        path = tmp_path / "context.yaml"
        path.write_text("keyPassword: ${KEY_PASSWORD}\n")

        context = load_context(path, expand_env=False)

        assert context["keyPassword"] == "${KEY_PASSWORD}"

    def test_unset_env_var(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that an unset variable is a context error naming the file."""
        monkeypatch.delenv("WL_UNSET_VAR", raising=False)
        path = tmp_path / "context.yaml"
        path.write_text("a: ${WL_UNSET_VAR}\n")

        with pytest.raises(ContextError, match="WL_UNSET_VAR") as exc_info:
            load_context(path)

        assert exc_info.value.path == path


class TestApplyOverrides:
    """Tests for KEY=VALUE overrides."""

    def test_override_and_add(self) -> None:
        """Test replacing and adding top-level keys."""
        base = {"appName": "Acme", "namespace": "com.acme"}

        result = apply_overrides(base, ["appName=Acme Beta", "flavor=beta"])

        assert result == {"appName": "Acme Beta", "namespace": "com.acme", "flavor": "beta"}
        assert base == {"appName": "Acme", "namespace": "com.acme"}

    def test_value_may_contain_equals(self) -> None:
        """Test that only the first '=' splits."""
        assert apply_overrides({}, ["expr=a=b"]) == {"expr": "a=b"}

    def test_empty_value_allowed(self) -> None:
        """Test KEY= sets an empty string."""
        assert apply_overrides({}, ["resValue="]) == {"resValue": ""}

    @pytest.mark.parametrize("entry", ["novalue", "=x", " =x"])
    def test_malformed_override(self, entry: str) -> None:
        """Test entries without a key or '='."""
        with pytest.raises(ContextError, match="Invalid override"):
            apply_overrides({}, [entry])


class TestLoadManifest:
    """Tests for multi-customer manifests."""

    def test_customers_merged_with_defaults(self, manifest_file: Path) -> None:
        """Test defaults overlaid by customer keys, in file order."""
        contexts = load_manifest(manifest_file)

        assert list(contexts) == ["acme", "globex"]
        assert contexts["acme"]["namespace"] == "com.acme.fieldapp"
        assert contexts["acme"]["buildTypes"][0]["name"] == "release"
        assert len(contexts["acme"]["dependencies"]) == 1
        assert contexts["globex"]["dependencies"] == []

    def test_customers_required(self, tmp_path: Path) -> None:
        """Test a manifest without customers."""
        path = tmp_path / "manifest.yaml"
        path.write_text("defaults:\n  appName: x\n")

        with pytest.raises(ContextError, match="customers"):
            load_manifest(path)

    def test_customer_must_be_mapping(self, tmp_path: Path) -> None:
        """Test a customer entry that is not a mapping."""
        path = tmp_path / "manifest.yaml"
        path.write_text("customers:\n  acme: [1, 2]\n")

        with pytest.raises(ContextError, match="acme"):
            load_manifest(path)

    def test_empty_customer_uses_defaults(self, tmp_path: Path) -> None:
        """Test a customer with no own keys."""
        path = tmp_path / "manifest.yaml"
        path.write_text("defaults:\n  appName: Shared\ncustomers:\n  acme:\n")

        assert load_manifest(path) == {"acme": {"appName": "Shared"}}

    @pytest.mark.parametrize("customer", ["..", "a/b", "with space"])
    def test_invalid_customer_id(self, tmp_path: Path, customer: str) -> None:
        """Test that customer ids must be safe directory names."""
        path = tmp_path / "manifest.yaml"
        path.write_text(f'customers:\n  "{customer}":\n    appName: x\n')

        with pytest.raises(ContextError, match="Invalid customer id"):
            load_manifest(path)
