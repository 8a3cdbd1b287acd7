"""
Unit tests for the sensitivity framework
"""

import json

import pytest

from sensitivity_scan.exceptions import ConfigurationError
from sensitivity_scan.framework import (
    MAX_CATEGORIES,
    CategoryDef,
    SensitivityFramework,
    example_framework,
)


def _categories(count):
    return tuple(CategoryDef(f"LABEL_{i}", f"Category {i}") for i in range(count))


class TestFrameworkValidation:
    """Test cases for framework construction and validation"""

    def test_example_framework(self, framework):
        """Test the bundled example framework is valid"""
        assert framework.labels == ("SENSITIVE_PII", "SENSITIVE_PHI", "SENSITIVE_FINANCIAL", "PUBLIC")
        assert framework.baseline_label == "PUBLIC"
        assert framework.actions["SENSITIVE_PHI"] == "HIPAA compliance required"

    def test_empty_categories_rejected(self):
        """Test at least one category is required"""
        with pytest.raises(ConfigurationError):
            SensitivityFramework("policy", ())

    def test_category_limit(self):
        """Test 500 categories are accepted and 501 rejected"""
        assert len(SensitivityFramework("policy", _categories(MAX_CATEGORIES)).categories) == 500

        with pytest.raises(ConfigurationError, match="501"):
            SensitivityFramework("policy", _categories(MAX_CATEGORIES + 1))

    def test_duplicate_labels_rejected(self):
        """Test labels must be unique"""
        with pytest.raises(ConfigurationError, match="Duplicate"):
            SensitivityFramework("policy", (CategoryDef("PII"), CategoryDef("PII", "again")))

    def test_blank_label_rejected(self):
        """Test labels must be non-empty"""
        with pytest.raises(ConfigurationError):
            SensitivityFramework("policy", (CategoryDef("  "),))

    def test_undeclared_baseline_rejected(self):
        """Test the baseline must be a declared label"""
        with pytest.raises(ConfigurationError, match="Baseline"):
            SensitivityFramework("policy", (CategoryDef("PII"),), baseline_label="PUBLIC")

    def test_actions_must_reference_declared_labels(self):
        """Test action keys must be declared labels"""
        with pytest.raises(ConfigurationError, match="PHI"):
            SensitivityFramework("policy", (CategoryDef("PII"),), actions={"PHI": "Encrypt"})

    def test_categories_from_dicts(self):
        """Test category mappings are coerced to CategoryDef"""
        framework = SensitivityFramework("policy", [{"label": "PII", "description": "Personal data"}])

        assert framework.categories == (CategoryDef("PII", "Personal data"),)

    def test_actions_are_read_only(self, framework):
        """Test the action table cannot be mutated after construction"""
        with pytest.raises(TypeError):
            framework.actions["PUBLIC"] = "Publish"

    def test_oracle_categories_preserve_order(self, framework):
        """Test the oracle payload keeps declaration order"""
        payload = framework.to_oracle_categories()

        assert [c["label"] for c in payload] == list(framework.labels)
        assert set(payload[0]) == {"label", "description"}


class TestFrameworkLoading:
    """Test cases for loading frameworks from mappings and files"""

    def test_from_dict_collects_actions(self):
        """Test per-category actions and the actions mapping are merged"""
        framework = SensitivityFramework.from_dict({
            "policy_text": "PII includes email",
            "baseline_label": "PUBLIC",
            "categories": [
                {"label": "PII", "description": "Personal data", "action": "Encrypt"},
                {"label": "PHI"},
                {"label": "PUBLIC"},
            ],
            "actions": {"PHI": "HIPAA compliance required"},
        })

        assert framework.labels == ("PII", "PHI", "PUBLIC")
        assert dict(framework.actions) == {"PII": "Encrypt", "PHI": "HIPAA compliance required"}

    def test_from_dict_rejects_bad_entries(self):
        """Test malformed definitions raise ConfigurationError"""
        with pytest.raises(ConfigurationError):
            SensitivityFramework.from_dict({"categories": [{"description": "no label"}]})
        with pytest.raises(ConfigurationError):
            SensitivityFramework.from_dict({"categories": "PII"})
        with pytest.raises(ConfigurationError):
            SensitivityFramework.from_dict(["PII"])

    def test_to_dict_reloads(self, framework):
        """Test a serialized framework loads back with the same content"""
        reloaded = SensitivityFramework.from_dict(framework.to_dict())

        assert reloaded.categories == framework.categories
        assert reloaded.baseline_label == framework.baseline_label
        assert dict(reloaded.actions) == dict(framework.actions)

    def test_from_yaml_file(self, tmp_path):
        """Test loading a YAML framework file"""
        path = tmp_path / "framework.yaml"
        path.write_text(
            "policy_text: |\n"
            "  PII includes: SSN, email addresses.\n"
            "baseline_label: PUBLIC\n"
            "categories:\n"
            "  - label: SENSITIVE_PII\n"
            "    description: Personal data\n"
            "    action: Requires encryption and access controls\n"
            "  - label: PUBLIC\n"
            "    description: Non-sensitive data\n",
            encoding="utf-8"
        )

        framework = SensitivityFramework.from_file(path)

        assert framework.labels == ("SENSITIVE_PII", "PUBLIC")
        assert framework.policy_text.startswith("PII includes")
        assert framework.actions["SENSITIVE_PII"] == "Requires encryption and access controls"

    def test_from_json_file(self, tmp_path):
        """Test loading a JSON framework file"""
        path = tmp_path / "framework.json"
        path.write_text(json.dumps(example_framework().to_dict()), encoding="utf-8")

        framework = SensitivityFramework.from_file(path)

        assert framework.labels == example_framework().labels

    def test_missing_file(self, tmp_path):
        """Test a missing file raises ConfigurationError"""
        with pytest.raises(ConfigurationError, match="not found"):
            SensitivityFramework.from_file(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        """Test unparseable YAML raises ConfigurationError"""
        path = tmp_path / "broken.yml"
        path.write_text("categories: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            SensitivityFramework.from_file(path)


if __name__ == "__main__":
    pytest.main([__file__])
