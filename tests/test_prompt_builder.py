"""
Unit tests for prompt rendering
"""

import pytest

from sensitivity_scan.models import ColumnMetadata
from sensitivity_scan.oracles import OracleOptions
from sensitivity_scan.prompt_builder import NO_COMMENT_PLACEHOLDER, PromptBuilder


def _column(comment=None):
    return ColumnMetadata(
        table_name="CUSTOMERS",
        column_name="SSN",
        normalized_type="VARCHAR(11)",
        is_nullable=True,
        ordinal_position=2,
        comment=comment
    )


class TestPromptBuilder:
    """Test cases for PromptBuilder"""

    def test_render_field_order(self, framework):
        """Test fields appear in fixed order with fixed labels"""
        text = PromptBuilder().render(_column("Social security number"), framework)

        assert text == (
            "Column name: SSN Data type: VARCHAR(11) Comment: Social security number "
            f"Context: {framework.policy_text}"
        )

    @pytest.mark.parametrize("comment", [None, "", "   "])
    def test_missing_comment_placeholder(self, framework, comment):
        """Test absent or blank comments render as the placeholder"""
        text = PromptBuilder().render(_column(comment), framework)

        assert f"Comment: {NO_COMMENT_PLACEHOLDER} Context:" in text

    def test_render_is_deterministic(self, framework):
        """Test identical inputs produce identical text"""
        builder = PromptBuilder()

        assert builder.render(_column("x"), framework) == builder.render(_column("x"), framework)
        assert PromptBuilder().build(_column(), framework) == PromptBuilder().build(_column(), framework)

    def test_build_request(self, framework):
        """Test the request carries the framework categories and options"""
        options = OracleOptions(task_description="Classify", output_mode="multi")

        request = PromptBuilder(options).build(_column(), framework)

        assert request.categories == framework.categories
        assert request.options.output_mode == "multi"
        assert request.rendered_text.startswith("Column name: SSN Data type: VARCHAR(11)")

    def test_default_options(self, framework):
        """Test single-label output is the default"""
        request = PromptBuilder().build(_column(), framework)

        assert request.options.output_mode == "single"


if __name__ == "__main__":
    pytest.main([__file__])
