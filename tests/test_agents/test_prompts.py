"""Tests for prompt template loading and rendering."""

import pytest

from chatkit_ai.agents.prompts import Template, render
from chatkit_ai.agents.prompts.loader import check_templates, declared_templates
from chatkit_ai.exceptions import ConfigurationError


class TestTemplateChecks:
    """Tests for the startup template check."""

    def test_declared_templates(self):
        """Test every Template constant is listed."""
        assert sorted(declared_templates()) == ["classifier_system", "composer_system"]

    def test_shipped_templates_pass(self):
        """Test the packaged templates all load."""
        check_templates(declared_templates())

    def test_missing_template_fails(self):
        """Test a declared template without a file is a configuration error."""
        with pytest.raises(ConfigurationError, match="welcome_banner"):
            check_templates([Template.COMPOSER_SYSTEM, "welcome_banner"])


class TestRender:
    """Tests for rendering."""

    def test_classifier_prompt_lists_topics(self):
        """Test the classifier prompt renders each topic."""
        prompt = render(Template.CLASSIFIER_SYSTEM, topics={"housing": "Finding places to live"})

        assert "housing" in prompt
        assert "Finding places to live" in prompt

    def test_no_html_escaping(self):
        """Test user-facing text is not HTML-escaped."""
        prompt = render(
            Template.COMPOSER_SYSTEM,
            brand="Tom & Jerry's",
            location=None,
            topic=None,
            urgency=None,
            events=[],
            offers=[],
            content=[],
        )

        assert "Tom & Jerry's" in prompt
