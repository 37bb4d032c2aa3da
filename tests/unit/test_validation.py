"""Unit tests for prompt validation and dimension clamping."""

import pytest

from promptgate.api.validation import (
    MISSING_PROMPT,
    PromptValidationError,
    clamp_dimension,
    parse_dimension,
    resolve_dimensions,
    validate_prompt,
)
from promptgate.core.config import PromptGateConfig


class TestValidatePrompt:
    """Tests for validate_prompt."""

    def test_none_raises(self):
        with pytest.raises(PromptValidationError, match=MISSING_PROMPT):
            validate_prompt(None)

    def test_empty_raises(self):
        with pytest.raises(PromptValidationError, match=MISSING_PROMPT):
            validate_prompt("")

    def test_passes_through_unchanged(self):
        """No trimming or escaping is applied."""
        prompt = "  a <b>bold</b> {{prompt}} request  "
        assert validate_prompt(prompt) is prompt

    def test_whitespace_only_accepted(self):
        assert validate_prompt(" ") == " "

    def test_long_prompt_accepted(self):
        prompt = "word " * 5000
        assert validate_prompt(prompt) == prompt


class TestParseDimension:
    """Tests for parse_dimension."""

    def test_parses_integer_string(self):
        assert parse_dimension("768", 512) == 768

    def test_absent_uses_default(self):
        assert parse_dimension(None, 512) == 512

    @pytest.mark.parametrize("raw", ["abc", "", "12.5", "NaN", "1e3"])
    def test_unparseable_uses_default(self, raw):
        assert parse_dimension(raw, 512) == 512

    def test_negative_parses(self):
        assert parse_dimension("-20", 512) == -20


class TestClampDimension:
    """Tests for clamp_dimension."""

    def test_above_max_is_max(self):
        assert clamp_dimension(5000, 1400) == 1400

    def test_within_bounds_unchanged(self):
        assert clamp_dimension(1024, 1400) == 1024

    def test_zero_and_negative_raised_to_minimum(self):
        assert clamp_dimension(0, 1400) == 1
        assert clamp_dimension(-50, 1400) == 1

    def test_custom_minimum(self):
        assert clamp_dimension(10, 1400, minimum=64) == 64

    @pytest.mark.parametrize("value", [-10, 0, 1, 512, 1400, 1401, 99999])
    def test_idempotent(self, value):
        once = clamp_dimension(value, 1400)
        assert clamp_dimension(once, 1400) == once


class TestResolveDimensions:
    """Tests for resolve_dimensions."""

    def test_clamps_both(self, test_config: PromptGateConfig):
        assert resolve_dimensions("2048", "4096", test_config) == (1400, 1400)

    def test_defaults_both(self, test_config: PromptGateConfig):
        assert resolve_dimensions(None, "oops", test_config) == (512, 512)

    def test_earlier_cap(self):
        cfg = PromptGateConfig(max_dimension=512, _env_file=None)
        assert resolve_dimensions("1024", "256", cfg) == (512, 256)
