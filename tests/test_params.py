"""Tests for parameter normalization and merging."""

import pytest

from portal_assistant.params import merge_params, normalize_params


class TestParamsNormalization:
    def test_basic_params_normalization(self):
        """Standard keys stay at the top level."""
        params = normalize_params({"temperature": 0.7, "max_tokens": 100, "top_p": 0.9})

        assert params["temperature"] == 0.7
        assert params["max_tokens"] == 100
        assert params["top_p"] == 0.9
        assert params["extra"] == {}

    def test_extra_params_handling(self):
        """Unknown keys are moved under extra."""
        params = normalize_params(
            {"temperature": 0.7, "reasoning_effort": "minimal", "verbosity": "low"}
        )

        assert params["temperature"] == 0.7
        assert params["extra"]["reasoning_effort"] == "minimal"
        assert params["extra"]["verbosity"] == "low"
        assert "reasoning_effort" not in params

    def test_none_values_handling(self):
        params = normalize_params({"temperature": 0.7, "max_tokens": None})

        assert params["temperature"] == 0.7
        assert params["max_tokens"] is None

        assert normalize_params(None) == {"extra": {}}

    def test_explicit_extra_wins(self):
        params = normalize_params({"verbosity": "low", "extra": {"verbosity": "high"}})
        assert params["extra"] == {"verbosity": "high"}

    def test_rejects_non_dict(self):
        with pytest.raises(TypeError):
            normalize_params([("temperature", 0.1)])
        with pytest.raises(TypeError):
            normalize_params({"extra": "nope"})


class TestMergeParams:
    def test_overrides_replace_top_level_keys(self):
        merged = merge_params({"temperature": 0.2, "max_tokens": 10}, {"temperature": 0.9})
        assert merged["temperature"] == 0.9
        assert merged["max_tokens"] == 10

    def test_extra_is_merged_key_by_key(self):
        merged = merge_params({"a": 1, "b": 2}, {"b": 3})
        assert merged["extra"] == {"a": 1, "b": 3}

    def test_no_overrides(self):
        assert merge_params(None, None) == {"extra": {}}
