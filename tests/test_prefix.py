"""Tests for shared-prefix analysis."""

import pytest

from llmbatch.core.prefix import (
    PrefixedPrompt,
    common_prefix,
    common_prefix_length,
    prompt_text,
    split_prompt,
)


class TestCommonPrefixLength:
    """Tests for common_prefix_length."""

    @pytest.mark.unit
    def test_empty_batch_is_zero(self):
        assert common_prefix_length([]) == 0

    @pytest.mark.unit
    def test_single_prompt_is_whole_prompt(self):
        assert common_prefix_length(["Translate: hello"]) == len("Translate: hello")
        assert common_prefix(["Translate: hello"]) == "Translate: hello"

    @pytest.mark.unit
    def test_shared_context(self):
        prompts = [
            "Summarize in French: the cat",
            "Summarize in French: the dog",
            "Summarize in French: a bird",
        ]
        assert common_prefix(prompts) == "Summarize in French: "

    @pytest.mark.unit
    def test_stops_at_shortest_prompt(self):
        assert common_prefix(["Hi", "Hi there"]) == "Hi"
        assert common_prefix(["Hi there", "Hi"]) == "Hi"

    @pytest.mark.unit
    def test_nothing_shared(self):
        assert common_prefix_length(["abc", "xyz"]) == 0
        assert common_prefix(["abc", "xyz"]) == ""

    @pytest.mark.unit
    def test_empty_prompt_in_batch(self):
        assert common_prefix_length(["abc", "", "abd"]) == 0

    @pytest.mark.unit
    def test_identical_prompts(self):
        assert common_prefix(["same", "same", "same"]) == "same"

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "prompts",
        [
            ["a", "ab", "abc"],
            ["  lead", "  leading", "  "],
            ["été", "étés", "état"],
            ["x\ny", "x\nz"],
        ],
    )
    def test_prefix_bounds_hold(self, prompts):
        length = common_prefix_length(prompts)
        assert length <= min(len(p) for p in prompts)
        prefix = prompts[0][:length]
        assert all(p[:length] == prefix for p in prompts)
        # maximal: one more character would not be shared
        if all(len(p) > length for p in prompts):
            assert len({p[length] for p in prompts}) > 1


class TestSplitPrompt:
    """Tests for the prefix/suffix split."""

    @pytest.mark.unit
    def test_split_at_prefix(self):
        assert split_prompt("Hi there", 2) == PrefixedPrompt(prefix="Hi", suffix=" there")

    @pytest.mark.unit
    def test_split_whole_prompt(self):
        assert split_prompt("Hi", 2) == PrefixedPrompt(prefix="Hi", suffix="")

    @pytest.mark.unit
    def test_zero_length_prefix_keeps_full_suffix(self):
        split = split_prompt("Hello", 0)
        assert split.prefix == ""
        assert split.suffix == "Hello"

    @pytest.mark.unit
    def test_prompt_text_flattens(self):
        assert prompt_text(PrefixedPrompt("Hi", " there")) == "Hi there"
        assert prompt_text("plain") == "plain"
