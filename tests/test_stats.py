import math

import pytest

from xkpass.config import Settings
from xkpass.presets import PRESETS
from xkpass.schema import validate_config
from xkpass.stats import (
    blind_alphabet_size,
    config_stats,
    dictionary_stats,
    entropy_stats,
    random_draws_required,
    render_bigint,
    seen_permutations,
    will_contain_symbol,
)


class TestConfigStats:
    def test_xkcd_lengths(self, xkcd_config):
        stats = config_stats(validate_config(xkcd_config))
        assert (stats.length_min, stats.length_max) == (14, 14)
        assert stats.random_draws_required == 3
        assert stats.warnings == []

    def test_full_lengths(self, full_config):
        stats = config_stats(validate_config(full_config))
        # 4 padding + 2 digit groups of 2 with their separators + 2 separators
        assert (stats.length_min, stats.length_max) == (24, 36)
        assert stats.random_draws_required == 9

    def test_no_separator_adds_nothing(self, xkcd_config):
        xkcd_config.update(separator_character="NONE", padding_digits_after=3)
        stats = config_stats(validate_config(xkcd_config))
        assert (stats.length_min, stats.length_max) == (15, 15)

    def test_adaptive_length_is_exact(self, xkcd_config):
        xkcd_config.update(padding_type="ADAPTIVE", padding_character="*", pad_to_length=30)
        stats = config_stats(validate_config(xkcd_config))
        assert (stats.length_min, stats.length_max) == (30, 30)

    def test_long_substitution_warns(self, xkcd_config):
        xkcd_config["character_substitutions"] = {"o": "()"}
        stats = config_stats(validate_config(xkcd_config))
        assert len(stats.warnings) == 1
        assert "substitution" in stats.warnings[0]

    def test_long_substitution_with_adaptive_padding_does_not_warn(self, xkcd_config):
        xkcd_config.update(
            character_substitutions={"o": "()"},
            padding_type="ADAPTIVE",
            padding_character="*",
            pad_to_length=20,
        )
        assert config_stats(validate_config(xkcd_config)).warnings == []


class TestRandomDraws:
    def test_random_case_draws_per_word(self, xkcd_config):
        xkcd_config["case_transform"] = "RANDOM"
        assert random_draws_required(validate_config(xkcd_config)) == 6

    def test_random_padding_character_ignored_without_padding(self, full_config):
        full_config["padding_type"] = "NONE"
        # words, separator, digits only
        assert random_draws_required(validate_config(full_config)) == 3 + 1 + 4

    @pytest.mark.parametrize(
        ("name", "draws"),
        [
            ("DEFAULT", 3 + 1 + 1 + 4),
            ("WEB16", 3 + 3 + 1 + 1),
            ("WIFI", 6 + 6 + 1 + 1 + 8),
            ("XKCD", 4 + 4),
            ("NTLM", 2 + 1 + 1 + 1),
        ],
    )
    def test_presets(self, name, draws):
        assert random_draws_required(PRESETS[name].config) == draws


class TestAlphabet:
    def test_lower_case_words_only(self, xkcd_config):
        xkcd_config["separator_character"] = "NONE"
        config = validate_config(xkcd_config)
        assert not will_contain_symbol(config)
        assert blind_alphabet_size(config) == 26

    def test_alphanumeric_separator_is_not_a_symbol(self, xkcd_config):
        xkcd_config["separator_character"] = "x"
        assert blind_alphabet_size(validate_config(xkcd_config)) == 26

    def test_symbol_separator(self, xkcd_config):
        config = validate_config(xkcd_config)
        assert will_contain_symbol(config)
        assert blind_alphabet_size(config) == 26 + 33

    def test_random_separator_from_letters_only(self, xkcd_config):
        xkcd_config.update(separator_character="RANDOM", separator_alphabet=["a", "b"])
        assert not will_contain_symbol(validate_config(xkcd_config))

    def test_symbol_padding_character(self, xkcd_config):
        xkcd_config.update(
            separator_character="NONE",
            padding_type="FIXED",
            padding_character="#",
            padding_characters_before=1,
            padding_characters_after=0,
        )
        assert will_contain_symbol(validate_config(xkcd_config))

    def test_accents_count_as_symbols(self, xkcd_config):
        xkcd_config["separator_character"] = "NONE"
        config = validate_config(xkcd_config)
        assert blind_alphabet_size(config, contains_accents=True) == 26 + 33

    def test_everything(self, full_config):
        assert blind_alphabet_size(validate_config(full_config)) == 26 + 26 + 10 + 33

    @pytest.mark.parametrize("case", ["UPPER", "LOWER", "NONE"])
    def test_single_case_transforms(self, xkcd_config, case):
        xkcd_config.update(separator_character="NONE", case_transform=case)
        assert blind_alphabet_size(validate_config(xkcd_config)) == 26


class TestSeenPermutations:
    def test_words_only(self, xkcd_config):
        assert seen_permutations(validate_config(xkcd_config), 3) == 27

    def test_random_case_doubles_exponent(self, xkcd_config):
        xkcd_config["case_transform"] = "RANDOM"
        assert seen_permutations(validate_config(xkcd_config), 3) == 3**6

    def test_full(self, full_config):
        config = validate_config(full_config)
        assert seen_permutations(config, 11) == 11**3 * 4 * 4 * 10**4

    def test_grows_with_pool_size(self, full_config):
        config = validate_config(full_config)
        assert seen_permutations(config, 12) > seen_permutations(config, 11)


class TestEntropyStats:
    @pytest.fixture
    def weak_config(self, xkcd_config):
        # 12 lower case letters, 56 bits blind and under 5 bits seen
        xkcd_config["separator_character"] = "NONE"
        return validate_config(xkcd_config)

    def test_values(self, xkcd_config, quiet_settings):
        stats = entropy_stats(validate_config(xkcd_config), 3, settings=quiet_settings)
        assert stats.permutations_blind_min == 59**14
        assert stats.permutations_blind_max == 59**14
        assert stats.permutations_blind == 59**14
        assert stats.permutations_seen == 27
        assert stats.entropy_seen == pytest.approx(math.log2(27))
        assert stats.entropy_blind_min == pytest.approx(14 * math.log2(59))
        assert stats.warnings == []

    def test_average_length_rounds_up(self, full_config, quiet_settings):
        full_config["word_length_max"] = 7
        # lengths 24 and 33
        stats = entropy_stats(validate_config(full_config), 11, settings=quiet_settings)
        assert stats.permutations_blind_min == 95**24
        assert stats.permutations_blind_max == 95**33
        assert stats.permutations_blind == 95**29

    def test_blind_entropy_ordering(self, full_config, quiet_settings):
        stats = entropy_stats(validate_config(full_config), 11, settings=quiet_settings)
        assert stats.entropy_blind_min <= stats.entropy_blind <= stats.entropy_blind_max

    def test_low_entropy_warnings(self, weak_config):
        settings = Settings(suppress_entropy_warnings="NONE")
        stats = entropy_stats(weak_config, 3, settings=settings)
        assert len(stats.warnings) == 2
        assert "blind" in stats.warnings[0]
        assert "full knowledge" in stats.warnings[1]

    @pytest.mark.parametrize(
        ("suppress", "expected"),
        [("SEEN", ["blind"]), ("BLIND", ["full knowledge"]), ("ALL", [])],
    )
    def test_warning_suppression(self, weak_config, suppress, expected):
        settings = Settings(suppress_entropy_warnings=suppress)
        stats = entropy_stats(weak_config, 3, settings=settings)
        assert len(stats.warnings) == len(expected)
        for warning, phrase in zip(stats.warnings, expected):
            assert phrase in warning

    def test_thresholds_come_from_settings(self, weak_config):
        settings = Settings(entropy_min_blind=1, entropy_min_seen=1)
        stats = entropy_stats(weak_config, 3, settings=settings)
        assert stats.warnings == []

    def test_default_preset_is_strong_enough(self):
        settings = Settings(suppress_entropy_warnings="NONE")
        stats = entropy_stats(PRESETS["DEFAULT"].config, 5000, settings=settings)
        assert stats.warnings == []


def test_dictionary_stats():
    stats = dictionary_stats(
        source="test words",
        words_total=8,
        pool=["blue", "frog", "king"],
        filter_length_min=4,
        filter_length_max=4,
        contains_accents=False,
    )
    assert stats.words_filtered == 3
    assert stats.percent_available == 38
    assert stats.source == "test words"


@pytest.mark.parametrize(
    ("value", "rendered"),
    [
        (0, "0"),
        (42, "42"),
        (123, "1.23x10^2"),
        (277_000_000_000_000_000, "2.77x10^17"),
        (10**20, "1.00x10^20"),
    ],
)
def test_render_bigint(value, rendered):
    assert render_bigint(value) == rendered


class TestEntropyMonotonicity:
    """Blind entropy never drops as the alphabet or the word length grows."""

    # applied cumulatively on top of a lower case, "x"-separated config
    STEPS = [
        {},
        {"case_transform": "ALTERNATE"},
        {"separator_character": "-"},
        {"padding_digits_after": 2},
    ]

    def _entropy(self, config, settings):
        return entropy_stats(config, 3, settings=settings)

    def test_alphabet_growth(self, xkcd_config, quiet_settings):
        xkcd_config["separator_character"] = "x"
        previous = None
        for overrides in self.STEPS:
            xkcd_config.update(overrides)
            config = validate_config(xkcd_config)
            stats = self._entropy(config, quiet_settings)
            if previous is not None:
                assert stats.entropy_blind_min >= previous.entropy_blind_min
                assert stats.entropy_blind_max >= previous.entropy_blind_max
            previous = stats

    @pytest.mark.parametrize("step", range(1, 3))
    def test_alphabet_growth_at_fixed_length(self, xkcd_config, quiet_settings, step):
        xkcd_config["separator_character"] = "x"
        for overrides in self.STEPS[:step]:
            xkcd_config.update(overrides)
        before = validate_config(xkcd_config)
        xkcd_config.update(self.STEPS[step])
        after = validate_config(xkcd_config)

        assert config_stats(before).length_min == config_stats(after).length_min
        assert blind_alphabet_size(after) > blind_alphabet_size(before)
        assert (
            self._entropy(after, quiet_settings).entropy_blind_min
            > self._entropy(before, quiet_settings).entropy_blind_min
        )

    def test_word_length_max_growth(self, full_config, quiet_settings):
        previous = None
        for word_length_max in range(4, 10):
            full_config["word_length_max"] = word_length_max
            stats = entropy_stats(validate_config(full_config), 11, settings=quiet_settings)
            if previous is not None:
                assert stats.entropy_blind_min >= previous.entropy_blind_min
                assert stats.entropy_blind >= previous.entropy_blind
                assert stats.entropy_blind_max >= previous.entropy_blind_max
            previous = stats
