import pytest

from xkpass.config import Settings
from xkpass.words import ListWordSource


WORDS = [
    "blue",
    "frog",
    "king",
    "apple",
    "banana",
    "cherry",
    "dragon",
    "elephant",
    "fortunes",
    "gigantic",
    "hospital",
    "cat",
    "ox",
    "extraordinary",
]


@pytest.fixture
def quiet_settings() -> Settings:
    return Settings(suppress_entropy_warnings="ALL")


@pytest.fixture
def word_source() -> ListWordSource:
    return ListWordSource(WORDS, description="test words")


@pytest.fixture
def xkcd_config() -> dict:
    return {
        "num_words": 3,
        "word_length_min": 4,
        "word_length_max": 4,
        "separator_character": "-",
        "padding_digits_before": 0,
        "padding_digits_after": 0,
        "padding_type": "NONE",
        "case_transform": "NONE",
    }


@pytest.fixture
def full_config() -> dict:
    return {
        "symbol_alphabet": ["!", "@", "$", "%"],
        "word_length_min": 4,
        "word_length_max": 8,
        "num_words": 3,
        "separator_character": "RANDOM",
        "padding_digits_before": 2,
        "padding_digits_after": 2,
        "padding_type": "FIXED",
        "padding_character": "RANDOM",
        "padding_characters_before": 2,
        "padding_characters_after": 2,
        "case_transform": "ALTERNATE",
        "allow_accents": False,
    }
