from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from xkpass.entities import ConfigError, MergeResult, Preset
from xkpass.schema import clone_config, merge_overrides, validate_config


_STANDARD_PADDING_ALPHABET = list("!@$%^&*+=:|~?")
_STANDARD_SEPARATOR_ALPHABET = list("-+=.*_|~,")

_PRESET_DEFINITIONS: dict[str, tuple[str, dict[str, Any]]] = {
    "DEFAULT": (
        "The default preset resulting in a password consisting of 3 random "
        "words of between 4 and 8 letters with alternating case separated by "
        "a random character, with two random digits before and after, and "
        "padded with two random characters front and back",
        {
            "symbol_alphabet": list("!@$%^&*-_+=:|~?/.;"),
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
        },
    ),
    "WEB32": (
        "A preset for websites that allow passwords up to 32 characters long.",
        {
            "padding_alphabet": _STANDARD_PADDING_ALPHABET,
            "separator_alphabet": _STANDARD_SEPARATOR_ALPHABET,
            "word_length_min": 4,
            "word_length_max": 5,
            "num_words": 4,
            "separator_character": "RANDOM",
            "padding_digits_before": 2,
            "padding_digits_after": 2,
            "padding_type": "FIXED",
            "padding_character": "RANDOM",
            "padding_characters_before": 1,
            "padding_characters_after": 1,
            "case_transform": "ALTERNATE",
            "allow_accents": False,
        },
    ),
    "WEB16": (
        "A preset for websites that insist passwords not be longer than 16 "
        "characters.",
        {
            "padding_alphabet": _STANDARD_PADDING_ALPHABET,
            "separator_alphabet": _STANDARD_SEPARATOR_ALPHABET,
            "word_length_min": 4,
            "word_length_max": 4,
            "num_words": 3,
            "separator_character": "RANDOM",
            "padding_digits_before": 0,
            "padding_digits_after": 0,
            "padding_type": "FIXED",
            "padding_character": "RANDOM",
            "padding_characters_before": 1,
            "padding_characters_after": 1,
            "case_transform": "RANDOM",
            "allow_accents": False,
        },
    ),
    "WIFI": (
        "A preset for generating 63 character long WPA2 keys (most routers "
        "allow 64 characters, but some only 63, hence the odd length).",
        {
            "padding_alphabet": _STANDARD_PADDING_ALPHABET,
            "separator_alphabet": _STANDARD_SEPARATOR_ALPHABET,
            "word_length_min": 4,
            "word_length_max": 8,
            "num_words": 6,
            "separator_character": "RANDOM",
            "padding_digits_before": 4,
            "padding_digits_after": 4,
            "padding_type": "ADAPTIVE",
            "padding_character": "RANDOM",
            "pad_to_length": 63,
            "case_transform": "RANDOM",
            "allow_accents": False,
        },
    ),
    "APPLEID": (
        "A preset respecting the many prerequisites Apple places on Apple ID "
        "passwords. The preset also limits itself to symbols found on the iOS "
        "letter and number keyboards (i.e. not the awkward to reach symbol "
        "keyboard)",
        {
            "padding_alphabet": list("!?@&"),
            "separator_alphabet": list("-:.,"),
            "word_length_min": 5,
            "word_length_max": 7,
            "num_words": 3,
            "separator_character": "RANDOM",
            "padding_digits_before": 2,
            "padding_digits_after": 2,
            "padding_type": "FIXED",
            "padding_character": "RANDOM",
            "padding_characters_before": 1,
            "padding_characters_after": 1,
            "case_transform": "RANDOM",
            "allow_accents": False,
        },
    ),
    "NTLM": (
        "A preset for 14 character Windows NTLMv1 password. WARNING - only use "
        "this preset if you have to, it is too short to be acceptably secure "
        "and will always generate entropy warnings for the case where the "
        "config and dictionary are known.",
        {
            "padding_alphabet": _STANDARD_PADDING_ALPHABET,
            "separator_alphabet": _STANDARD_SEPARATOR_ALPHABET,
            "word_length_min": 5,
            "word_length_max": 5,
            "num_words": 2,
            "separator_character": "RANDOM",
            "padding_digits_before": 1,
            "padding_digits_after": 0,
            "padding_type": "FIXED",
            "padding_character": "RANDOM",
            "padding_characters_before": 0,
            "padding_characters_after": 1,
            "case_transform": "INVERT",
            "allow_accents": False,
        },
    ),
    "SECURITYQ": (
        "A preset for creating fake answers to security questions.",
        {
            "word_length_min": 4,
            "word_length_max": 8,
            "num_words": 6,
            "separator_character": " ",
            "padding_digits_before": 0,
            "padding_digits_after": 0,
            "padding_type": "FIXED",
            "padding_character": "RANDOM",
            "padding_alphabet": list(".!?"),
            "padding_characters_before": 0,
            "padding_characters_after": 1,
            "case_transform": "NONE",
            "allow_accents": False,
        },
    ),
    "XKCD": (
        "A preset for generating passwords similar to the example in the "
        "original XKCD cartoon, but with a dash to separate the four random "
        "words, and the capitalisation randomised to add sufficient entropy "
        "to avoid warnings.",
        {
            "word_length_min": 4,
            "word_length_max": 8,
            "num_words": 4,
            "separator_character": "-",
            "padding_digits_before": 0,
            "padding_digits_after": 0,
            "padding_type": "NONE",
            "case_transform": "RANDOM",
            "allow_accents": False,
        },
    ),
}


def _build_registry() -> Mapping[str, Preset]:
    return MappingProxyType(
        {
            name: Preset(
                name=name, description=description, config=validate_config(config)
            )
            for name, (description, config) in _PRESET_DEFINITIONS.items()
        }
    )


PRESETS: Mapping[str, Preset] = _build_registry()


def get_preset(name: str) -> Preset:
    preset = PRESETS.get(name.upper())
    if preset is None:
        raise ConfigError(f"preset '{name}' does not exist")
    return preset


def defined_presets() -> list[str]:
    return sorted(PRESETS)


def preset_description(name: str = "DEFAULT") -> str:
    return get_preset(name).description


def preset_config(
    name: str = "DEFAULT", overrides: Mapping[str, Any] | None = None
) -> MergeResult:
    """Return a copy of a preset's config with any overrides applied.

    Invalid or unrecognised overrides are skipped and reported in the
    returned warnings; a combination that breaks a cross-key rule raises
    `ConfigError`.
    """
    config = clone_config(get_preset(name).config)
    if not overrides:
        return MergeResult(config=config, warnings=[])
    return merge_overrides(config, overrides)


def default_config(overrides: Mapping[str, Any] | None = None) -> MergeResult:
    return preset_config("DEFAULT", overrides)
