"""Length, random-draw and entropy statistics for password configs.

Blind entropy models an attacker brute forcing a generic alphabet with no
knowledge of how the password was built. Seen entropy models an attacker who
holds the word pool and the config. Permutation counts are exact Python ints.
"""

from collections.abc import Sequence
import math
import re

from loguru import logger

from xkpass.config import Settings, settings as default_settings
from xkpass.entities import (
    MIXED_CASE_TRANSFORMS,
    CaseTransform,
    ConfigStats,
    DictionaryStats,
    EntropyStats,
    PaddingType,
    PasswordConfig,
    SpecialValue,
)


# letters, digits, and the symbol count used by Password Haystacks
LETTERS_PER_CASE = 26
DIGITS = 10
SYMBOLS = 33

_NON_ALPHANUMERIC = re.compile(r"[^0-9a-zA-Z]")


def random_draws_required(config: PasswordConfig) -> int:
    draws = config.num_words
    if config.case_transform == CaseTransform.RANDOM:
        draws += config.num_words
    if config.separator_character == SpecialValue.RANDOM:
        draws += 1
    if (
        config.padding_type != PaddingType.NONE
        and config.padding_character == SpecialValue.RANDOM
    ):
        draws += 1
    draws += config.padding_digits_before
    draws += config.padding_digits_after
    return draws


def _length_bounds(config: PasswordConfig) -> tuple[int, int]:
    if config.padding_type == PaddingType.ADAPTIVE:
        assert config.pad_to_length is not None, "ADAPTIVE needs pad_to_length"
        return config.pad_to_length, config.pad_to_length

    has_separator = config.separator_character != SpecialValue.NONE
    base = 0
    if config.padding_type == PaddingType.FIXED:
        base += config.padding_characters_before or 0
        base += config.padding_characters_after or 0
    for digits in (config.padding_digits_before, config.padding_digits_after):
        if digits > 0:
            base += digits + (1 if has_separator else 0)
    if has_separator:
        base += config.num_words - 1

    return (
        base + config.num_words * config.word_length_min,
        base + config.num_words * config.word_length_max,
    )


def config_stats(config: PasswordConfig) -> ConfigStats:
    length_min, length_max = _length_bounds(config)

    warnings: list[str] = []
    if config.padding_type != PaddingType.ADAPTIVE and any(
        len(replacement) > 1
        for _char, replacement in config.character_substitutions or ()
    ):
        message = (
            "Maximum length calculation is unreliable because the config "
            "contains a character substitution longer than 1 character"
        )
        logger.warning(message)
        warnings.append(message)

    return ConfigStats(
        length_min=length_min,
        length_max=length_max,
        random_draws_required=random_draws_required(config),
        warnings=warnings,
    )


def _has_symbol(characters: Sequence[str] | str | None) -> bool:
    if not characters:
        return False
    return bool(_NON_ALPHANUMERIC.search("".join(characters)))


def will_contain_symbol(config: PasswordConfig) -> bool:
    """True when the separator or padding is guaranteed to be a symbol."""
    if config.padding_type != PaddingType.NONE:
        match config.padding_character:
            case SpecialValue.RANDOM:
                if _has_symbol(config.resolved_padding_alphabet):
                    return True
            case SpecialValue.SEPARATOR | SpecialValue.NONE | None:
                pass
            case padding_character:
                if _has_symbol(padding_character):
                    return True

    match config.separator_character:
        case SpecialValue.NONE:
            return False
        case SpecialValue.RANDOM:
            return _has_symbol(config.resolved_separator_alphabet)
        case separator:
            return _has_symbol(separator)


def blind_alphabet_size(config: PasswordConfig, contains_accents: bool = False) -> int:
    size = LETTERS_PER_CASE
    if config.case_transform in MIXED_CASE_TRANSFORMS:
        size += LETTERS_PER_CASE
    if config.padding_digits_before > 0 or config.padding_digits_after > 0:
        size += DIGITS
    if will_contain_symbol(config) or contains_accents:
        size += SYMBOLS
    return size


def seen_permutations(config: PasswordConfig, pool_size: int) -> int:
    word_exponent = config.num_words
    if config.case_transform == CaseTransform.RANDOM:
        word_exponent *= 2
    permutations = pool_size**word_exponent

    if config.separator_character == SpecialValue.RANDOM:
        alphabet = config.resolved_separator_alphabet
        assert alphabet, "RANDOM separator requires an alphabet"
        permutations *= len(alphabet)
    if (
        config.padding_type != PaddingType.NONE
        and config.padding_character == SpecialValue.RANDOM
    ):
        alphabet = config.resolved_padding_alphabet
        assert alphabet, "RANDOM padding character requires an alphabet"
        permutations *= len(alphabet)

    permutations *= DIGITS ** (
        config.padding_digits_before + config.padding_digits_after
    )
    return permutations


def _bits(permutations: int) -> float:
    return math.log2(permutations) if permutations > 0 else 0.0


def entropy_stats(
    config: PasswordConfig,
    pool_size: int,
    contains_accents: bool = False,
    settings: Settings | None = None,
) -> EntropyStats:
    settings = settings or default_settings
    length_min, length_max = _length_bounds(config)
    # half-up rounding of the mean length
    length_avg = (length_min + length_max + 1) // 2
    alphabet_size = blind_alphabet_size(config, contains_accents)

    permutations_blind_min = alphabet_size**length_min
    permutations_blind_max = alphabet_size**length_max
    permutations_blind = alphabet_size**length_avg
    permutations_seen = seen_permutations(config, pool_size)

    entropy_blind_min = _bits(permutations_blind_min)
    entropy_seen = _bits(permutations_seen)
    logger.debug(
        "Entropy: blind_min={:.2f} seen={:.2f} (alphabet={}, pool={})",
        entropy_blind_min,
        entropy_seen,
        alphabet_size,
        pool_size,
    )

    warnings: list[str] = []
    if settings.warn_blind and entropy_blind_min < settings.entropy_min_blind:
        warnings.append(
            "Config and dictionary combination results in low minimum entropy "
            f"for blind attacks ({entropy_blind_min:.2f} bits, warning "
            f"threshold is {settings.entropy_min_blind})"
        )
    if settings.warn_seen and entropy_seen < settings.entropy_min_seen:
        warnings.append(
            "Config and dictionary combination results in low entropy for "
            f"attacks assuming full knowledge ({entropy_seen:.2f} bits, warning "
            f"threshold is {settings.entropy_min_seen})"
        )
    for message in warnings:
        logger.warning(message)

    return EntropyStats(
        permutations_blind_min=permutations_blind_min,
        permutations_blind_max=permutations_blind_max,
        permutations_blind=permutations_blind,
        permutations_seen=permutations_seen,
        entropy_blind_min=entropy_blind_min,
        entropy_blind_max=_bits(permutations_blind_max),
        entropy_blind=_bits(permutations_blind),
        entropy_seen=entropy_seen,
        warnings=warnings,
    )


def dictionary_stats(
    source: str,
    words_total: int,
    pool: Sequence[str],
    filter_length_min: int,
    filter_length_max: int,
    contains_accents: bool,
) -> DictionaryStats:
    percent = round(len(pool) / words_total * 100) if words_total else 0
    return DictionaryStats(
        source=source,
        words_total=words_total,
        words_filtered=len(pool),
        percent_available=percent,
        filter_length_min=filter_length_min,
        filter_length_max=filter_length_max,
        contains_accents=contains_accents,
    )


def render_bigint(value: int) -> str:
    """Render a large count as the three leading digits in scientific form."""
    digits = str(value)
    if len(digits) < 3:
        return digits
    return f"{digits[0]}.{digits[1:3]}x10^{len(digits) - 1}"
