"""Password assembly pipeline.

Random values are consumed in a fixed order: one per word, one per word for
RANDOM case, one for a RANDOM separator, one for a RANDOM padding character,
then one per padding digit (before, then after). `stats.random_draws_required`
mirrors this order exactly.
"""

from collections.abc import Iterable, Mapping, Sequence

from loguru import logger

from xkpass.entities import CaseTransform, PaddingType, PasswordConfig, SpecialValue
from xkpass.rng import RandomCache


def select_words(pool: Sequence[str], count: int, cache: RandomCache) -> list[str]:
    # with replacement, repeats are allowed
    return [pool[cache.next_int(len(pool))] for _ in range(count)]


def _capitalise(word: str) -> str:
    return word[:1].upper() + word[1:].lower()


def _invert(word: str) -> str:
    return word[:1].lower() + word[1:].upper()


def transform_case(
    words: Sequence[str], case_transform: CaseTransform, cache: RandomCache
) -> list[str]:
    match case_transform:
        case CaseTransform.NONE:
            return list(words)
        case CaseTransform.UPPER:
            return [word.upper() for word in words]
        case CaseTransform.LOWER:
            return [word.lower() for word in words]
        case CaseTransform.CAPITALISE:
            return [_capitalise(word) for word in words]
        case CaseTransform.INVERT:
            return [_invert(word) for word in words]
        case CaseTransform.ALTERNATE:
            return [
                word.lower() if idx % 2 == 0 else word.upper()
                for idx, word in enumerate(words)
            ]
        case CaseTransform.RANDOM:
            return [
                word.upper() if cache.next_int(2) == 0 else word.lower()
                for word in words
            ]
        case _:
            raise ValueError(f"Unknown CaseTransform: {case_transform}")


def substitute_characters(
    words: Sequence[str],
    substitutions: Mapping[str, str] | Iterable[tuple[str, str]] | None,
) -> list[str]:
    """Apply each substitution to every word, one entry at a time.

    Entries run in insertion order over the output of the earlier ones, so
    `{"a": "b", "b": "c"}` turns "ab" into "cc".
    """
    if not substitutions:
        return list(words)
    if isinstance(substitutions, Mapping):
        substitutions = substitutions.items()
    pairs = list(substitutions)

    result = []
    for word in words:
        for char, replacement in pairs:
            word = word.replace(char, replacement)
        result.append(word)
    return result


def _pick(alphabet: Sequence[str], cache: RandomCache) -> str:
    return alphabet[cache.next_int(len(alphabet))]


def resolve_separator(config: PasswordConfig, cache: RandomCache) -> str:
    separator = config.separator_character
    if separator == SpecialValue.NONE:
        return ""
    if separator == SpecialValue.RANDOM:
        alphabet = config.resolved_separator_alphabet
        assert alphabet, "RANDOM separator requires an alphabet"
        return _pick(alphabet, cache)
    return separator


def resolve_padding_character(
    config: PasswordConfig, separator: str, cache: RandomCache
) -> str:
    if config.padding_type == PaddingType.NONE:
        return ""
    padding_character = config.padding_character
    if padding_character is None or padding_character == SpecialValue.NONE:
        return ""
    if padding_character == SpecialValue.SEPARATOR:
        return separator
    if padding_character == SpecialValue.RANDOM:
        alphabet = config.resolved_padding_alphabet
        assert alphabet, "RANDOM padding character requires an alphabet"
        return _pick(alphabet, cache)
    return padding_character


def random_digits(count: int, cache: RandomCache) -> str:
    return "".join(str(cache.next_int(10)) for _ in range(count))


def add_digit_groups(
    password: str, separator: str, before: int, after: int, cache: RandomCache
) -> str:
    if before > 0:
        password = random_digits(before, cache) + separator + password
    if after > 0:
        password = password + separator + random_digits(after, cache)
    return password


def apply_fixed_padding(password: str, pad_char: str, before: int, after: int) -> str:
    return pad_char * before + password + pad_char * after


def apply_adaptive_padding(password: str, pad_char: str, length: int) -> str:
    """Pad or truncate `password` to exactly `length` characters.

    Truncation is lossy and may cut through a word, a digit group or a
    separator.
    """
    if len(password) > length:
        return password[:length]
    if len(password) < length:
        if not pad_char:
            raise ValueError("adaptive padding needs a padding character")
        return password + pad_char * (length - len(password))
    return password


def apply_padding(password: str, config: PasswordConfig, pad_char: str) -> str:
    match config.padding_type:
        case PaddingType.NONE:
            return password
        case PaddingType.FIXED:
            return apply_fixed_padding(
                password,
                pad_char,
                config.padding_characters_before or 0,
                config.padding_characters_after or 0,
            )
        case PaddingType.ADAPTIVE:
            assert config.pad_to_length is not None, "ADAPTIVE needs pad_to_length"
            return apply_adaptive_padding(password, pad_char, config.pad_to_length)
        case _:
            raise ValueError(f"Unknown PaddingType: {config.padding_type}")


def assemble_password(
    config: PasswordConfig, pool: Sequence[str], cache: RandomCache
) -> str:
    words = select_words(pool, config.num_words, cache)
    logger.debug("Got random words={}", words)
    words = transform_case(words, config.case_transform, cache)
    words = substitute_characters(words, config.character_substitutions)

    separator = resolve_separator(config, cache)
    pad_char = resolve_padding_character(config, separator, cache)
    logger.debug("Got separator={!r} pad_char={!r}", separator, pad_char)

    password = separator.join(words)
    password = add_digit_groups(
        password,
        separator,
        config.padding_digits_before,
        config.padding_digits_after,
        cache,
    )
    return apply_padding(password, config, pad_char)
