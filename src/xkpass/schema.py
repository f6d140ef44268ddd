"""Configuration schema and validation.

Every recognised configuration key is described by a `KeyDescriptor` in the
read-only `KEY_DESCRIPTORS` table. Per-key checks are driven by the
descriptor's `PredicateKind` through a single dispatcher, and the cross-key
rules are checked afterwards on the whole config.
"""

from collections.abc import Mapping, Sequence
import copy
from types import MappingProxyType
from typing import Any

from loguru import logger

from xkpass.entities import (
    CaseTransform,
    CheckWithError,
    ConfigError,
    KeyDescriptor,
    MergeResult,
    PaddingType,
    PasswordConfig,
    PredicateKind,
    SpecialValue,
    ValueShape,
)


_ALPHABET_DESCRIPTION = "A sequence containing at least 2 single-character strings"

KEY_DESCRIPTORS: Mapping[str, KeyDescriptor] = MappingProxyType(
    {
        "allow_accents": KeyDescriptor(
            required=False,
            shape=ValueShape.SCALAR,
            predicate=PredicateKind.ANY,
            description="Any truthy or falsy scalar value",
        ),
        "symbol_alphabet": KeyDescriptor(
            required=False,
            shape=ValueShape.SEQUENCE,
            predicate=PredicateKind.CHAR_ALPHABET,
            description=_ALPHABET_DESCRIPTION,
        ),
        "separator_alphabet": KeyDescriptor(
            required=False,
            shape=ValueShape.SEQUENCE,
            predicate=PredicateKind.CHAR_ALPHABET,
            description=_ALPHABET_DESCRIPTION,
        ),
        "padding_alphabet": KeyDescriptor(
            required=False,
            shape=ValueShape.SEQUENCE,
            predicate=PredicateKind.CHAR_ALPHABET,
            description=_ALPHABET_DESCRIPTION,
        ),
        "word_length_min": KeyDescriptor(
            required=True,
            shape=ValueShape.SCALAR,
            predicate=PredicateKind.INT_AT_LEAST,
            bound=4,
            description="An integer greater than three",
        ),
        "word_length_max": KeyDescriptor(
            required=True,
            shape=ValueShape.SCALAR,
            predicate=PredicateKind.INT_AT_LEAST,
            bound=4,
            description="An integer greater than three",
        ),
        "num_words": KeyDescriptor(
            required=True,
            shape=ValueShape.SCALAR,
            predicate=PredicateKind.INT_AT_LEAST,
            bound=2,
            description="An integer greater than or equal to two",
        ),
        "separator_character": KeyDescriptor(
            required=True,
            shape=ValueShape.SCALAR,
            predicate=PredicateKind.CHAR_OR_ONE_OF,
            choices=(SpecialValue.NONE, SpecialValue.RANDOM),
            description="A single character, or the special value 'NONE' or 'RANDOM'",
        ),
        "padding_digits_before": KeyDescriptor(
            required=True,
            shape=ValueShape.SCALAR,
            predicate=PredicateKind.INT_AT_LEAST,
            bound=0,
            description="An integer greater than or equal to zero",
        ),
        "padding_digits_after": KeyDescriptor(
            required=True,
            shape=ValueShape.SCALAR,
            predicate=PredicateKind.INT_AT_LEAST,
            bound=0,
            description="An integer greater than or equal to zero",
        ),
        "padding_type": KeyDescriptor(
            required=True,
            shape=ValueShape.SCALAR,
            predicate=PredicateKind.ONE_OF,
            choices=tuple(PaddingType),
            description="One of the values 'NONE', 'FIXED', or 'ADAPTIVE'",
        ),
        "padding_characters_before": KeyDescriptor(
            required=False,
            shape=ValueShape.SCALAR,
            predicate=PredicateKind.INT_AT_LEAST,
            bound=0,
            description="An integer greater than or equal to zero",
        ),
        "padding_characters_after": KeyDescriptor(
            required=False,
            shape=ValueShape.SCALAR,
            predicate=PredicateKind.INT_AT_LEAST,
            bound=0,
            description="An integer greater than or equal to zero",
        ),
        "pad_to_length": KeyDescriptor(
            required=False,
            shape=ValueShape.SCALAR,
            predicate=PredicateKind.INT_AT_LEAST,
            bound=12,
            description="An integer greater than or equal to twelve",
        ),
        "padding_character": KeyDescriptor(
            required=False,
            shape=ValueShape.SCALAR,
            predicate=PredicateKind.CHAR_OR_ONE_OF,
            choices=tuple(SpecialValue),
            description=(
                "A single character or one of the special values "
                "'NONE', 'RANDOM', or 'SEPARATOR'"
            ),
        ),
        "case_transform": KeyDescriptor(
            required=False,
            shape=ValueShape.SCALAR,
            predicate=PredicateKind.ONE_OF,
            choices=tuple(CaseTransform),
            description=(
                "One of the values 'NONE', 'UPPER', 'LOWER', 'CAPITALISE', "
                "'INVERT', 'ALTERNATE', or 'RANDOM'"
            ),
        ),
        "character_substitutions": KeyDescriptor(
            required=False,
            shape=ValueShape.MAPPING,
            predicate=PredicateKind.CHAR_MAPPING,
            description=(
                "A mapping of single word characters to non-empty replacement "
                "strings - can be empty"
            ),
        ),
    }
)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_char(value: Any) -> bool:
    return isinstance(value, str) and len(value) == 1


def _has_shape(value: Any, shape: ValueShape) -> bool:
    match shape:
        case ValueShape.SCALAR:
            return not isinstance(value, (list, tuple, set, frozenset, Mapping))
        case ValueShape.SEQUENCE:
            return isinstance(value, Sequence) and not isinstance(value, str)
        case ValueShape.MAPPING:
            return isinstance(value, Mapping)
        case _:
            raise ValueError(f"Unknown ValueShape: {shape}")


def _check_predicate(descriptor: KeyDescriptor, value: Any) -> bool:
    match descriptor.predicate:
        case PredicateKind.ANY:
            return True
        case PredicateKind.INT_AT_LEAST:
            assert descriptor.bound is not None, "INT_AT_LEAST needs a bound"
            return _is_int(value) and value >= descriptor.bound
        case PredicateKind.ONE_OF:
            return isinstance(value, str) and value in descriptor.choices
        case PredicateKind.CHAR_OR_ONE_OF:
            return _is_char(value) or (
                isinstance(value, str) and value in descriptor.choices
            )
        case PredicateKind.CHAR_ALPHABET:
            return len(value) >= 2 and all(_is_char(symbol) for symbol in value)
        case PredicateKind.CHAR_MAPPING:
            for char, replacement in value.items():
                if not _is_char(char) or not (char.isalnum() or char == "_"):
                    return False
                if not isinstance(replacement, str) or not replacement:
                    return False
                if any(c.isspace() for c in replacement):
                    return False
            return True
        case _:
            raise ValueError(f"Unknown PredicateKind: {descriptor.predicate}")


def check_key(key: str, value: Any) -> CheckWithError:
    descriptor = KEY_DESCRIPTORS.get(key)
    if descriptor is None:
        return CheckWithError(False, f"Unrecognised key={key}")
    if not _has_shape(value, descriptor.shape):
        return CheckWithError(
            False, f"Invalid type for key={key}. Expected: {descriptor.description}"
        )
    if not _check_predicate(descriptor, value):
        return CheckWithError(
            False, f"Invalid value for key={key}. Expected: {descriptor.description}"
        )
    return CheckWithError(True, None)


def _as_mapping(config: Mapping[str, Any] | PasswordConfig) -> Mapping[str, Any]:
    if isinstance(config, PasswordConfig):
        return config.as_dict()
    if not isinstance(config, Mapping):
        raise ConfigError(
            f"A config must be a mapping, got {type(config).__name__}"
        )
    return config


def _cross_rule_error(message: str, key: str) -> ConfigError:
    return ConfigError(message, key=key, expected=KEY_DESCRIPTORS[key].description)


def _check_cross_key_rules(values: Mapping[str, Any]) -> None:
    separator = values["separator_character"]
    padding_type = values["padding_type"]
    padding_character = values.get("padding_character")

    if separator == SpecialValue.RANDOM:
        if (
            values.get("separator_alphabet") is None
            and values.get("symbol_alphabet") is None
        ):
            raise _cross_rule_error(
                "separator_character='RANDOM' requires either a "
                "symbol_alphabet or separator_alphabet be specified",
                "separator_character",
            )

    if padding_type != PaddingType.NONE:
        if padding_character is None:
            raise _cross_rule_error(
                f"padding_type='{padding_type}' requires padding_character be set",
                "padding_character",
            )
        if padding_character == SpecialValue.RANDOM:
            if (
                values.get("padding_alphabet") is None
                and values.get("symbol_alphabet") is None
            ):
                raise _cross_rule_error(
                    "padding_character='RANDOM' requires either a "
                    "symbol_alphabet or padding_alphabet be specified",
                    "padding_character",
                )
        if padding_character == SpecialValue.NONE:
            raise _cross_rule_error(
                f"padding_type='{padding_type}' cannot pad with "
                "padding_character='NONE' (xkpass extends the padding rules "
                "so padding always resolves to one character; use "
                "padding_type='NONE' instead)",
                "padding_character",
            )
        if (
            padding_character == SpecialValue.SEPARATOR
            and separator == SpecialValue.NONE
        ):
            raise _cross_rule_error(
                "padding_character='SEPARATOR' requires a separator, "
                "but separator_character='NONE' (xkpass extends the padding "
                "rules so padding always resolves to one character)",
                "padding_character",
            )

    if padding_type == PaddingType.FIXED:
        before = values.get("padding_characters_before")
        after = values.get("padding_characters_after")
        if before is None or after is None:
            raise _cross_rule_error(
                "padding_type='FIXED' requires padding_characters_before "
                "& padding_characters_after be set",
                "padding_type",
            )
        if before + after <= 0:
            raise _cross_rule_error(
                "padding_type='FIXED' requires at least one of "
                "padding_characters_before & padding_characters_after be "
                "greater than zero (to use no padding use padding_type='NONE')",
                "padding_type",
            )

    if padding_type == PaddingType.ADAPTIVE and values.get("pad_to_length") is None:
        raise _cross_rule_error(
            "padding_type='ADAPTIVE' requires pad_to_length be set",
            "pad_to_length",
        )


def _normalise(key: str, value: Any) -> Any:
    descriptor = KEY_DESCRIPTORS[key]
    if descriptor.predicate is PredicateKind.ANY:
        return bool(value)
    match descriptor.shape:
        case ValueShape.SEQUENCE:
            return tuple(value)
        case ValueShape.MAPPING:
            return tuple(value.items())
        case _:
            return value


def validate_config(config: Mapping[str, Any] | PasswordConfig) -> PasswordConfig:
    """Validate a config and return it as a trusted `PasswordConfig`.

    Raises `ConfigError` naming the first offending key. Unrecognised keys
    are ignored.
    """
    raw = _as_mapping(config)
    keys = sorted(KEY_DESCRIPTORS)

    for key in keys:
        descriptor = KEY_DESCRIPTORS[key]
        if descriptor.required and raw.get(key) is None:
            raise ConfigError(
                f"Required key={key} not defined",
                key=key,
                expected=descriptor.description,
            )

    values: dict[str, Any] = {}
    for key in keys:
        value = raw.get(key)
        if value is None:
            continue
        check = check_key(key, value)
        if not check.result:
            raise ConfigError(
                check.error or f"Invalid value for key={key}",
                key=key,
                expected=KEY_DESCRIPTORS[key].description,
            )
        values[key] = _normalise(key, value)

    _check_cross_key_rules(values)

    return PasswordConfig(**values)


def is_valid_config(config: Mapping[str, Any] | PasswordConfig) -> bool:
    try:
        validate_config(config)
    except ConfigError as exc:
        logger.debug("Config failed validation: {}", exc)
        return False
    return True


def clone_config(config: Mapping[str, Any] | PasswordConfig) -> PasswordConfig:
    """Copy the recognised keys of a valid config; everything else is dropped."""
    raw = _as_mapping(config)
    clone = {
        key: copy.deepcopy(raw[key])
        for key in KEY_DESCRIPTORS
        if raw.get(key) is not None
    }
    return validate_config(clone)


def merge_overrides(
    base: Mapping[str, Any] | PasswordConfig, overrides: Mapping[str, Any]
) -> MergeResult:
    """Apply per-key overrides on top of a base config.

    Unrecognised keys and values that fail their key's check are skipped with
    a warning. The merged result must still pass full validation, otherwise a
    `ConfigError` is raised.
    """
    merged = clone_config(base).as_dict()
    warnings: list[str] = []

    for key, value in overrides.items():
        if key not in KEY_DESCRIPTORS:
            message = f"Skipping unrecognised key={key}"
            logger.warning(message)
            warnings.append(message)
            continue

        check = check_key(key, value)
        if not check.result:
            message = (
                f"Skipping key={key} because of invalid value. "
                f"Expected: {KEY_DESCRIPTORS[key].description}"
            )
            logger.warning(message)
            warnings.append(message)
            continue

        merged[key] = copy.deepcopy(value)

    try:
        config = validate_config(merged)
    except ConfigError as exc:
        raise ConfigError(
            f"The base config combined with the specified overrides is invalid: {exc}",
            key=exc.key,
            expected=exc.expected,
        ) from exc

    return MergeResult(config=config, warnings=warnings)
