from enum import StrEnum
from typing import Any, NamedTuple

from pydantic import BaseModel, ConfigDict, Field


class XKPassError(Exception):
    "Base class for all errors raised by xkpass."


class ConfigError(XKPassError):
    """Raised when a configuration fails validation.

    `key` names the offending key (None for cross-key or preset lookup
    failures that are not tied to a single key) and `expected` carries the
    key's human-readable constraint description.
    """

    def __init__(
        self, message: str, key: str | None = None, expected: str | None = None
    ) -> None:
        super().__init__(message)
        self.key = key
        self.expected = expected


class DictionaryError(XKPassError):
    "Raised when no usable words remain after filtering a word list."


class RandomSourceError(XKPassError):
    "Raised when a random number source returns an unusable batch."


class CheckWithError(NamedTuple):
    result: bool
    error: str | None


class SpecialValue(StrEnum):
    NONE = "NONE"
    RANDOM = "RANDOM"
    SEPARATOR = "SEPARATOR"


class PaddingType(StrEnum):
    NONE = "NONE"
    FIXED = "FIXED"
    ADAPTIVE = "ADAPTIVE"


class CaseTransform(StrEnum):
    NONE = "NONE"
    UPPER = "UPPER"
    LOWER = "LOWER"
    CAPITALISE = "CAPITALISE"
    INVERT = "INVERT"
    ALTERNATE = "ALTERNATE"
    RANDOM = "RANDOM"


# case transforms that always produce both upper and lower case letters
MIXED_CASE_TRANSFORMS: frozenset[CaseTransform] = frozenset(
    {
        CaseTransform.ALTERNATE,
        CaseTransform.CAPITALISE,
        CaseTransform.INVERT,
        CaseTransform.RANDOM,
    }
)


class ValueShape(StrEnum):
    SCALAR = "scalar"
    SEQUENCE = "sequence"
    MAPPING = "mapping"


class PredicateKind(StrEnum):
    ANY = "any"
    INT_AT_LEAST = "int_at_least"
    ONE_OF = "one_of"
    CHAR_OR_ONE_OF = "char_or_one_of"
    CHAR_ALPHABET = "char_alphabet"
    CHAR_MAPPING = "char_mapping"


class KeyDescriptor(NamedTuple):
    required: bool
    shape: ValueShape
    predicate: PredicateKind
    description: str
    bound: int | None = None
    choices: tuple[str, ...] = ()


class PasswordConfig(BaseModel):
    """A validated password configuration.

    Instances are only built by `xkpass.schema.validate_config`, which checks
    every key and the cross-key rules first, so holding one means the config
    is safe to hand to the assembler and the statistics engine.
    """

    model_config = ConfigDict(frozen=True)

    word_length_min: int
    word_length_max: int
    num_words: int
    separator_character: str
    padding_digits_before: int
    padding_digits_after: int
    padding_type: PaddingType

    allow_accents: bool = False
    case_transform: CaseTransform = CaseTransform.NONE
    symbol_alphabet: tuple[str, ...] | None = None
    separator_alphabet: tuple[str, ...] | None = None
    padding_alphabet: tuple[str, ...] | None = None
    padding_characters_before: int | None = None
    padding_characters_after: int | None = None
    pad_to_length: int | None = None
    padding_character: str | None = None
    # (character, replacement) pairs in insertion order
    character_substitutions: tuple[tuple[str, str], ...] | None = None

    def as_dict(self) -> dict[str, Any]:
        values = self.model_dump(exclude_none=True)
        if self.character_substitutions is not None:
            values["character_substitutions"] = dict(self.character_substitutions)
        return values

    @property
    def resolved_separator_alphabet(self) -> tuple[str, ...] | None:
        return self.separator_alphabet or self.symbol_alphabet

    @property
    def resolved_padding_alphabet(self) -> tuple[str, ...] | None:
        return self.padding_alphabet or self.symbol_alphabet


class MergeResult(NamedTuple):
    config: PasswordConfig
    warnings: list[str]


class Preset(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    config: PasswordConfig


class ConfigStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    length_min: int
    length_max: int
    random_draws_required: int
    warnings: list[str] = Field(default_factory=list)


class EntropyStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    permutations_blind_min: int
    permutations_blind_max: int
    permutations_blind: int = Field(
        description="Permutations for a password of average length."
    )
    permutations_seen: int
    entropy_blind_min: float
    entropy_blind_max: float
    entropy_blind: float
    entropy_seen: float
    warnings: list[str] = Field(default_factory=list)


class DictionaryStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: str
    words_total: int
    words_filtered: int
    percent_available: int
    filter_length_min: int
    filter_length_max: int
    contains_accents: bool


class GeneratorStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    config: ConfigStats
    dictionary: DictionaryStats
    entropy: EntropyStats
    passwords_generated: int
    random_numbers_cached: int
    random_source: str
