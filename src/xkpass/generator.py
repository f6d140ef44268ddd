from __future__ import annotations

from collections.abc import Mapping
from threading import RLock
from typing import Any

from loguru import logger

from xkpass.assembler import assemble_password
from xkpass.config import Settings, settings as default_settings
from xkpass.entities import (
    ConfigError,
    EntropyStats,
    GeneratorStats,
    PasswordConfig,
)
from xkpass.presets import default_config, preset_config
from xkpass.rng import RandomCache, RandomNumberSource, SystemRandomSource
from xkpass.schema import KEY_DESCRIPTORS, check_key, validate_config
from xkpass.stats import (
    config_stats,
    dictionary_stats,
    entropy_stats,
    random_draws_required,
)
from xkpass.words import WordSource, contains_accents, filter_words


def _filter_inputs_changed(old: PasswordConfig, new: PasswordConfig) -> bool:
    return (
        old.word_length_min != new.word_length_min
        or old.word_length_max != new.word_length_max
        or old.allow_accents != new.allow_accents
    )


class PasswordGenerator:
    """Generates passwords from one word source, config and random source.

    All mutable state (active config, word pool, random cache, entropy stats,
    password counter) is guarded by a single lock. Replacements are computed
    in full before being swapped in, so a failed update leaves the previous
    state untouched.
    """

    def __init__(
        self,
        word_source: WordSource,
        config: Mapping[str, Any] | PasswordConfig | None = None,
        preset: str | None = None,
        preset_overrides: Mapping[str, Any] | None = None,
        random_source: RandomNumberSource | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._lock = RLock()
        self._settings = settings or default_settings

        if config is not None:
            self._config = validate_config(config)
        elif preset is not None:
            self._config, _warnings = preset_config(preset, preset_overrides)
        else:
            self._config, _warnings = default_config()

        self._word_source = word_source
        self._words_all = list(word_source.word_list())
        self._pool = filter_words(
            self._words_all,
            self._config.word_length_min,
            self._config.word_length_max,
            self._config.allow_accents,
        )
        self._contains_accents = self._accents_in(self._config, self._pool)
        self._entropy = self._compute_entropy(
            self._config, self._pool, self._contains_accents
        )

        self._random_source = random_source or SystemRandomSource()
        self._cache = RandomCache(
            self._random_source, batch_size=random_draws_required(self._config)
        )
        self._passwords_generated = 0

        logger.info(
            "Password generator ready: {} ({} of {} words usable)",
            word_source.source_description(),
            len(self._pool),
            len(self._words_all),
        )

    @staticmethod
    def _accents_in(config: PasswordConfig, pool: list[str]) -> bool:
        return config.allow_accents and contains_accents(pool)

    def _compute_entropy(
        self, config: PasswordConfig, pool: list[str], accents: bool
    ) -> EntropyStats:
        return entropy_stats(
            config,
            len(pool),
            contains_accents=accents,
            settings=self._settings,
        )

    @property
    def config(self) -> PasswordConfig:
        return self._config

    @property
    def entropy(self) -> EntropyStats:
        return self._entropy

    @property
    def passwords_generated(self) -> int:
        return self._passwords_generated

    @property
    def word_pool(self) -> list[str]:
        with self._lock:
            return list(self._pool)

    def set_config(self, config: Mapping[str, Any] | PasswordConfig) -> None:
        new_config = validate_config(config)
        with self._lock:
            self._apply_config(new_config)
        logger.info("Loaded new config")

    def update_config(self, overrides: Mapping[str, Any]) -> list[str]:
        """Change individual keys of the active config.

        Unrecognised keys are skipped with a warning (returned); a key with an
        invalid value, or an update that breaks a cross-key rule, raises
        `ConfigError` and leaves the active config unchanged.
        """
        warnings: list[str] = []
        with self._lock:
            merged = self._config.as_dict()
            for key, value in overrides.items():
                if key not in KEY_DESCRIPTORS:
                    message = f"Skipping unrecognised key={key}"
                    logger.warning(message)
                    warnings.append(message)
                    continue
                check = check_key(key, value)
                if not check.result:
                    raise ConfigError(
                        f"invalid new value for key={key}: {check.error}",
                        key=key,
                        expected=KEY_DESCRIPTORS[key].description,
                    )
                merged[key] = value
                logger.debug("Updated {} to new value", key)

            self._apply_config(validate_config(merged))
        return warnings

    def _apply_config(self, new_config: PasswordConfig) -> None:
        pool = self._pool
        if _filter_inputs_changed(self._config, new_config):
            pool = filter_words(
                self._words_all,
                new_config.word_length_min,
                new_config.word_length_max,
                new_config.allow_accents,
            )
        accents = self._accents_in(new_config, pool)
        entropy = self._compute_entropy(new_config, pool, accents)

        self._config = new_config
        self._pool = pool
        self._contains_accents = accents
        self._entropy = entropy
        self._cache.batch_size = random_draws_required(new_config)

    def set_word_source(self, word_source: WordSource) -> None:
        words_all = list(word_source.word_list())
        with self._lock:
            pool = filter_words(
                words_all,
                self._config.word_length_min,
                self._config.word_length_max,
                self._config.allow_accents,
            )
            accents = self._accents_in(self._config, pool)
            entropy = self._compute_entropy(self._config, pool, accents)

            self._word_source = word_source
            self._words_all = words_all
            self._pool = pool
            self._contains_accents = accents
            self._entropy = entropy
        logger.info(
            "Loaded word source {} ({} of {} words usable)",
            word_source.source_description(),
            len(pool),
            len(words_all),
        )

    def set_random_source(self, random_source: RandomNumberSource) -> None:
        with self._lock:
            self._random_source = random_source
            self._cache = RandomCache(
                random_source, batch_size=random_draws_required(self._config)
            )

    def password(self) -> str:
        with self._lock:
            password = assemble_password(self._config, self._pool, self._cache)
            self._passwords_generated += 1
        return password

    def passwords(self, count: int) -> list[str]:
        if isinstance(count, bool) or not isinstance(count, int) or count <= 0:
            raise ValueError(
                f"count must be a positive integer, got {count!r}"
            )
        return [self.password() for _ in range(count)]

    def stats(self) -> GeneratorStats:
        with self._lock:
            return GeneratorStats(
                config=config_stats(self._config),
                dictionary=dictionary_stats(
                    source=self._word_source.source_description(),
                    words_total=len(self._words_all),
                    pool=self._pool,
                    filter_length_min=self._config.word_length_min,
                    filter_length_max=self._config.word_length_max,
                    contains_accents=self._contains_accents,
                ),
                entropy=self._entropy,
                passwords_generated=self._passwords_generated,
                random_numbers_cached=len(self._cache),
                random_source=type(self._random_source).__name__,
            )


def generate_password(word_source: WordSource, **kwargs: Any) -> str:
    """Build a one-off `PasswordGenerator` and return a single password."""
    return PasswordGenerator(word_source, **kwargs).password()
