from __future__ import annotations

import abc
from collections.abc import Iterable, Sequence

from loguru import logger
from unidecode import unidecode

from xkpass.entities import DictionaryError


class WordSource(abc.ABC):
    @abc.abstractmethod
    def word_list(self) -> Sequence[str]:
        """
        Return every word this source can offer, unfiltered.
        """

    @abc.abstractmethod
    def source_description(self) -> str:
        """
        A short human-readable description of where the words come from.
        """


class ListWordSource(WordSource):
    """Word source backed by an in-memory sequence of words.

    Lines are stripped; blank lines and lines starting with '#' are ignored,
    so the lines of a words file can be passed straight in.
    """

    def __init__(self, words: Iterable[str], description: str | None = None) -> None:
        self._words = tuple(
            word
            for word in (line.strip() for line in words)
            if word and not word.startswith("#")
        )
        self._description = description or f"list of {len(self._words)} words"

    def word_list(self) -> Sequence[str]:
        return self._words

    def source_description(self) -> str:
        return self._description


def strip_accents(word: str) -> str:
    return unidecode(word)


def filter_words(
    words: Iterable[str], min_len: int, max_len: int, allow_accents: bool
) -> list[str]:
    pool: list[str] = []
    for word in words:
        if not min_len <= len(word) <= max_len:
            continue
        pool.append(word if allow_accents else strip_accents(word))

    if not pool:
        raise DictionaryError(
            f"No words of between {min_len} and {max_len} characters in the word list"
        )

    logger.debug(
        "Filtered word list to {} words of length {}-{}", len(pool), min_len, max_len
    )
    return pool


def contains_accents(words: Iterable[str]) -> bool:
    return any(strip_accents(word) != word for word in words)
