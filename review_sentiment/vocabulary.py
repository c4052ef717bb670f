"""
Vocabulary index for the pretrained sentiment model.

The vocabulary is a fixed ``word,id`` mapping shipped with the model
artifact. It is loaded once and never modified afterwards.

Conventions:
- id 0 (``PAD_ID``) is reserved for padding and unknown words; a vocabulary
  that maps any word to 0 or to a negative id is rejected.
- Lookup is case-sensitive. Vocabulary files are expected to hold lowercase
  words, matching the lowercasing done by ``Tokenizer``.
- A non-default ``unknown_id`` must not be assigned to any word.
- Surrounding whitespace is stripped from words and ids.
- Duplicate words: the last occurrence wins. Conflicting duplicates are
  reported with a warning, or rejected when ``strict=True``.
"""

import csv
import logging
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from types import MappingProxyType

import pandas as pd

from .errors import LoadError

logger = logging.getLogger("review_sentiment")


PAD_ID = 0
UNKNOWN_ID = PAD_ID
# Ids are fed to the model as int32.
MAX_ID = 2**31 - 1


class VocabularyIndex:
    """
    Immutable mapping from word tokens to integer ids.

    Instances are built with ``load`` or ``from_mapping`` and can be shared
    between threads without locking.
    """

    def __init__(
        self,
        word2idx: Mapping[str, int],
        unknown_id: int = UNKNOWN_ID,
        source: str | None = None,
    ):
        """
        Initialize the index.

        Args:
            word2idx: Validated word to id mapping
            unknown_id: Id returned for words missing from the vocabulary
            source: Where the mapping came from, for logging

        Raises:
            ValueError: If unknown_id is outside [0, MAX_ID]
            LoadError: If a non-default unknown_id is assigned to a word
        """
        if isinstance(unknown_id, bool) or not isinstance(unknown_id, int) or not 0 <= unknown_id <= MAX_ID:
            raise ValueError(f"unknown_id must be an integer in [0, {MAX_ID}], got {unknown_id!r}")

        self._word2idx = MappingProxyType(dict(word2idx))

        if unknown_id != PAD_ID and unknown_id in self._word2idx.values():
            raise LoadError(
                f"unknown_id {unknown_id} is already assigned to a vocabulary word"
            )

        self._unknown_id = unknown_id
        self._source = source

    @property
    def unknown_id(self) -> int:
        return self._unknown_id

    @property
    def source(self) -> str | None:
        return self._source

    @property
    def word2idx(self) -> Mapping[str, int]:
        """Read-only view of the underlying mapping."""
        return self._word2idx

    def lookup(self, word: str) -> int:
        """
        Get the id of a word.

        Args:
            word: Token to look up

        Returns:
            Mapped id, or ``unknown_id`` if the word is not in the vocabulary
        """
        return self._word2idx.get(word, self._unknown_id)

    def lookup_many(self, words: Iterable[str]) -> list[int]:
        """Look up each word in order."""
        get = self._word2idx.get
        unknown_id = self._unknown_id
        return [get(word, unknown_id) for word in words]

    def __contains__(self, word: object) -> bool:
        return word in self._word2idx

    def __len__(self) -> int:
        return len(self._word2idx)

    def __iter__(self) -> Iterator[str]:
        return iter(self._word2idx)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VocabularyIndex):
            return NotImplemented
        return (
            self._unknown_id == other._unknown_id
            and dict(self._word2idx) == dict(other._word2idx)
        )

    __hash__ = None

    def __repr__(self) -> str:
        return (
            f"VocabularyIndex(size={len(self)}, unknown_id={self._unknown_id}, "
            f"source={self._source!r})"
        )

    @classmethod
    def from_mapping(
        cls,
        mapping: Mapping[str, int],
        unknown_id: int = UNKNOWN_ID,
    ) -> "VocabularyIndex":
        """
        Build an index from an in-memory mapping.

        Args:
            mapping: Word to id mapping
            unknown_id: Id returned for unknown words

        Returns:
            VocabularyIndex instance

        Raises:
            LoadError: If a word is empty, an id is not a positive integer, or
                unknown_id is assigned to a word
        """
        word2idx = _build_index(mapping.items(), strict=False, source="<mapping>")
        return cls(word2idx, unknown_id=unknown_id, source="<mapping>")

    @classmethod
    def load(
        cls,
        source: str | Path,
        unknown_id: int = UNKNOWN_ID,
        strict: bool = False,
    ) -> "VocabularyIndex":
        """
        Load a vocabulary from a ``word,id`` text file.

        The file has no header and no quoting; each non-blank line holds
        exactly two comma-separated fields.

        Args:
            source: Path to the vocabulary file
            unknown_id: Id returned for unknown words
            strict: Reject conflicting duplicate words instead of keeping
                the last occurrence

        Returns:
            Loaded VocabularyIndex

        Raises:
            LoadError: If the file is missing, unreadable or malformed
        """
        path = Path(source)

        if not path.is_file():
            raise LoadError(f"Vocabulary file not found: {path}")

        try:
            frame = pd.read_csv(
                path,
                header=None,
                sep=",",
                quoting=csv.QUOTE_NONE,
                dtype=str,
                na_filter=False,
                skip_blank_lines=True,
                encoding="utf-8",
            )
        except pd.errors.EmptyDataError as e:
            raise LoadError(f"Vocabulary file is empty: {path}") from e
        except pd.errors.ParserError as e:
            raise LoadError(f"Malformed vocabulary file {path}: {e}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise LoadError(f"Cannot read vocabulary file {path}: {e}") from e

        if frame.shape[1] != 2:
            raise LoadError(
                f"Malformed vocabulary file {path}: expected 2 fields per line, "
                f"got {frame.shape[1]}"
            )

        entries = _parse_frame(frame, path)
        word2idx = _build_index(entries, strict=strict, source=str(path))

        logger.info(f"Loaded {len(word2idx)} vocabulary entries from {path}")

        return cls(word2idx, unknown_id=unknown_id, source=str(path))


def _parse_frame(frame: pd.DataFrame, path: Path) -> list[tuple[str, int]]:
    """Convert a raw two-column frame into (word, id) pairs."""
    words = frame[0]
    id_text = frame[1]

    missing = words.isna() | id_text.isna()
    if missing.any():
        row = int(missing.idxmax()) + 1
        raise LoadError(f"Malformed vocabulary file {path}: row {row} has a missing field")

    # Tokens never carry surrounding whitespace
    words = words.str.strip()
    id_text = id_text.str.strip()
    well_formed = id_text.str.fullmatch(r"[+-]?\d+")
    if not well_formed.all():
        row = int((~well_formed).idxmax())
        raise LoadError(
            f"Malformed vocabulary file {path}: row {row + 1} has non-integer "
            f"id {frame.iat[row, 1]!r}"
        )

    try:
        ids = id_text.astype("int64")
    except (ValueError, OverflowError) as e:
        raise LoadError(f"Malformed vocabulary file {path}: id out of range") from e

    return list(zip(words.tolist(), ids.tolist()))


def _build_index(
    entries: Iterable[tuple[str, int]],
    strict: bool,
    source: str,
) -> dict[str, int]:
    """
    Validate entries and collapse duplicates.

    Args:
        entries: (word, id) pairs in file order
        strict: Raise on conflicting duplicates
        source: Source name used in messages

    Returns:
        Word to id dictionary
    """
    word2idx: dict[str, int] = {}
    conflicts: list[str] = []

    for word, word_id in entries:
        if not isinstance(word, str) or word == "":
            raise LoadError(f"Invalid vocabulary entry in {source}: empty word")

        if isinstance(word_id, bool) or not isinstance(word_id, int):
            raise LoadError(
                f"Invalid vocabulary entry in {source}: id for {word!r} must be an integer"
            )

        if word_id <= PAD_ID:
            raise LoadError(
                f"Invalid vocabulary entry in {source}: {word!r} maps to {word_id}, "
                f"ids <= {PAD_ID} are reserved for padding and unknown words"
            )

        if word_id > MAX_ID:
            raise LoadError(
                f"Invalid vocabulary entry in {source}: id {word_id} for {word!r} exceeds {MAX_ID}"
            )

        previous = word2idx.get(word)
        if previous is not None and previous != word_id:
            if strict:
                raise LoadError(
                    f"Conflicting ids for {word!r} in {source}: {previous} and {word_id}"
                )
            conflicts.append(word)

        word2idx[word] = word_id

    if conflicts:
        logger.warning(
            f"Found {len(conflicts)} conflicting duplicate words in {source}, "
            f"keeping last occurrence: " + ", ".join(conflicts[:5])
        )

    return word2idx
