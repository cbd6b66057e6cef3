"""
Blocking key generators for entity-blocking.

A generator maps a record and the schema correspondences applicable to it
to zero or more (blocking key, blocked element) pairs. Generators must be
deterministic and free of side effects.
"""

import hashlib
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Callable, Hashable, Iterable, List, Optional, Sequence, Tuple

from ..model.correspondence import Correspondence
from ..model.matchable import Record

logger = logging.getLogger(__name__)

SLICE_PATTERN = re.compile(r"^(?P<field>[^\[\]]+)\[(?P<start>-?\d*):(?P<stop>-?\d*)\]$")


class BlockingKeyGenerator(ABC):
    """Strategy producing blocking keys for a record."""

    @abstractmethod
    def generate_blocking_keys(self, record: Record,
                               correspondences: Sequence[Correspondence]) -> Iterable[Tuple[Hashable, Any]]:
        """
        Generate blocking keys for a record.

        Args:
            record: Record to block
            correspondences: Schema correspondences applicable to the record

        Returns:
            Iterable of (blocking key, blocked element) pairs
        """
        raise NotImplementedError

    @property
    def name(self) -> str:
        return type(self).__name__


class FunctionBlockingKeyGenerator(BlockingKeyGenerator):
    """
    Adapts a plain function to the generator interface.

    The function may return a single key (the record itself is then the
    blocked element), ``None`` for no key, or an iterable of
    (key, blocked element) pairs when ``emits_pairs`` is set.
    """

    def __init__(self, function: Callable, emits_pairs: bool = False, name: Optional[str] = None):
        self.function = function
        self.emits_pairs = emits_pairs
        self._name = name or getattr(function, "__name__", "function")

    def generate_blocking_keys(self, record, correspondences):
        if self.emits_pairs:
            return list(self.function(record, correspondences))

        key = self.function(record)
        if key is None:
            return []
        return [(key, record)]

    @property
    def name(self) -> str:
        return self._name


class StaticBlockingKeyGenerator(BlockingKeyGenerator):
    """Assigns every record the same key, which yields all pairs."""

    def __init__(self, key: Hashable = ""):
        self.key = key

    def generate_blocking_keys(self, record, correspondences):
        return [(self.key, record)]


class AttributeValueBlockingKeyGenerator(BlockingKeyGenerator):
    """
    Deterministic key built from attribute values.

    Attributes are field expressions: a plain attribute name or a sliced
    one such as ``zip[:3]``. Present values are joined with ``|``; records
    without any value produce no key.
    """

    def __init__(self, attributes: List[str], hash_keys: bool = False, lowercase: bool = True):
        """
        Initialize generator.

        Args:
            attributes: Field expressions making up the key
            hash_keys: Replace keys by the first 16 hex chars of their md5
            lowercase: Lower-case values before joining
        """
        if not attributes:
            raise ValueError("At least one attribute is required for attribute value blocking")
        self.attributes = list(attributes)
        self.hash_keys = hash_keys
        self.lowercase = lowercase

    def generate_blocking_keys(self, record, correspondences):
        key_components = []

        for expression in self.attributes:
            value = extract_field_value(record, expression)
            if value:
                key_components.append(value.lower() if self.lowercase else value)

        if not key_components:
            return []

        block_key = "|".join(key_components)
        if self.hash_keys:
            block_key = hashlib.md5(block_key.encode()).hexdigest()[:16]
        return [(block_key, record)]


class TokenBlockingKeyGenerator(BlockingKeyGenerator):
    """One key per distinct token found in the given attributes."""

    def __init__(self, attributes: List[str], min_token_length: int = 2):
        self.attributes = list(attributes)
        self.min_token_length = min_token_length

    def generate_blocking_keys(self, record, correspondences):
        tokens = []
        for expression in self.attributes:
            for token in extract_tokens(extract_field_value(record, expression), self.min_token_length):
                if token not in tokens:
                    tokens.append(token)
        return [(token, record) for token in tokens]


def extract_field_value(record: Record, field_expression: str) -> str:
    """
    Extract a value from a record, handling expressions like "zip[:3]".

    Args:
        record: Record to read from
        field_expression: Attribute name, optionally with a slice

    Returns:
        Extracted value as a stripped string, "" when missing
    """
    match = SLICE_PATTERN.match(field_expression)
    if match:
        value = record.get_value(match.group("field").strip())
        if value is None:
            return ""
        start = int(match.group("start")) if match.group("start") else None
        stop = int(match.group("stop")) if match.group("stop") else None
        return str(value).strip()[start:stop]

    value = record.get_value(field_expression)
    if value is None:
        return ""
    return str(value).strip()


def extract_tokens(text: str, min_token_length: int = 2) -> List[str]:
    """
    Extract lower-cased alphanumeric tokens from text.

    Args:
        text: Input text
        min_token_length: Shorter tokens are dropped

    Returns:
        List of tokens in order of appearance
    """
    if not text or not isinstance(text, str):
        return []

    tokens = []
    for token in text.lower().split():
        clean_token = "".join(c for c in token if c.isalnum())
        if len(clean_token) >= min_token_length:
            tokens.append(clean_token)
    return tokens
