"""Lookup normalisers.

Every raw candidate is normalised before it reaches the store so that the
store can hold a single canonical form of each tenant name, whatever casing
or Unicode composition a client sends.

A normaliser must be pure, deterministic and idempotent::

    normalizer.normalize(normalizer.normalize(x)) == normalizer.normalize(x)
"""

from __future__ import annotations

from typing import Literal, Protocol, runtime_checkable
import unicodedata

from fastapi_multitenancy.core.exceptions import ConfigurationError


@runtime_checkable
class LookupNormalizer(Protocol):
    """Structural type for lookup normalisers."""

    def normalize(self, raw: str) -> str:
        """Return the canonical lookup key for *raw*."""
        ...


class CaseFoldingNormalizer:
    """Canonicalise to NFKC case-folded text with surrounding whitespace removed.

    ``"  Acme-Corp "`` and ``"ACME-CORP"`` both normalise to ``"acme-corp"``.
    NFKC is applied on both sides of the case fold because folding can
    produce sequences that compose differently; the second pass makes the
    result a fixed point.
    """

    def normalize(self, raw: str) -> str:
        text = unicodedata.normalize("NFKC", raw.strip())
        return unicodedata.normalize("NFKC", text.casefold()).strip()


class UpperInvariantNormalizer:
    """Canonicalise to NFKC upper-case text with surrounding whitespace removed.

    For stores whose canonical names are kept upper-cased.
    """

    def normalize(self, raw: str) -> str:
        text = unicodedata.normalize("NFKC", raw.strip())
        return unicodedata.normalize("NFKC", text.upper()).strip()


def get_normalizer(name: Literal["casefold", "upper"]) -> LookupNormalizer:
    """Return the built-in normaliser registered under *name*.

    Raises:
        ConfigurationError: When *name* is not a built-in normaliser.
    """
    if name == "casefold":
        return CaseFoldingNormalizer()
    if name == "upper":
        return UpperInvariantNormalizer()
    raise ConfigurationError(
        parameter="normalizer",
        reason=f"Unrecognised normalizer: {name!r}.",
    )


__all__ = [
    "CaseFoldingNormalizer",
    "LookupNormalizer",
    "UpperInvariantNormalizer",
    "get_normalizer",
]
