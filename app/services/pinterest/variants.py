import re
from typing import Any, Mapping, Protocol

UNSIZED_VARIANT_SCORE = 999999.0
_DIGITS = re.compile(r"\d+")


class VariantScorer(Protocol):
    def score(self, key: str, variant: Mapping[str, Any]) -> float | None:
        """Return a rank for the variant, or ``None`` to skip it."""
        ...


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class DimensionScorer:
    """Area when width and height are known, else the first number in the key.

    Keys with no number at all (``"orig"``) get ``UNSIZED_VARIANT_SCORE`` so an
    original upload beats any explicitly small rendition.
    """

    def score(self, key: str, variant: Mapping[str, Any]) -> float | None:
        url = variant.get("url")
        if not isinstance(url, str) or not url:
            return None

        width, height = variant.get("width"), variant.get("height")
        if _is_number(width) and _is_number(height):
            return float(width) * float(height)

        match = _DIGITS.search(str(key))
        if match:
            return float(match.group(0))
        return UNSIZED_VARIANT_SCORE


DEFAULT_SCORER: VariantScorer = DimensionScorer()


def select_best_variant(variants: Any, scorer: VariantScorer = DEFAULT_SCORER) -> str | None:
    if not isinstance(variants, Mapping):
        return None

    best_url: str | None = None
    best_score: float | None = None
    for key, variant in variants.items():
        if not isinstance(variant, Mapping):
            continue
        url = variant.get("url")
        if not isinstance(url, str) or not url:
            continue
        score = scorer.score(key, variant)
        if score is None:
            continue
        # strictly greater: first seen wins ties
        if best_score is None or score > best_score:
            best_score = score
            best_url = url
    return best_url
