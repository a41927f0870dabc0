"""
Bag-of-terms text vectorization.
"""

import math
import re
from collections import Counter
from typing import List, Optional

from .types import TermVector

_NON_WORD = re.compile(r"[^\w\s]", re.ASCII)
MIN_TOKEN_LENGTH = 4


def tokenize(text: Optional[str]) -> List[str]:
    """Lowercase, strip punctuation and drop tokens of 3 characters or fewer."""
    if not text:
        return []
    cleaned = _NON_WORD.sub(" ", text.lower())
    return [w for w in cleaned.split() if len(w) >= MIN_TOKEN_LENGTH]


def vectorize_text(text: Optional[str]) -> TermVector:
    """Build a term vector of counts scaled by 1/sqrt(token count).

    This is document-length normalization only; there is no corpus-wide
    inverse document frequency term.
    """
    words = tokenize(text)
    if not words:
        return {}

    magnitude = math.sqrt(len(words))
    return {term: count / magnitude for term, count in Counter(words).items()}
