from __future__ import annotations

import re

_WORD_RE = re.compile(r"[a-z]+")

STOPWORDS = frozenset(
    {
        "and", "with", "the", "for", "from", "into", "over", "side", "served",
        "style", "fresh", "some", "our", "your", "its", "this", "that", "very",
        "notes", "note", "hint", "hints", "wine", "dish", "finish", "palate",
        "nose", "aroma", "aromas", "touch", "plus", "bodied",
    }
)


def _stem(word: str) -> str:
    if len(word) > 4 and word.endswith("ies"):
        return word[:-3] + "y"
    if len(word) > 4 and word.endswith("oes"):
        return word[:-2]
    if len(word) > 3 and word.endswith("s") and not word.endswith(("ss", "us", "is")):
        return word[:-1]
    return word


def tokenize(*texts: str | None) -> set[str]:
    """Lower-case word tokens with stopwords and very short words removed."""
    tokens: set[str] = set()
    for text in texts:
        if not text:
            continue
        folded = text.lower().replace("é", "e").replace("è", "e")
        for word in _WORD_RE.findall(folded):
            if len(word) < 3 or word in STOPWORDS:
                continue
            tokens.add(_stem(word))
    return tokens
