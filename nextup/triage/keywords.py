"""
Keyword Extraction

Derives searchable keywords from a task title. Ambiguous verbs and function
words are dropped so that a search for "Add dark mode toggle" looks for
"dark", "mode" and "toggle" rather than every file containing "add".
"""

import re
from dataclasses import dataclass, field
from typing import Iterable, List

# Verbs that appear in nearly every task title and match nearly every file
AMBIGUOUS_VERBS = {
    "add",
    "adds",
    "added",
    "fix",
    "fixes",
    "fixed",
    "update",
    "updates",
    "remove",
    "delete",
    "implement",
    "support",
    "create",
    "make",
    "use",
    "improve",
    "change",
    "allow",
    "enable",
    "disable",
    "handle",
    "move",
    "refactor",
    "rename",
    "clean",
    "cleanup",
    "ensure",
    "investigate",
    "need",
    "needs",
    "get",
    "set",
    "show",
    "new",
}

STOP_WORDS = AMBIGUOUS_VERBS | {
    "the",
    "and",
    "for",
    "with",
    "from",
    "into",
    "onto",
    "when",
    "then",
    "than",
    "that",
    "this",
    "these",
    "those",
    "should",
    "would",
    "could",
    "can",
    "not",
    "are",
    "was",
    "were",
    "been",
    "being",
    "have",
    "has",
    "had",
    "does",
    "doesn",
    "don",
    "isn",
    "all",
    "any",
    "some",
    "more",
    "less",
    "via",
    "per",
    "out",
    "our",
    "your",
    "its",
    "their",
    "about",
    "after",
    "before",
    "during",
    "without",
    "within",
    "also",
    "only",
    "just",
    "like",
    "etc",
    "e.g",
    "i.e",
    "wip",
    "todo",
    "issue",
    "bug",
    "feature",
    "task",
}

_STRIP_CHARS = "\"'`()[]{}<>,;:!?*"

_CAMEL_CASE = re.compile(r"[a-z0-9][A-Z]|[A-Z]{2,}[a-z]")
_DOTTED_NAME = re.compile(r"^[A-Za-z_][\w-]*(\.[A-Za-z_][\w-]*)+$")
_REFERENCE = re.compile(r"^(#\d+|[A-Z]+-\d+|[\d.]+)$")


@dataclass
class KeywordSet:
    """Keywords extracted from a task title"""

    # Symbol or file-like tokens, case preserved
    identifiers: List[str] = field(default_factory=list)

    # Plain words, lower-cased
    terms: List[str] = field(default_factory=list)

    @property
    def all(self) -> List[str]:
        seen = set()
        ordered = []
        for keyword in self.identifiers + self.terms:
            if keyword not in seen:
                seen.add(keyword)
                ordered.append(keyword)
        return ordered

    def __bool__(self) -> bool:
        return bool(self.identifiers or self.terms)

    def __iter__(self):
        return iter(self.all)


def is_identifier(token: str) -> bool:
    """True for tokens that look like symbol or file names"""
    if "_" in token.strip("_"):
        return True
    if _DOTTED_NAME.match(token):
        return True
    return bool(_CAMEL_CASE.search(token))


def tokenize(text: str) -> List[str]:
    tokens = []
    for raw in text.split():
        token = raw.strip(_STRIP_CHARS).rstrip(".")
        if token:
            tokens.append(token)
    return tokens


def extract_keywords(
    title: str,
    min_length: int = 3,
    extra_stop_words: Iterable[str] = (),
) -> KeywordSet:
    """
    Extract searchable keywords from a task title.

    Args:
        title: Task title
        min_length: Tokens shorter than this are dropped
        extra_stop_words: Additional words to ignore (case-insensitive)

    Returns:
        KeywordSet with identifiers (case preserved) and plain terms
    """
    stop_words = STOP_WORDS | {w.lower() for w in extra_stop_words}
    keywords = KeywordSet()

    for token in tokenize(title or ""):
        if _REFERENCE.match(token):
            continue
        if len(token) < min_length or token.lower() in stop_words:
            continue

        if is_identifier(token):
            if token not in keywords.identifiers:
                keywords.identifiers.append(token)
        else:
            term = token.lower()
            if term not in keywords.terms:
                keywords.terms.append(term)

    return keywords
