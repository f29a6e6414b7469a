"""Text normalization and tokenization shared by the diff and every analyzer.

normalize_text() is the single canonicalization step applied to pasted and
fetched text before comparison or scoring. The tokenizers below operate on
its output.
"""

import re

# Standard English stop words
STOP_WORDS: frozenset[str] = frozenset(
    """
    a about above after again against all am an and any are aren't as at be
    because been before being below between both but by can can't cannot could
    couldn't did didn't do does doesn't doing don't down during each few for
    from further had hadn't has hasn't have haven't having he he'd he'll he's
    her here here's hers herself him himself his how how's i i'd i'll i'm i've
    if in into is isn't it it's its itself let's me more most mustn't my myself
    no nor not of off on once only or other ought our ours ourselves out over
    own same shan't she she'd she'll she's should shouldn't so some such than
    that that's the their theirs them themselves then there there's these they
    they'd they'll they're they've this those through to too under until up
    very was wasn't we we'd we'll we're we've were weren't what what's when
    when's where where's which while who who's whom why why's with won't would
    wouldn't you you'd you'll you're you've your yours yourself yourselves
    also just like get got will one two three may might shall need use used
    using make made
    """.split()
)

_WHITESPACE_RUN = re.compile(r"\s+")
_SENTENCE_BOUNDARY = re.compile(r"[.!?]+")
_NON_TERM_CHARS = re.compile(r"[^\w']|_")
_URL_PATTERN = re.compile(r"https?://[^\s<>\"'`]+", re.IGNORECASE)
_URL_TRAILING_PUNCTUATION = ".,;:!?'\""
_URL_CLOSING_BRACKETS = {")": "(", "]": "[", "}": "{"}


def normalize_text(raw: str) -> str:
    """Canonicalize raw text before comparison.

    Replaces non-breaking spaces, folds the curly apostrophe (U+2019) to a
    straight one, collapses every whitespace run to a single space and trims.
    Case is left untouched. normalize_text(normalize_text(x)) == normalize_text(x).
    """
    text = raw.replace("\u00a0", " ").replace("\u2019", "'")
    return _WHITESPACE_RUN.sub(" ", text).strip()


def split_words(text: str) -> list[str]:
    """Split text into whitespace-delimited words."""
    return text.split()


def split_sentences(text: str) -> list[str]:
    """Split text into sentences on '.', '!' and '?', dropping empty fragments."""
    return [s.strip() for s in _SENTENCE_BOUNDARY.split(text) if s.strip()]


def clean_term(word: str) -> str:
    """Lowercase a word and strip everything except alphanumerics and apostrophes."""
    return _NON_TERM_CHARS.sub("", word.lower()).strip("'")


def term_tokens(
    text: str,
    min_length: int = 1,
    drop_stop_words: bool = False,
) -> list[str]:
    """Lowercased, punctuation-stripped word tokens.

    Args:
        text: Text to tokenize
        min_length: Minimum token length to keep
        drop_stop_words: Remove STOP_WORDS when True

    Returns:
        Tokens in text order
    """
    tokens: list[str] = []
    for word in split_words(text):
        term = clean_term(word)
        if len(term) < min_length or not term:
            continue
        if drop_stop_words and term in STOP_WORDS:
            continue
        tokens.append(term)
    return tokens


def _trim_url(url: str) -> str:
    """Drop trailing punctuation, keeping closing brackets that pair with one in the URL."""
    while url:
        last = url[-1]
        if last in _URL_TRAILING_PUNCTUATION:
            url = url[:-1]
        elif last in _URL_CLOSING_BRACKETS and url.count(last) > url.count(
            _URL_CLOSING_BRACKETS[last]
        ):
            url = url[:-1]
        else:
            break
    return url


def extract_urls(text: str) -> list[str]:
    """Extract unique http(s) URLs in first-seen order."""
    seen: dict[str, None] = {}
    for match in _URL_PATTERN.finditer(text):
        url = _trim_url(match.group())
        if url and url not in seen:
            seen[url] = None
    return list(seen)
