"""
Tokenization of raw review text.

Splits text into word tokens on whitespace after removing HTML markup and
punctuation. Tokenization never fails: empty or non-string input gives an
empty token list.
"""

import html
import re

_HTML_TAG = re.compile(r"<[a-zA-Z/!][^>]*>")
# Word characters, whitespace and apostrophes survive; everything else is punctuation.
_PUNCTUATION = re.compile(r"[^\w\s']")
_WHITESPACE = re.compile(r"\s+")


class Tokenizer:
    """
    Word tokenizer for movie reviews.

    Apostrophes inside words are kept so that contractions such as
    ``don't`` map to a single vocabulary entry.
    """

    def __init__(self, lowercase: bool = True, strip_html: bool = True):
        """
        Initialize the tokenizer.

        Args:
            lowercase: Convert text to lowercase before splitting
            strip_html: Unescape HTML entities and remove tags
        """
        self.lowercase = lowercase
        self.strip_html = strip_html

    def clean_text(self, text: str) -> str:
        """
        Clean and normalize text.

        Args:
            text: Raw text string

        Returns:
            Cleaned text string
        """
        if not isinstance(text, str):
            return ""

        if self.strip_html:
            text = html.unescape(text)
            text = _HTML_TAG.sub(" ", text)

        if self.lowercase:
            text = text.lower()

        text = _PUNCTUATION.sub(" ", text)

        text = _WHITESPACE.sub(" ", text).strip()

        return text

    def tokenize(self, text: str) -> list[str]:
        """
        Tokenize text into words.

        Args:
            text: Raw text string

        Returns:
            List of tokens, in order of appearance
        """
        tokens = []
        for token in self.clean_text(text).split():
            token = token.strip("'")
            if token:
                tokens.append(token)
        return tokens

    def __call__(self, text: str) -> list[str]:
        return self.tokenize(text)

    def __repr__(self) -> str:
        return f"Tokenizer(lowercase={self.lowercase}, strip_html={self.strip_html})"


_default_tokenizer = Tokenizer()


def tokenize(text: str) -> list[str]:
    """Tokenize text with the default settings."""
    return _default_tokenizer.tokenize(text)
