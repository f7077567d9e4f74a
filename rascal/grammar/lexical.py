"""Lexical analysis for the rascal language. Converts source text into a lazy, ordered sequence of Tokens.

Tokens are classified as follows:

```
<integer>     ::= <digit>+                              ; maximal digit run
<boolean>     ::= "true" | "false"
<identifier>  ::= <letter> (<letter> | <digit> | "_")*  ; unless it is a keyword
<keyword>     ::= "let" | "var" | "mut" | "fn" | "if" | "else" | "while" | "return"
                | "and" | "or" | "begin" | "end"
<operator>    ::= "+" | "-" | "*" | "/" | "%" | "==" | "!=" | ">" | "<" | "=" | "&&" | "||"
<punctuation> ::= "," | ";" | "(" | ")" | "[" | "]" | "{" | "}"

<comment>     ::= "#" <char>*                           ; up to end of line, discarded like whitespace
```

The lexer is an iterator: it is exhausted after yielding a single EOF token and cannot be restarted (lex the source
again instead).
"""

from dataclasses import dataclass
from enum import Enum
from string import ascii_letters, digits, whitespace
from typing import NamedTuple

from rascal.lang.error import LexError


class Kind(Enum):
    """Classification of a Token."""
    INTEGER = "integer"
    BOOLEAN = "boolean"
    IDENTIFIER = "identifier"
    KEYWORD = "keyword"
    OPERATOR = "operator"
    PUNCTUATION = "punctuation"
    EOF = "end of input"


class Position(NamedTuple):
    """Location of a lexeme in source text: 1-based line and column, 0-based character offset."""
    line: int
    column: int
    offset: int

    def __str__(self):
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class Token:
    """A classified lexeme. Produced once by the Lexer and never modified."""
    kind: Kind
    text: str
    position: Position

    @property
    def value(self):
        """Literal value of INTEGER/BOOLEAN tokens, text otherwise."""
        if self.kind is Kind.INTEGER:
            return int(self.text)
        elif self.kind is Kind.BOOLEAN:
            return self.text == "true"
        return self.text

    def matches(self, kind, *texts):
        """Whether or not this token is of kind and (if texts are given) spelled as one of texts."""
        return self.kind is kind and (not texts or self.text in texts)

    def describe(self):
        """Human-readable description used in error messages."""
        if self.kind is Kind.EOF:
            return self.kind.value
        return f"{self.kind.value} '{self.text}'"

    def __repr__(self):
        return f"Token({self.kind.name}, {self.text!r}, {self.position})"


class Lexer:
    """Lazy tokenizer over a source string."""
    KEYWORDS = {"let", "var", "mut", "fn", "if", "else", "while", "return", "and", "or", "begin", "end"}
    BOOLEANS = {"true", "false"}
    OPERATORS = ["==", "!=", "&&", "||", "+", "-", "*", "/", "%", ">", "<", "="]  # longest first
    PUNCTUATION = ",;()[]{}"
    COMMENT = "#"

    def __init__(self, source):
        self.source = source
        self.offset = 0
        self.line = 1
        self.column = 1
        self._done = False

    def __iter__(self):
        return self

    def __next__(self):
        if self._done:
            raise StopIteration

        self._skip_ignored()
        position = self._position()

        if self.offset >= len(self.source):
            self._done = True
            return Token(Kind.EOF, "", position)

        char = self.source[self.offset]

        if char in digits:
            return Token(Kind.INTEGER, self._read_while(digits), position)

        if char in ascii_letters:
            word = self._read_while(ascii_letters + digits + "_")
            if word in Lexer.BOOLEANS:
                return Token(Kind.BOOLEAN, word, position)
            elif word in Lexer.KEYWORDS:
                return Token(Kind.KEYWORD, word, position)
            return Token(Kind.IDENTIFIER, word, position)

        for operator in Lexer.OPERATORS:
            if self.source.startswith(operator, self.offset):
                self._advance(len(operator))
                return Token(Kind.OPERATOR, operator, position)

        if char in Lexer.PUNCTUATION:
            self._advance()
            return Token(Kind.PUNCTUATION, char, position)

        raise LexError(char, position)

    def _position(self):
        return Position(self.line, self.column, self.offset)

    def _advance(self, count=1):
        """Moves forward count characters, keeping line and column up to date."""
        for char in self.source[self.offset:self.offset + count]:
            if char == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
        self.offset += count

    def _read_while(self, allowed):
        start = self.offset
        while self.offset < len(self.source) and self.source[self.offset] in allowed:
            self._advance()
        return self.source[start:self.offset]

    def _skip_ignored(self):
        """Skips whitespace and comments."""
        while self.offset < len(self.source):
            char = self.source[self.offset]
            if char in whitespace:
                self._advance()
            elif char == Lexer.COMMENT:
                end = self.source.find("\n", self.offset)
                self._advance((len(self.source) if end == -1 else end) - self.offset)
            else:
                break


def tokenize(source):
    """Returns every Token of source (EOF included) as a list."""
    return list(Lexer(source))
