"""
Token definitions for the Rust lexer.

This module contains the TokenType enum, Token dataclass, and
constant mappings for keywords and punctuation.
"""

from dataclasses import dataclass
from enum import Enum, auto


class TokenType(Enum):
    """Enumeration of all token types recognized by the Rust lexer."""

    # Keywords
    AS = auto()
    ASYNC = auto()
    CONST = auto()
    CRATE = auto()
    DYN = auto()
    ENUM = auto()
    EXTERN = auto()
    FN = auto()
    FOR = auto()
    IMPL = auto()
    MOD = auto()
    MUT = auto()
    PUB = auto()
    REF = auto()
    SELF_VALUE = auto()
    SELF_TYPE = auto()
    STATIC = auto()
    STRUCT = auto()
    SUPER = auto()
    TRAIT = auto()
    TYPE = auto()
    UNSAFE = auto()
    USE = auto()
    WHERE = auto()
    IN = auto()
    TRUE = auto()
    FALSE = auto()

    # Punctuation
    PATH_SEP = auto()
    ARROW = auto()
    FAT_ARROW = auto()
    POUND = auto()
    BANG = auto()
    DOLLAR = auto()
    AT = auto()
    AMPERSAND = auto()
    PIPE = auto()
    CARET = auto()
    TILDE = auto()
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()
    PERCENT = auto()
    LT = auto()
    GT = auto()
    EQ = auto()
    QUESTION = auto()
    COLON = auto()

    # Delimiters
    LPAREN = auto()
    RPAREN = auto()
    LBRACE = auto()
    RBRACE = auto()
    LBRACKET = auto()
    RBRACKET = auto()
    SEMICOLON = auto()
    COMMA = auto()
    DOT = auto()

    # Literals
    NUMBER = auto()
    STRING_LITERAL = auto()
    CHAR_LITERAL = auto()
    LIFETIME = auto()
    IDENTIFIER = auto()

    # Doc comments (regular comments are dropped by the lexer)
    OUTER_DOC = auto()
    INNER_DOC = auto()

    # Special
    EOF = auto()


@dataclass
class Token:
    """Represents a single token from the lexer."""
    type: TokenType
    value: str
    line: int
    column: int


# Keyword to TokenType mapping
KEYWORDS = {
    'as': TokenType.AS,
    'async': TokenType.ASYNC,
    'const': TokenType.CONST,
    'crate': TokenType.CRATE,
    'dyn': TokenType.DYN,
    'enum': TokenType.ENUM,
    'extern': TokenType.EXTERN,
    'fn': TokenType.FN,
    'for': TokenType.FOR,
    'impl': TokenType.IMPL,
    'mod': TokenType.MOD,
    'mut': TokenType.MUT,
    'pub': TokenType.PUB,
    'ref': TokenType.REF,
    'self': TokenType.SELF_VALUE,
    'Self': TokenType.SELF_TYPE,
    'static': TokenType.STATIC,
    'struct': TokenType.STRUCT,
    'super': TokenType.SUPER,
    'trait': TokenType.TRAIT,
    'type': TokenType.TYPE,
    'unsafe': TokenType.UNSAFE,
    'use': TokenType.USE,
    'where': TokenType.WHERE,
    'in': TokenType.IN,
    'true': TokenType.TRUE,
    'false': TokenType.FALSE,
}

# Two-character punctuation. Shift and comparison operators are left as
# single characters so that nested generics like Vec<Vec<u8>> close cleanly.
TWO_CHAR_OPS = {
    '::': TokenType.PATH_SEP,
    '->': TokenType.ARROW,
    '=>': TokenType.FAT_ARROW,
}

# Single-character punctuation and delimiters
SINGLE_CHAR_OPS = {
    '#': TokenType.POUND,
    '!': TokenType.BANG,
    '$': TokenType.DOLLAR,
    '@': TokenType.AT,
    '&': TokenType.AMPERSAND,
    '|': TokenType.PIPE,
    '^': TokenType.CARET,
    '~': TokenType.TILDE,
    '+': TokenType.PLUS,
    '-': TokenType.MINUS,
    '*': TokenType.STAR,
    '/': TokenType.SLASH,
    '%': TokenType.PERCENT,
    '<': TokenType.LT,
    '>': TokenType.GT,
    '=': TokenType.EQ,
    '?': TokenType.QUESTION,
    ':': TokenType.COLON,
    '(': TokenType.LPAREN,
    ')': TokenType.RPAREN,
    '{': TokenType.LBRACE,
    '}': TokenType.RBRACE,
    '[': TokenType.LBRACKET,
    ']': TokenType.RBRACKET,
    ';': TokenType.SEMICOLON,
    ',': TokenType.COMMA,
    '.': TokenType.DOT,
}

# Tokens that open and close a balanced group
OPENING_DELIMITERS = {
    TokenType.LPAREN: TokenType.RPAREN,
    TokenType.LBRACE: TokenType.RBRACE,
    TokenType.LBRACKET: TokenType.RBRACKET,
}
