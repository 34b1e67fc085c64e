"""
Lexer module for near-syn.

This module provides tokenization of Rust source code.
"""

from .tokens import TokenType, Token, KEYWORDS, TWO_CHAR_OPS, SINGLE_CHAR_OPS, OPENING_DELIMITERS
from .lexer import Lexer

__all__ = [
    'TokenType',
    'Token',
    'KEYWORDS',
    'TWO_CHAR_OPS',
    'SINGLE_CHAR_OPS',
    'OPENING_DELIMITERS',
    'Lexer',
]
