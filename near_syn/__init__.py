"""
near-syn: Markdown docs and TypeScript bindings for NEAR contracts.

This package statically analyzes Rust source files of a NEAR smart contract
and emits reference documentation or TypeScript bindings for its exposed
methods.

Module Structure:
- lexer/: Tokenization (TokenType, Token, Lexer)
- parser/: AST nodes and parsing (Parser, all AST node types)
- type_system/: Rust to TypeScript type translation (TypeTranslator)
- contract/: Method roles, docs, trait registry and interface resolution
- codegen/: Markdown and TypeScript generators, diagnostics
- nearsyn.py: Two-pass orchestrator and command line interface

Usage:
    from near_syn import NearSyn

    syn = NearSyn(no_now=True)
    print(syn.emit_ts(['src/lib.rs']))
"""

__version__ = '0.1.0'
__repository__ = 'https://github.com/acuarica/near-syn'

# Re-export main classes for convenience
from .nearsyn import NearSyn, main
from .errors import NearSynError
from .settings import Settings, load_settings
from .lexer import Lexer
from .parser import Parser

__all__ = [
    'NearSyn',
    'NearSynError',
    'Settings',
    'load_settings',
    'Lexer',
    'Parser',
    'main',
    '__version__',
]
