"""
Parser module for near-syn.

This module provides AST node definitions and the parser implementation.
"""

from .ast_nodes import (
    # Base
    ASTNode,
    # Top-level
    SourceFile,
    Attribute,
    # Definitions
    Item,
    TypeAlias,
    FieldDefinition,
    StructDefinition,
    VariantDefinition,
    EnumDefinition,
    Receiver,
    Parameter,
    Signature,
    FunctionDefinition,
    TraitDefinition,
    ImplDefinition,
    ModuleDefinition,
    OtherItem,
    # Types
    TypeExpr,
    PathSegment,
    PathType,
    TupleType,
    ReferenceType,
    ArrayType,
    RawType,
)
from .parser import Parser, render_tokens

__all__ = [
    'ASTNode',
    'SourceFile',
    'Attribute',
    'Item',
    'TypeAlias',
    'FieldDefinition',
    'StructDefinition',
    'VariantDefinition',
    'EnumDefinition',
    'Receiver',
    'Parameter',
    'Signature',
    'FunctionDefinition',
    'TraitDefinition',
    'ImplDefinition',
    'ModuleDefinition',
    'OtherItem',
    'TypeExpr',
    'PathSegment',
    'PathType',
    'TupleType',
    'ReferenceType',
    'ArrayType',
    'RawType',
    'Parser',
    'render_tokens',
]
