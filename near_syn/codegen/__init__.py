"""
Code generation module for near-syn.

This module provides Markdown documentation and TypeScript bindings
generation from resolved contract interfaces.
"""

from .diagnostics import Diagnostics, Diagnostic, DiagnosticSeverity
from .context import CodeGenerationContext
from .base import BaseGenerator
from .typescript import TypeScriptGenerator
from .markdown import MarkdownGenerator

__all__ = [
    'Diagnostics',
    'Diagnostic',
    'DiagnosticSeverity',
    'CodeGenerationContext',
    'BaseGenerator',
    'TypeScriptGenerator',
    'MarkdownGenerator',
]
