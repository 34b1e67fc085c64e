"""
Base generator class with shared utilities.

This module provides the BaseGenerator class that contains common utilities
used by both the Markdown and TypeScript generators.
"""

from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from .context import CodeGenerationContext

from ..contract import MethodRecord, MethodRole


class BaseGenerator:
    """
    Base class for all code generators.

    Provides shared utilities for:
    - Indentation management
    - Method signature rendering
    - Doc line formatting
    """

    def __init__(self, ctx: 'CodeGenerationContext'):
        """
        Initialize the base generator.

        Args:
            ctx: The code generation context containing all state
        """
        self._ctx = ctx

    # =========================================================================
    # INDENTATION
    # =========================================================================

    def indent(self) -> str:
        """Return the current indentation string."""
        return self._ctx.indent()

    @property
    def indent_level(self) -> int:
        """Get the current indentation level."""
        return self._ctx.indent_level

    @indent_level.setter
    def indent_level(self, value: int):
        """Set the current indentation level."""
        self._ctx.indent_level = value

    # =========================================================================
    # SIGNATURES
    # =========================================================================

    def method_signature(self, method: MethodRecord) -> str:
        """Render a method as it is called through near-api-js.

        Arguments are passed as a single `args` object; change methods take
        an optional gas limit and payable methods an optional deposit.
        """
        params = []
        if method.params:
            fields = ', '.join(f'{p.name}: {p.ts_type}' for p in method.params)
            params.append(f'args: {{ {fields} }}')
        if method.role.is_change:
            params.append('gas?: any')
        if method.role == MethodRole.PAYABLE_CALL:
            params.append('amount?: any')
        return f'{method.name}({", ".join(params)}): Promise<{method.return_type}>;'

    # =========================================================================
    # DOCS
    # =========================================================================

    @staticmethod
    def doc_lines(lines: List[str]) -> List[str]:
        """Strip trailing whitespace only, keeping indentation of code examples."""
        return [line.rstrip() for line in lines]

    def jsdoc(self, lines: List[str]) -> List[str]:
        """Render doc lines as a JSDoc block at the current indentation."""
        if not lines:
            return []
        indent = self.indent()
        out = [f'{indent}/**']
        for line in self.doc_lines(lines):
            # A literal `*/` would close the comment early
            line = line.replace('*/', '*\\/')
            out.append(f'{indent} * {line}'.rstrip())
        out.append(f'{indent} */')
        return out
