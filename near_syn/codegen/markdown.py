"""
Markdown documentation generator.

Emits a methods summary table over all input files, then, per file, the
file-level docs, the exported types and one section per `#[near_bindgen]`
impl block, and finally a legend of the method markers.
"""

from typing import List

from ..contract import DocExtractor, MethodRecord, ResolvedFile, ResolvedImpl
from .base import BaseGenerator
from .typescript import TypeScriptGenerator


LEGEND = [
    '- :rocket: Initialization method. Needs to be called right after deployment.',
    '- :eyeglasses: View only method, *i.e.*, does not modify the contract state.',
    '- :writing_hand: Call method, i.e., does modify the contract state.',
    '- &#x24C3; Payable method, i.e., call needs to have an attached NEAR deposit.',
]


class MarkdownGenerator(BaseGenerator):
    """
    Generates Markdown reference documentation for a contract.

    Output is built as a list of lines, each terminated by a newline.
    """

    def __init__(self, ctx):
        super().__init__(ctx)
        self._extractor = DocExtractor()
        self._types = TypeScriptGenerator(ctx)

    def generate(self, files: List[ResolvedFile]) -> str:
        """
        Generate the complete documentation file.

        Args:
            files: Parsed and resolved input files, in command-line order

        Returns:
            The Markdown text
        """
        lines: List[str] = []
        lines.extend(self.prelude())
        lines.extend(self.methods_table(files))
        for resolved in files:
            self._ctx.reset_for_file(resolved.file_path)
            lines.extend(self.file_section(resolved))
        lines.extend(self.footer())
        return '\n'.join(lines) + '\n'

    def prelude(self) -> List[str]:
        return [
            f'<!-- AUTOGENERATED doc{self._ctx.now}, do not modify! -->',
            '# Contract',
            '',
        ]

    def methods_table(self, files: List[ResolvedFile]) -> List[str]:
        """Summary table of every exposed method across all files."""
        lines = [
            '| Method | Description | Return |',
            '| ------ | ----------- | ------ |',
        ]
        for resolved in files:
            for impl in resolved.impls:
                for method in impl.methods:
                    lines.append(self.table_row(method))
        lines.append('')
        return lines

    def table_row(self, method: MethodRecord) -> str:
        docs = ' '.join(self.doc_lines(method.docs))
        ret = method.return_type.replace('|', '\\|')
        return f'| {method.marker} `{method.name}`{method.suffix} | {docs} | `{ret}` |'

    # =========================================================================
    # PER-FILE SECTIONS
    # =========================================================================

    def file_section(self, resolved: ResolvedFile) -> List[str]:
        lines = self.doc_lines(self._extractor.get_docs(resolved.source.attrs))
        lines.extend(self.types_section(resolved))
        for impl in resolved.impls:
            lines.extend(self.impl_section(impl))
        return lines

    def types_section(self, resolved: ResolvedFile) -> List[str]:
        """Exported types of a file, each with its TypeScript declaration and docs."""
        items = self._types.exported_items(resolved.source)
        if not items:
            return []

        lines = ['', '## Types']
        for item in items:
            lines.append('')
            lines.append(f'### `{item.name}`')
            lines.append('')
            lines.append('```typescript')
            lines.extend(self._types.type_declaration(item, with_docs=False))
            lines.append('```')
            lines.append('')
            lines.extend(self.doc_lines(self._extractor.get_docs(item.attrs)))
        return lines

    def impl_section(self, impl: ResolvedImpl) -> List[str]:
        if impl.context.is_trait:
            lines = ['', f'## Methods for `{impl.context.display_name}` interface']
        else:
            lines = ['', f'## Methods for {impl.context.name}']
        for method in impl.methods:
            lines.extend(self.method_section(method))
        return lines

    def method_section(self, method: MethodRecord) -> List[str]:
        lines = [
            '',
            f'### {method.marker} `{method.name}`{method.suffix}',
            '',
            '```typescript',
            self.method_signature(method),
            '```',
            '',
        ]
        lines.extend(self.doc_lines(method.docs))
        return lines

    # =========================================================================
    # FOOTER
    # =========================================================================

    def footer(self) -> List[str]:
        ctx = self._ctx
        lines = ['', '---', '', 'References', '']
        lines.extend(LEGEND)
        lines.extend([
            '',
            '---',
            '',
            f'*This documentation was generated with* **{ctx.bin_name} v{ctx.version}** '
            f'<{ctx.repository}>{ctx.now}',
        ])
        return lines
