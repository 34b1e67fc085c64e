#!/usr/bin/env python3
"""
near-syn: NEAR contract documentation and bindings generator

Analyzes the Rust sources of a NEAR smart contract and emits either
Markdown reference documentation or TypeScript bindings for the methods
exposed through `#[near_bindgen]`.

Key features:
- Method roles (view, call, payable, init) from attributes and receivers
- Trait docs merged into implementing methods, across files
- Rust to TypeScript type translation
- Byte-identical output for unchanged input with --no-now

Usage:
    near-syn ts src/lib.rs > contract.ts
    near-syn md --no-now src/*.rs > README.md

Processing runs in two passes: every file is parsed and its traits
registered before any impl block is resolved, so an impl may come before
the trait it implements in command-line order.
"""

import argparse
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional

from . import __version__
from .lexer import Lexer
from .parser import Parser, SourceFile
from .settings import Settings, load_settings
from .errors import NearSynError
from .type_system import TypeTranslator
from .contract import (
    AttributeClassifier,
    DocExtractor,
    InterfaceResolver,
    ResolvedFile,
    TraitRegistry,
)
from .codegen import (
    CodeGenerationContext,
    Diagnostics,
    MarkdownGenerator,
    TypeScriptGenerator,
)


def format_now(no_now: bool = False) -> str:
    """Return the ` on <UTC timestamp>` fragment, or an empty string."""
    if no_now:
        return ''
    return f' on {datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S.%f UTC")}'


class NearSyn:
    """Main class that orchestrates parsing, resolution and generation."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        no_now: bool = False,
        verbose: bool = False,
        diagnostics: Optional[Diagnostics] = None,
    ):
        self.settings = settings or Settings()
        self.no_now = no_now
        self.diagnostics = diagnostics or Diagnostics(verbose=verbose)
        self.extractor = DocExtractor()
        self.translator = TypeTranslator(self.diagnostics)
        self.classifier = AttributeClassifier(self.settings)

    # =========================================================================
    # PARSING
    # =========================================================================

    def parse_source(self, source: str, file_path: str = '') -> SourceFile:
        """Parse Rust source text into a SourceFile.

        Raises:
            NearSynError: if the source does not tokenize or parse
        """
        try:
            tokens = Lexer(source).tokenize()
            unit = Parser(tokens).parse()
        except SyntaxError as e:
            raise NearSynError(file_path or '<source>', f'syntax error: {e}') from e
        unit.path = file_path
        return unit

    def parse_file(self, file_path: str) -> SourceFile:
        """Read and parse a single Rust source file."""
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                source = f.read()
        except OSError as e:
            raise NearSynError(file_path, f'unable to read file: {e.strerror or e}') from e
        except UnicodeDecodeError as e:
            raise NearSynError(file_path, f'unable to read file: {e.reason}') from e
        return self.parse_source(source, file_path)

    def load(self, file_paths: Iterable[str]) -> List[SourceFile]:
        """Parse every input file; any failure aborts before output is produced."""
        return [self.parse_file(path) for path in file_paths]

    # =========================================================================
    # RESOLUTION
    # =========================================================================

    def build_registry(self, sources: List[SourceFile]) -> TraitRegistry:
        """First pass: register the traits of every file."""
        registry = TraitRegistry(self.extractor, self.diagnostics)
        for source in sources:
            registry.forward_traits(source.items, source.path)
        return registry

    def resolve(self, sources: List[SourceFile]) -> List[ResolvedFile]:
        """Second pass: resolve `#[near_bindgen]` impl blocks file by file."""
        registry = self.build_registry(sources)
        resolver = InterfaceResolver(
            registry,
            classifier=self.classifier,
            translator=self.translator,
            extractor=self.extractor,
            settings=self.settings,
            diagnostics=self.diagnostics,
        )
        return [resolver.resolve_file(source) for source in sources]

    # =========================================================================
    # GENERATION
    # =========================================================================

    def _context(self) -> CodeGenerationContext:
        return CodeGenerationContext.from_settings(
            self.settings,
            diagnostics=self.diagnostics,
            translator=self.translator,
            now=format_now(self.no_now),
        )

    def generate_ts(self, sources: List[SourceFile]) -> str:
        return TypeScriptGenerator(self._context()).generate(self.resolve(sources))

    def generate_md(self, sources: List[SourceFile]) -> str:
        return MarkdownGenerator(self._context()).generate(self.resolve(sources))

    def emit_ts(self, file_paths: Iterable[str]) -> str:
        """Generate TypeScript bindings for the given files."""
        return self.generate_ts(self.load(file_paths))

    def emit_md(self, file_paths: Iterable[str]) -> str:
        """Generate Markdown documentation for the given files."""
        return self.generate_md(self.load(file_paths))


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog='near-syn',
        description='Analyzes Rust source files to generate either TypeScript bindings '
                    'or Markdown documentation',
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    subparsers = parser.add_subparsers(dest='command', metavar='COMMAND')
    subparsers.required = True

    for name, help_text in (('ts', 'Emits TypeScript bindings'),
                            ('md', 'Emits Markdown documentation')):
        sub = subparsers.add_parser(name, help=help_text, description=help_text)
        sub.add_argument('--no-now', action='store_true',
                         help='Does not emit date/time information, otherwise emits current time')
        sub.add_argument('--config', metavar='FILE',
                         help='JSON file overriding attribute names and output options')
        sub.add_argument('-o', '--output', metavar='OUT',
                         help='Write to OUT instead of stdout')
        sub.add_argument('-v', '--verbose', action='store_true',
                         help='List every diagnostic on stderr')
        sub.add_argument('files', nargs='+', metavar='FILE',
                         help='Rust source files (*.rs) to analyze')

    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.config) if args.config else Settings()
        syn = NearSyn(settings, no_now=args.no_now, verbose=args.verbose)
        if args.command == 'ts':
            output = syn.emit_ts(args.files)
        else:
            output = syn.emit_md(args.files)
    except NearSynError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.output:
        output_path = Path(args.output)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(output_path, 'w', encoding='utf-8') as f:
                f.write(output)
        except OSError as e:
            print(f"Error: {output_path}: {e.strerror or e}", file=sys.stderr)
            return 1
    else:
        sys.stdout.write(output)

    syn.diagnostics.print_summary()
    return 0


if __name__ == '__main__':
    sys.exit(main())
