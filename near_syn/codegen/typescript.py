"""
TypeScript bindings generator.

Emits, in order: a header comment, the NEAR JSON type aliases, one
declaration per exported Rust type, one interface per implemented trait,
the aggregate contract interface and the view/change method lists used to
build a near-api-js Contract object.
"""

from typing import Dict, List, Optional, Tuple

from ..contract import (
    DocExtractor,
    ImplContext,
    MethodRecord,
    ResolvedFile,
    contract_name,
    derives,
)
from ..parser.ast_nodes import (
    Attribute,
    EnumDefinition,
    FieldDefinition,
    Item,
    SourceFile,
    StructDefinition,
    TypeAlias,
    VariantDefinition,
)
from .base import BaseGenerator


def is_serde_skipped(attrs: List[Attribute]) -> bool:
    """Check for `#[serde(skip)]` or `#[serde(skip_serializing)]`."""
    return any(
        attr.path == 'serde' and ('skip' in attr.args or 'skip_serializing' in attr.args)
        for attr in attrs
    )


class TypeScriptGenerator(BaseGenerator):
    """
    Generates TypeScript declarations for a contract's types and methods.
    """

    def __init__(self, ctx):
        super().__init__(ctx)
        self._extractor = DocExtractor()

    def generate(self, files: List[ResolvedFile]) -> str:
        """
        Generate the complete bindings file.

        Args:
            files: Parsed and resolved input files, in command-line order

        Returns:
            The TypeScript source text
        """
        lines: List[str] = []
        lines.extend(self.prelude())
        lines.extend(self.type_declarations(files))
        lines.extend(self.trait_interfaces(files))
        lines.extend(self.contract_interface(files))
        lines.extend(self.contract_methods(files))

        while lines and lines[-1] == '':
            lines.pop()
        return '\n'.join(lines) + '\n'

    # =========================================================================
    # PRELUDE
    # =========================================================================

    def prelude(self) -> List[str]:
        ctx = self._ctx
        lines = [
            f'// TypeScript bindings generated with {ctx.bin_name} v{ctx.version} '
            f'{ctx.repository}{ctx.now}',
            '',
        ]
        if ctx.settings.prelude_types:
            lines.append('// Exports common NEAR Types')
            for name in ctx.settings.prelude_types:
                lines.append(f'export type {name} = string;')
            lines.append('')
        return lines

    # =========================================================================
    # TYPE DECLARATIONS
    # =========================================================================

    def exported_items(self, source: SourceFile) -> List[Item]:
        """Get the top-level type aliases and serializable structs and enums of a file."""
        serialize = self._ctx.settings.serialize_derive
        items = []
        for item in source.items:
            if isinstance(item, TypeAlias) and item.ty is not None:
                items.append(item)
            elif isinstance(item, StructDefinition) and derives(item.attrs, serialize):
                if item.is_union:
                    self._ctx.diagnostics.warn_unsupported_construct(
                        'union', item.name, source.path, item.line)
                    continue
                items.append(item)
            elif isinstance(item, EnumDefinition) and derives(item.attrs, serialize):
                items.append(item)
        return items

    def type_declarations(self, files: List[ResolvedFile]) -> List[str]:
        """Emit one declaration per distinct exported type name; the first definition wins."""
        lines = []
        seen = set()
        for resolved in files:
            self._ctx.reset_for_file(resolved.file_path)
            for item in self.exported_items(resolved.source):
                if item.name in seen:
                    continue
                seen.add(item.name)
                lines.extend(self.type_declaration(item))
                lines.append('')
        return lines

    def type_declaration(self, item: Item, with_docs: bool = True) -> List[str]:
        """Render a single type alias, struct or enum declaration."""
        lines = self.jsdoc(self._extractor.get_docs(item.attrs)) if with_docs else []
        generics = f'<{", ".join(item.generics)}>' if item.generics else ''

        if isinstance(item, TypeAlias):
            lines.append(f'export type {item.name}{generics} = {self._translate(item.ty, item.line)};')
        elif isinstance(item, StructDefinition):
            lines.extend(self._struct_declaration(item, generics, with_docs))
        elif isinstance(item, EnumDefinition):
            lines.extend(self._enum_declaration(item, generics, with_docs))
        return lines

    def _struct_declaration(self, struct: StructDefinition, generics: str, with_docs: bool) -> List[str]:
        if struct.style == 'unit':
            return [f'export type {struct.name}{generics} = null;']
        if struct.style == 'tuple':
            return [f'export type {struct.name}{generics} = {self._tuple_fields(struct.fields, struct.name)};']

        lines = [f'export interface {struct.name}{generics} {{']
        self.indent_level += 1
        for field in struct.fields:
            if is_serde_skipped(field.attrs):
                continue
            if with_docs:
                lines.extend(self.jsdoc(self._extractor.get_docs(field.attrs)))
            lines.append(f'{self.indent()}{field.name}: {self._translate(field.ty, field.line, struct.name)};')
        self.indent_level -= 1
        lines.append('}')
        return lines

    def _enum_declaration(self, enum: EnumDefinition, generics: str, with_docs: bool) -> List[str]:
        if not enum.variants:
            return [f'export type {enum.name}{generics} = never;']

        if all(v.style == 'unit' for v in enum.variants):
            lines = [f'export enum {enum.name} {{']
            self.indent_level += 1
            for variant in enum.variants:
                if with_docs:
                    lines.extend(self.jsdoc(self._extractor.get_docs(variant.attrs)))
                lines.append(f'{self.indent()}{variant.name} = "{variant.name}",')
            self.indent_level -= 1
            lines.append('}')
            return lines

        # Externally tagged representation, serde's default
        alternatives = [self._variant_type(v, enum.name) for v in enum.variants]
        return [f'export type {enum.name}{generics} = {" | ".join(alternatives)};']

    def _variant_type(self, variant: VariantDefinition, owner: str) -> str:
        if variant.style == 'unit':
            return f'"{variant.name}"'
        if variant.style == 'tuple':
            return f'{{ {variant.name}: {self._tuple_fields(variant.fields, owner)} }}'
        fields = ', '.join(
            f'{f.name}: {self._translate(f.ty, f.line, owner)}'
            for f in variant.fields if not is_serde_skipped(f.attrs)
        )
        return f'{{ {variant.name}: {{ {fields} }} }}'

    def _tuple_fields(self, fields: List[FieldDefinition], owner: str) -> str:
        """A newtype serializes as its content, other tuples as arrays."""
        types = [self._translate(f.ty, f.line, owner) for f in fields]
        if len(types) == 1:
            return types[0]
        return f'[{", ".join(types)}]'

    def _translate(self, ty, line: Optional[int], owner: Optional[str] = None) -> str:
        """Translate a field or alias type; `Self` names the declaring type."""
        return self._ctx.translator.translate(ty, self._ctx.current_file_path, line, owner)

    # =========================================================================
    # INTERFACES
    # =========================================================================

    def trait_contexts(self, files: List[ResolvedFile]) -> List[Tuple[ImplContext, List[MethodRecord]]]:
        """Group trait impl methods by trait name, in order of first appearance."""
        groups: Dict[str, Tuple[ImplContext, List[MethodRecord]]] = {}
        for resolved in files:
            for impl in resolved.impls:
                if not impl.context.is_trait:
                    continue
                if impl.context.name not in groups:
                    groups[impl.context.name] = (impl.context, [])
                groups[impl.context.name][1].extend(impl.methods)
        return list(groups.values())

    def trait_interfaces(self, files: List[ResolvedFile]) -> List[str]:
        lines = []
        for context, methods in self.trait_contexts(files):
            docs = context.interface.docs if context.interface else []
            lines.extend(self.jsdoc(docs))
            lines.extend(self.interface_block(f'export interface {context.name}', methods))
            lines.append('')
        return lines

    def contract_interface(self, files: List[ResolvedFile]) -> List[str]:
        """Emit the aggregate interface: all inherent methods, extending every trait interface."""
        name = contract_name(files, self._ctx.settings)
        traits = [context.name for context, _ in self.trait_contexts(files)]
        methods = [
            method
            for resolved in files
            for impl in resolved.impls if not impl.context.is_trait
            for method in impl.methods
        ]

        header = f'export interface {name}'
        if traits:
            header += f' extends {", ".join(traits)}'

        lines = self.jsdoc(self._contract_docs(files, name))
        lines.extend(self.interface_block(header, methods))
        lines.append('')
        return lines

    def interface_block(self, header: str, methods: List[MethodRecord]) -> List[str]:
        lines = [f'{header} {{']
        self.indent_level += 1
        for i, method in enumerate(methods):
            if i > 0:
                lines.append('')
            lines.extend(self.jsdoc(method.docs))
            lines.append(f'{self.indent()}{self.method_signature(method)}')
        self.indent_level -= 1
        lines.append('}')
        return lines

    def _contract_docs(self, files: List[ResolvedFile], name: str) -> List[str]:
        for resolved in files:
            for item in resolved.source.items:
                if isinstance(item, StructDefinition) and item.name == name:
                    return self._extractor.get_docs(item.attrs)
        return []

    # =========================================================================
    # METHOD LISTS
    # =========================================================================

    def contract_methods(self, files: List[ResolvedFile]) -> List[str]:
        """Emit the `viewMethods`/`changeMethods` object for near-api-js."""
        name = contract_name(files, self._ctx.settings)
        view_methods = []
        change_methods = []
        for resolved in files:
            for impl in resolved.impls:
                for method in impl.methods:
                    if method.role.is_change:
                        change_methods.append(method.name)
                    else:
                        view_methods.append(method.name)

        lines = [f'export const {name}Methods = {{']
        self.indent_level += 1
        for label, names in (('viewMethods', view_methods), ('changeMethods', change_methods)):
            lines.append(f'{self.indent()}{label}: [')
            self.indent_level += 1
            for method_name in names:
                lines.append(f'{self.indent()}"{method_name}",')
            self.indent_level -= 1
            lines.append(f'{self.indent()}],')
        self.indent_level -= 1
        lines.append('};')
        lines.append('')
        return lines
