"""
Registry of trait definitions discovered across all input files.

The TraitRegistry is populated in a first pass over every parsed file so
that an `impl Trait for Contract` block can pick up the trait's method docs
and declared signatures even when the trait is defined in a file processed
later.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, TYPE_CHECKING

from ..parser.ast_nodes import Item, Signature, TraitDefinition
from .docs import DocExtractor

if TYPE_CHECKING:
    from ..codegen.diagnostics import Diagnostics


@dataclass
class InterfaceDefinition:
    """Docs and method signatures recorded for one trait."""
    name: str
    docs: List[str] = field(default_factory=list)
    method_docs: Dict[str, List[str]] = field(default_factory=dict)
    signatures: Dict[str, Signature] = field(default_factory=dict)
    file_path: str = ''
    line: int = 0

    def docs_for(self, method_name: str) -> List[str]:
        """Get the recorded doc lines for a method, empty if it has none."""
        return self.method_docs.get(method_name, [])

    def signature_for(self, method_name: str) -> Optional[Signature]:
        return self.signatures.get(method_name)


class TraitRegistry:
    """
    Registry of trait definitions keyed by trait name.

    Redefining a name replaces the earlier definition (last writer wins).
    """

    def __init__(self, extractor: Optional[DocExtractor] = None,
                 diagnostics: Optional['Diagnostics'] = None):
        self.traits: Dict[str, InterfaceDefinition] = {}
        self._extractor = extractor or DocExtractor()
        self._diagnostics = diagnostics

    def forward_traits(self, items: Iterable[Item], file_path: str = '') -> None:
        """Record every top-level trait definition among `items`."""
        for item in items:
            if isinstance(item, TraitDefinition):
                self.register(item, file_path)

    def register(self, trait: TraitDefinition, file_path: str = '') -> InterfaceDefinition:
        """Record a single trait definition, replacing any earlier one with the same name."""
        if trait.name in self.traits and self._diagnostics is not None:
            self._diagnostics.info_trait_redefined(trait.name, file_path, trait.line)

        definition = InterfaceDefinition(
            name=trait.name,
            docs=self._extractor.get_docs(trait.attrs),
            file_path=file_path,
            line=trait.line,
        )
        for method in trait.methods:
            definition.method_docs[method.name] = self._extractor.get_docs(method.attrs)
            definition.signatures[method.name] = method.sig

        self.traits[trait.name] = definition
        return definition

    def lookup(self, name: str) -> Optional[InterfaceDefinition]:
        """Get a trait definition by name (trailing path segment)."""
        return self.traits.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self.traits

    def __len__(self) -> int:
        return len(self.traits)
