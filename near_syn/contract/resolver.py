"""
Resolution of contract-exposed impl blocks into method records.

The InterfaceResolver walks a file's top-level items, picks the impl blocks
marked with `#[near_bindgen]` and turns each exposed method into a
MethodRecord: role, translated parameter and return types, and docs merged
with the implemented trait's docs (looked up in the TraitRegistry).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, TYPE_CHECKING

from ..parser.ast_nodes import (
    Attribute,
    FunctionDefinition,
    ImplDefinition,
    Item,
    PathType,
    Signature,
    SourceFile,
    StructDefinition,
)
from ..settings import Settings
from ..type_system import TypeTranslator
from .attributes import (
    AttributeClassifier,
    MethodRole,
    ReceiverKind,
    has_attr,
    is_public,
    receiver_kind,
)
from .docs import DocExtractor
from .registry import InterfaceDefinition, TraitRegistry

if TYPE_CHECKING:
    from ..codegen.diagnostics import Diagnostics


class ContextKind(Enum):
    TRAIT = 'trait'
    INHERENT = 'inherent'


@dataclass
class ImplContext:
    """What an impl block is attributed to: a trait, or the type it implements."""
    kind: ContextKind
    name: str  # trailing segment for traits, used as registry key and TS interface name
    self_type: Optional[str] = None  # None when the implementing type has no name
    interface: Optional[InterfaceDefinition] = None
    path: Optional[str] = None  # full trait path as written, e.g. `a::b::T`

    @property
    def is_trait(self) -> bool:
        return self.kind == ContextKind.TRAIT

    @property
    def display_name(self) -> str:
        return self.path or self.name

    @property
    def self_name(self) -> Optional[str]:
        """The implementing type's trailing segment, which `Self` stands for."""
        if self.self_type is None:
            return None
        return self.self_type.split('::')[-1]


@dataclass
class MethodParameter:
    name: str
    ts_type: str


@dataclass
class MethodRecord:
    """An exposed contract method, ready for rendering."""
    name: str
    params: List[MethodParameter]
    return_type: str
    receiver: ReceiverKind
    role: MethodRole
    attrs: List[Attribute]
    context: ImplContext
    docs: List[str] = field(default_factory=list)
    file_path: str = ''
    line: int = 0

    @property
    def marker(self) -> str:
        return AttributeClassifier.display(self.role)[0]

    @property
    def suffix(self) -> str:
        return AttributeClassifier.display(self.role)[1]


@dataclass
class ResolvedImpl:
    """The exposed methods of one `#[near_bindgen]` impl block, in declaration order."""
    context: ImplContext
    methods: List[MethodRecord] = field(default_factory=list)
    file_path: str = ''
    line: int = 0


@dataclass
class ResolvedFile:
    """A parsed source file with its resolved impl blocks."""
    source: SourceFile
    impls: List[ResolvedImpl] = field(default_factory=list)

    @property
    def file_path(self) -> str:
        return self.source.path


def self_type_name(impl: ImplDefinition) -> Optional[str]:
    """Get the `::`-joined path of the implementing type, if it is a path."""
    if isinstance(impl.self_ty, PathType):
        return impl.self_ty.joined()
    return None


def contract_name(files: Iterable[ResolvedFile], settings: Optional[Settings] = None) -> str:
    """
    Determine the name of the contract type.

    The first `#[near_bindgen]` struct wins; otherwise the first inherent
    impl type, then the first trait impl type, then the configured fallback.
    """
    settings = settings or Settings()
    files = list(files)
    for resolved in files:
        for item in resolved.source.items:
            if isinstance(item, StructDefinition) and has_attr(item.attrs, settings.bindgen_attr):
                return item.name
    for want_trait in (False, True):
        for resolved in files:
            for impl in resolved.impls:
                if impl.context.is_trait == want_trait and impl.context.self_name:
                    return impl.context.self_name
    return settings.contract_name


class InterfaceResolver:
    """
    Resolves `#[near_bindgen]` impl blocks against a populated TraitRegistry.

    The registry must already hold the traits of every input file before
    resolve() is called, so traits defined in later files are found.
    """

    def __init__(
        self,
        registry: TraitRegistry,
        classifier: Optional[AttributeClassifier] = None,
        translator: Optional[TypeTranslator] = None,
        extractor: Optional[DocExtractor] = None,
        settings: Optional[Settings] = None,
        diagnostics: Optional['Diagnostics'] = None,
    ):
        self._registry = registry
        self._settings = settings or Settings()
        self._classifier = classifier or AttributeClassifier(self._settings)
        self._translator = translator or TypeTranslator(diagnostics)
        self._extractor = extractor or DocExtractor()
        self._diagnostics = diagnostics

    def is_eligible(self, impl: ImplDefinition) -> bool:
        """Only impl blocks marked as contract-exposed are considered."""
        return not impl.negative and has_attr(impl.attrs, self._settings.bindgen_attr)

    def resolve(self, items: Iterable[Item], file_path: str = '') -> List[ResolvedImpl]:
        """
        Resolve every eligible impl block among a file's top-level items.

        Args:
            items: The file's top-level items
            file_path: Source file, for records and diagnostics

        Returns:
            One ResolvedImpl per eligible block in file order, including
            blocks that expose no methods
        """
        return [
            self.resolve_impl(item, file_path)
            for item in items
            if isinstance(item, ImplDefinition) and self.is_eligible(item)
        ]

    def resolve_file(self, source: SourceFile) -> ResolvedFile:
        return ResolvedFile(source=source, impls=self.resolve(source.items, source.path))

    def resolve_impl(self, impl: ImplDefinition, file_path: str = '') -> ResolvedImpl:
        context = self._context(impl, file_path)
        resolved = ResolvedImpl(context=context, file_path=file_path, line=impl.line)

        for method in impl.methods:
            if self._classifier.is_excluded(method.attrs):
                continue
            if not (is_public(method.visibility) or context.is_trait):
                continue
            resolved.methods.append(self._method_record(method, context, file_path))

        return resolved

    def _context(self, impl: ImplDefinition, file_path: str) -> ImplContext:
        self_type = self_type_name(impl)
        trait_name = impl.trait_name
        if trait_name is not None:
            interface = self._registry.lookup(trait_name)
            if interface is None and self._diagnostics is not None:
                self._diagnostics.info_unregistered_trait(trait_name, file_path, impl.line)
            return ImplContext(kind=ContextKind.TRAIT, name=trait_name,
                               self_type=self_type, interface=interface,
                               path=impl.trait_path.joined())

        return ImplContext(kind=ContextKind.INHERENT,
                           name=self_type or self._settings.contract_name,
                           self_type=self_type)

    def _parameter_names(self, sig: Signature, context: ImplContext) -> List[Optional[str]]:
        """Names of `sig`'s parameters, borrowing the trait's name where the impl uses a pattern."""
        names = [param.name for param in sig.params]
        declared = context.interface.signature_for(sig.name) if context.interface else None
        if declared is not None and len(declared.params) == len(sig.params):
            names = [name or other.name for name, other in zip(names, declared.params)]
        return names

    def _method_record(self, method: FunctionDefinition, context: ImplContext,
                       file_path: str) -> MethodRecord:
        sig = method.sig
        receiver = receiver_kind(sig)
        self_name = context.self_name

        params = []
        for param, name in zip(sig.params, self._parameter_names(sig, context)):
            if name is None:
                if self._diagnostics is not None:
                    self._diagnostics.warn_parameter_pattern(sig.name, param.pattern,
                                                             file_path, method.line)
                continue
            params.append(MethodParameter(
                name=name,
                ts_type=self._translator.translate(param.ty, file_path, method.line, self_name),
            ))

        docs = self._extractor.get_docs(method.attrs)
        if context.interface is not None:
            docs = self._extractor.merge(docs, context.interface.docs_for(sig.name))

        return MethodRecord(
            name=sig.name,
            params=params,
            return_type=self._translator.translate_return(sig.output, file_path, method.line,
                                                          self_name),
            receiver=receiver,
            role=self._classifier.classify(receiver, method.attrs),
            attrs=method.attrs,
            context=context,
            docs=docs,
            file_path=file_path,
            line=method.line,
        )
