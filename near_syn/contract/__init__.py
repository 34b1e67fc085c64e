"""
Contract interface model for near-syn.

This module provides method role classification, doc extraction, the
cross-file trait registry and the resolver for `#[near_bindgen]` impl blocks.
"""

from .attributes import (
    MethodRole,
    ReceiverKind,
    AttributeClassifier,
    ROLE_MARKERS,
    CONSTRUCTOR_SUFFIX,
    has_attr,
    derives,
    is_public,
    receiver_kind,
)
from .docs import DocExtractor
from .registry import InterfaceDefinition, TraitRegistry
from .resolver import (
    ContextKind,
    ImplContext,
    MethodParameter,
    MethodRecord,
    ResolvedImpl,
    ResolvedFile,
    InterfaceResolver,
    contract_name,
    self_type_name,
)

__all__ = [
    'MethodRole',
    'ReceiverKind',
    'AttributeClassifier',
    'ROLE_MARKERS',
    'CONSTRUCTOR_SUFFIX',
    'has_attr',
    'derives',
    'is_public',
    'receiver_kind',
    'DocExtractor',
    'InterfaceDefinition',
    'TraitRegistry',
    'ContextKind',
    'ImplContext',
    'MethodParameter',
    'MethodRecord',
    'ResolvedImpl',
    'ResolvedFile',
    'InterfaceResolver',
    'contract_name',
    'self_type_name',
]
