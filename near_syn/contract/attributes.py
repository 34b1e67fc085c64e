"""
Method role classification from attributes and receivers.

A contract method is exposed with one of four roles. The role drives the
marker shown in the documentation and whether the method is listed as a
view or change method in the bindings.
"""

from enum import Enum
from typing import List, Optional, Tuple

from ..parser.ast_nodes import Attribute, Signature
from ..settings import Settings


class MethodRole(Enum):
    """Externally visible role of a contract method."""
    VIEW = 'view'
    CALL = 'call'
    PAYABLE_CALL = 'payable'
    INIT = 'init'

    @property
    def is_change(self) -> bool:
        """True for every role that is sent as a transaction."""
        return self != MethodRole.VIEW


class ReceiverKind(Enum):
    """Mutability of a method receiver."""
    NONE = 'none'
    IMMUTABLE = 'immutable'
    MUTABLE = 'mutable'


ROLE_MARKERS = {
    MethodRole.INIT: ':rocket:',
    MethodRole.PAYABLE_CALL: '&#x24C3;',
    MethodRole.CALL: ':writing_hand:',
    MethodRole.VIEW: ':eyeglasses:',
}

CONSTRUCTOR_SUFFIX = ' (*constructor*)'


def _path_matches(path: str, name: str) -> bool:
    return path == name or path.endswith('::' + name)


def has_attr(attrs: List[Attribute], name: str) -> bool:
    """Check whether any attribute has path `name` (e.g. `near_bindgen` or `near_sdk::near_bindgen`)."""
    return any(_path_matches(attr.path, name) for attr in attrs)


def derives(attrs: List[Attribute], name: str) -> bool:
    """Check whether a `#[derive(...)]` attribute lists `name`."""
    for attr in attrs:
        if attr.path == 'derive' and any(_path_matches(arg, name) for arg in attr.args):
            return True
    return False


def is_public(visibility: str) -> bool:
    """Only a bare `pub` counts; `pub(crate)` and friends are not externally visible."""
    return visibility == 'pub'


def receiver_kind(sig: Signature) -> ReceiverKind:
    """`&mut self` and `mut self` are mutable; any other receiver is immutable."""
    if sig.receiver is None:
        return ReceiverKind.NONE
    if sig.receiver.mutable:
        return ReceiverKind.MUTABLE
    return ReceiverKind.IMMUTABLE


class AttributeClassifier:
    """Decides a method's role from its attributes and receiver mutability."""

    def __init__(self, settings: Optional[Settings] = None):
        self._settings = settings or Settings()

    def is_excluded(self, attrs: List[Attribute]) -> bool:
        """Private methods are dropped before classification, whatever their receiver."""
        return has_attr(attrs, self._settings.private_attr)

    def classify(self, receiver: ReceiverKind, attrs: List[Attribute]) -> MethodRole:
        """
        Classify a method.

        Args:
            receiver: The method's receiver mutability
            attrs: The method's attributes

        Returns:
            INIT if tagged as initializer, otherwise PAYABLE_CALL or CALL for
            mutable receivers, otherwise VIEW
        """
        if has_attr(attrs, self._settings.init_attr):
            return MethodRole.INIT
        if receiver == ReceiverKind.MUTABLE:
            if has_attr(attrs, self._settings.payable_attr):
                return MethodRole.PAYABLE_CALL
            return MethodRole.CALL
        return MethodRole.VIEW

    @staticmethod
    def display(role: MethodRole) -> Tuple[str, str]:
        """Return the (marker, suffix) pair shown next to a method name."""
        suffix = CONSTRUCTOR_SUFFIX if role == MethodRole.INIT else ''
        return ROLE_MARKERS[role], suffix
