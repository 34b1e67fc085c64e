"""
Documentation extraction from doc attributes.
"""

from typing import List

from ..parser.ast_nodes import Attribute


class DocExtractor:
    """
    Extracts the ordered doc lines of an item.

    Each `doc` attribute contributes exactly one line with a single leading
    space removed. No other reformatting is done, so fenced code blocks in
    doc comments keep their indentation.
    """

    def get_docs(self, attrs: List[Attribute]) -> List[str]:
        lines = []
        for attr in attrs:
            if not attr.is_doc:
                continue
            text = attr.value
            lines.append(text[1:] if text.startswith(' ') else text)
        return lines

    @staticmethod
    def merge(own: List[str], inherited: List[str]) -> List[str]:
        """Own lines first, then the trait's lines. No deduplication."""
        return list(own) + list(inherited)
