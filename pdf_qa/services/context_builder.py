"""
Builds the bounded grounding context handed to the answer generator.
"""

from typing import Callable, Optional

from .document_store import DocumentStore

ALL_DOCUMENTS = "all"

ExcerptStrategy = Callable[[str, int], str]


def truncate_head(text: str, budget: int) -> str:
    """Keep the first ``budget`` characters (titles and summaries tend to live there)."""
    return text[:budget]


class ContextAssembler:
    """
    Turns a document selector into plain-text context.

    Selector values: ``None`` for no context, ``"all"`` for every stored
    document, anything else is treated as a document id. The excerpt strategy
    may be swapped out; the result never exceeds ``budget`` characters.
    """

    def __init__(self, store: DocumentStore, budget: int = 3000, excerpt: ExcerptStrategy = truncate_head):
        if budget <= 0:
            raise ValueError("Context budget must be positive")
        self.store = store
        self.budget = budget
        self.excerpt = excerpt

    def build_context(self, selector: Optional[str]) -> str:
        if not selector:
            return ""

        if selector == ALL_DOCUMENTS:
            text = self.store.all_text(separator="\n\n")
        else:
            # Unknown ids raise DocumentNotFoundError
            text = self.store.get(selector).extracted_text

        if not text:
            return ""
        return self.excerpt(text, self.budget)[:self.budget]
