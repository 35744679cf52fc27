from .product_index import ProductIndex
from .trie import SuggestionTrie, TrieNode

__all__ = ["ProductIndex", "SuggestionTrie", "TrieNode"]
