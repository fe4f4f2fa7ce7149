from typing import Dict, Iterator, Optional

from pqueue import MinHeapPQ


# Errors

class HuffmanError(Exception):
    """Base class for every failure raised by the compression pipeline"""

class HeaderMalformedError(HuffmanError, ValueError):
    pass

class UnknownSymbolError(HuffmanError, KeyError):
    def __init__(self, symbol):
        super().__init__(symbol)
        self.symbol = symbol

    def __str__(self):
        return f"no code for symbol {self.symbol}"

class IncompleteCodeError(HuffmanError, ValueError):
    pass

class TreeError(HuffmanError):
    pass

class EmptyTreeError(TreeError):
    pass

class PrefixCollisionError(TreeError):
    def __init__(self, prefix: str, code: str):
        super().__init__(f"prefix collision: {prefix!r} and {code!r}")
        self.prefix = prefix
        self.code = code


class HuffmanNode: # Node for Huffman tree
    __slots__ = ("symbol", "frequency", "left", "right")

    def __init__(self, symbol, frequency, left=None, right=None):
        self.symbol = symbol    # byte or None
        self.frequency = frequency
        self.left = left
        self.right = right

    def is_leaf(self) -> bool:
        return self.left is None and self.right is None

    def leaves(self) -> Iterator["HuffmanNode"]: # left-to-right leaf walk
        stack = [self]
        while stack:
            node = stack.pop()
            if node.is_leaf():
                yield node
            else:
                stack.append(node.right)
                stack.append(node.left)

    def __repr__(self):
        if self.is_leaf():
            return f"HuffmanNode(symbol={self.symbol}, frequency={self.frequency})"
        return f"HuffmanNode(frequency={self.frequency})"


def analyze_frequency(data: bytes) -> Dict[int, int]: # data: input bytes, returns symbol -> count
    table: Dict[int, int] = {}
    for b in data:
        table[b] = table.get(b, 0) + 1

    total = sum(table.values())
    if total != len(data):
        raise ValueError(f"frequency sum mismatch: {total} vs {len(data)}")
    return table


def build_huffman_tree(frequency_table: Dict[int, int]) -> HuffmanNode: # frequency_table: dict of symbol -> frequency
    if not frequency_table:
        raise EmptyTreeError("can't build a tree from an empty frequency table")

    # Leaves go in by ascending symbol so equal weights always merge in the same order
    queue = MinHeapPQ()
    for symbol in sorted(frequency_table):
        frequency = frequency_table[symbol]
        if frequency <= 0:
            raise ValueError(f"frequency for symbol {symbol} must be positive, got {frequency}")
        queue.insert(HuffmanNode(symbol, frequency), frequency)

    while len(queue) > 1:
        left = queue.extract_min()
        right = queue.extract_min()
        merged = HuffmanNode(None, left.frequency + right.frequency, left, right) # internal node with combined frequency
        queue.insert(merged, merged.frequency)

    return queue.extract_min() # root of the tree


def generate_huffman_codes(root: Optional[HuffmanNode]) -> Dict[int, str]: # root: root of the Huffman tree
    if root is None:
        raise EmptyTreeError("can't generate codes without a tree")

    # Single distinct symbol: the natural path is empty, so use "0"
    if root.is_leaf():
        return {root.symbol: "0"}

    codes: Dict[int, str] = {}
    stack = [(root, "")]
    while stack:
        node, code = stack.pop()
        if node.is_leaf():
            codes[node.symbol] = code
            continue
        if node.left is None or node.right is None:
            raise TreeError(f"internal node with a missing child: {node!r}")
        stack.append((node.right, code + "1"))
        stack.append((node.left, code + "0"))

    check_prefix_free(codes)
    return codes


def check_prefix_free(codes: Dict[int, str]) -> None:
    """
    Insert every code into a binary trie; a code that walks through or lands on
    an existing terminal (or leaves children under itself) collides with another.
    """
    trie: dict = {}
    terminal = "$"
    for code in codes.values():
        if not code:
            raise PrefixCollisionError("", code)
        node = trie
        for bit in code:
            if terminal in node:
                raise PrefixCollisionError(node[terminal], code)
            node = node.setdefault(bit, {})
        if terminal in node:
            raise PrefixCollisionError(node[terminal], code)
        if "0" in node or "1" in node:
            raise PrefixCollisionError(code, _any_code_below(node, terminal))
        node[terminal] = code


def _any_code_below(node: dict, terminal: str) -> str:
    while terminal not in node:
        node = node["0"] if "0" in node else node["1"]
    return node[terminal]


def tree_weight(root: HuffmanNode) -> int: # sum of leaf weights
    return sum(leaf.frequency for leaf in root.leaves())
