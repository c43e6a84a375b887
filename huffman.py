import heapq
from collections import Counter


class HuffmanError(ValueError): # base class for every coding failure
    pass

class MalformedStreamError(HuffmanError): # bitstring is not a valid encoding for the tree
    def __init__(self, message, position):
        super().__init__(f"{message} (at bit {position})")
        self.position = position

class DegenerateAlphabetError(HuffmanError): # fewer than two distinct symbols
    def __init__(self, symbols):
        super().__init__(f"need at least 2 distinct symbols to build a code, got {symbols}")
        self.symbols = symbols

class UnknownSymbolError(HuffmanError): # symbol has no entry in the code table
    def __init__(self, symbol, position):
        super().__init__(f"no code for symbol {symbol!r} at position {position}")
        self.symbol = symbol
        self.position = position


class HuffmanNode: # Node for Huffman tree
    def __init__(self, symbol, weight, order = 0):
        self.symbol = symbol    # character or None
        self.weight = weight
        self.order = order      # queue insertion sequence, used to break weight ties
        self.left = None
        self.right = None

    def is_leaf(self):
        return self.left is None and self.right is None

    def __lt__(self, other):
        return (self.weight, self.order) < (other.weight, other.order) # min-heap on weight, FIFO on ties

    def __repr__(self):
        if self.is_leaf():
            return f"HuffmanNode({self.symbol!r}, {self.weight})"
        return f"HuffmanNode(None, {self.weight})"


class HuffmanTree:
    def __init__(self, root = None):
        self.root = root

    @property
    def is_empty(self):
        return self.root is None

    @property
    def weight(self): # total weight, equals the length of the input text
        return 0 if self.root is None else self.root.weight

    def leaves(self):
        """
        Yields (symbol, weight, depth) for every leaf, left to right
        """
        stack = [(self.root, 0)] if self.root is not None else []
        while stack:
            node, depth = stack.pop()
            if node.is_leaf():
                yield node.symbol, node.weight, depth
                continue
            stack.append((node.right, depth + 1))
            stack.append((node.left, depth + 1))

    @property
    def height(self):
        return max((depth for _, _, depth in self.leaves()), default=0)


def count_frequencies(text: str) -> Counter: # text: any string, empty gives an empty map
    return Counter(text)

def merge_frequencies(*maps) -> Counter: # combine partial counts from shards of one input
    total = Counter()
    for m in maps:
        total.update(m)
    return total


def build_tree(frequency_table, strict: bool = False) -> HuffmanTree: # frequency_table: dict of symbol -> count
    for symbol, count in frequency_table.items():
        if not isinstance(count, int) or count <= 0:
            raise ValueError(f"frequency of {symbol!r} must be a positive integer, got {count!r}")

    if strict and len(frequency_table) < 2:
        raise DegenerateAlphabetError(len(frequency_table))

    # Leaves enter the queue in (weight, symbol) order so tree shape is reproducible
    leaves = sorted(frequency_table.items(), key=lambda item: (item[1], item[0]))
    priority_queue = [HuffmanNode(symbol, count, order) for order, (symbol, count) in enumerate(leaves)]
    heapq.heapify(priority_queue)
    next_order = len(priority_queue)

    while len(priority_queue) > 1:
        right = heapq.heappop(priority_queue) # smallest goes right
        left = heapq.heappop(priority_queue)
        merged_node = HuffmanNode(None, left.weight + right.weight, next_order)
        merged_node.left = left
        merged_node.right = right
        next_order += 1
        heapq.heappush(priority_queue, merged_node)

    return HuffmanTree(priority_queue[0] if priority_queue else None)


def generate_code_table(tree: HuffmanTree) -> dict: # symbol -> code string of '0'/'1'
    codes = {}
    if tree.is_empty:
        return codes

    # Single symbol alphabet: the lone leaf is the root, give it a one bit code
    if tree.root.is_leaf():
        codes[tree.root.symbol] = "0"
        return codes

    def generate_codes_helper(node, current_code):
        if node.is_leaf():
            codes[node.symbol] = current_code
            return

        generate_codes_helper(node.left, current_code + '0')
        generate_codes_helper(node.right, current_code + '1')

    generate_codes_helper(tree.root, '')
    return codes


def encode(text: str, code_table: dict) -> str:
    parts = []
    for position, symbol in enumerate(text):
        code = code_table.get(symbol)
        if code is None:
            raise UnknownSymbolError(symbol, position)
        parts.append(code)
    return ''.join(parts)


def decode(tree: HuffmanTree, bitstring: str) -> str: # bitstring: the encoded string of '0's and '1's
    if not bitstring:
        return ''
    if tree.is_empty:
        raise MalformedStreamError("cannot decode bits with an empty tree", 0)

    root = tree.root
    decoded = []

    if root.is_leaf():
        for position, bit in enumerate(bitstring):
            if bit != '0':
                raise MalformedStreamError(f"unexpected bit {bit!r} for single symbol code", position)
            decoded.append(root.symbol)
        return ''.join(decoded)

    current_node = root
    for position, bit in enumerate(bitstring):
        if bit == '0':
            current_node = current_node.left
        elif bit == '1':
            current_node = current_node.right
        else:
            raise MalformedStreamError(f"invalid bit {bit!r}", position)

        if current_node.is_leaf(): # reached a leaf
            decoded.append(current_node.symbol)
            current_node = root # reset to the root for the next symbol

    if current_node is not root:
        raise MalformedStreamError("bitstring ends in the middle of a code", len(bitstring))

    return ''.join(decoded)
