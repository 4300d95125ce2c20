import ast
import logging

from typing import List, Dict, Tuple, Any
from orthoclade.exceptions import MalformedTreeError
from orthoclade.tree import Node

logger = logging.getLogger(__name__)

_WHITESPACE = {" ", "\t", "\r", "\n"}


# ===================================================================
# 1. METADATA PROCESSING FUNCTIONS
# ===================================================================


def split_token(token: str) -> Tuple[str, Any]:
    """
    Split a token into name and value parts.
    Handles both "name=value" and "name:value" formats for metadata.

    Args:
        token: A string token in format "name=value" or "name:value"

    Returns:
        Tuple of (name, parsed_value) where parsed_value could be string, int, or float
    """
    if "=" in token:
        name, value = token.split("=", 1)
    elif ":" in token:
        name, value = token.split(":", 1)
    else:
        return token, True

    try:
        parsed_value = ast.literal_eval(value)
    except (ValueError, SyntaxError):
        parsed_value = value

    return name, parsed_value


def flush_meta_buffer(meta_buffer: List[str], stack: List[Node]) -> None:
    """
    Process the metadata buffer and update the current node's ``values``.

    Handles NHX comments (``&&NHX:key=value:key=value``) and generic
    ``key=value`` lists separated by commas or spaces.
    """
    meta_string = "".join(meta_buffer).strip()

    if meta_string.startswith("&&NHX:"):
        tokens = meta_string[6:].split(":")
    else:
        meta_string = meta_string.lstrip("&")
        meta_string = meta_string.replace(";", ",").replace(" ", ",")
        tokens = meta_string.split(",")

    metadata: Dict[str, Any] = {}
    for token in tokens:
        if token.strip():
            name, value = split_token(token.strip())
            metadata[name] = value

    if metadata and stack:
        stack[-1].values.update(metadata)

    meta_buffer.clear()


# ===================================================================
# 2. BUFFER PROCESSING FUNCTIONS
# ===================================================================


def flush_character_buffer(buffer: List[str], stack: List[Node]) -> None:
    """Assign the buffered characters as the name of the current node."""
    if buffer and stack:
        stack[-1].name = "".join(buffer)
    buffer.clear()


def flush_length_buffer(buffer: List[str], stack: List[Node]) -> None:
    """
    Parse the buffered characters as the branch length of the current node.

    An empty buffer (``A:``) leaves the length unset.

    Raises:
        MalformedTreeError: If the buffer is not a finite non-negative number.
    """
    buffer_value = "".join(buffer).strip()
    buffer.clear()
    if not stack or not buffer_value:
        return

    try:
        parsed_number = float(buffer_value)
    except ValueError:
        raise MalformedTreeError(f"Invalid branch length '{buffer_value}'")

    if parsed_number != parsed_number or parsed_number in (
        float("inf"),
        float("-inf"),
    ):
        raise MalformedTreeError(f"Invalid branch length '{buffer_value}'")
    if parsed_number < 0:
        raise MalformedTreeError(f"Negative branch length '{buffer_value}'")
    stack[-1].length = parsed_number


def flush_buffer(buffer: List[str], stack: List[Node], mode: str) -> None:
    """
    Process the accumulated buffer based on the current parsing mode.

    Args:
        buffer: List of characters accumulated during parsing
        stack: The current stack of nodes being processed
        mode: Current parsing mode ("character_reader" or "length_reader")
    """
    if mode == "character_reader":
        flush_character_buffer(buffer, stack)
    elif mode == "length_reader":
        flush_length_buffer(buffer, stack)


# ===================================================================
# 3. NODE STACK MANAGEMENT FUNCTIONS
# ===================================================================


def init_nodestack() -> List[Node]:
    """Initialize the node stack with the root node."""
    return [Node(name="")]


def create_new_node(stack: List[Node]) -> List[Node]:
    """Create a new node as the last child of the top node and push it."""
    parent = stack[-1]
    new_node = Node()
    parent.children.append(new_node)
    new_node.parent = parent
    stack.append(new_node)
    return stack


def close_node(stack: List[Node]) -> List[Node]:
    """Pop the current node; the root is never popped."""
    if len(stack) <= 1:
        raise MalformedTreeError("Unbalanced parentheses in Newick string")
    stack.pop()
    return stack


# ===================================================================
# 4. CORE PARSING FUNCTIONS
# ===================================================================


def _read_quoted(tokens: str, index: int, buffer: List[str]) -> int:
    """
    Read a single-quoted label starting at ``tokens[index] == "'"``.

    Returns the index of the closing quote. Two consecutive quotes inside the
    label stand for one literal quote.
    """
    index += 1
    while index < len(tokens):
        char = tokens[index]
        if char == "'":
            if index + 1 < len(tokens) and tokens[index + 1] == "'":
                buffer.append("'")
                index += 2
                continue
            return index
        buffer.append(char)
        index += 1
    raise MalformedTreeError("Unterminated quoted label in Newick string")


def _parse_newick(tokens: str) -> Node:
    """
    Parse the first tree of a Newick string, character by character.

    Raises:
        MalformedTreeError: on unbalanced parentheses, stray separators,
            bad branch lengths or when no tree is present.
    """
    buffer: List[str] = []
    meta_buffer: List[str] = []
    mode: str = "character_reader"
    node_stack: List[Node] = init_nodestack()
    depth = 0
    seen_content = False
    after_space = False

    index = 0
    while index < len(tokens):
        char = tokens[index]

        if mode == "metadata_reader":
            if char == "]":
                flush_meta_buffer(meta_buffer, node_stack)
                mode = "character_reader"
            else:
                meta_buffer.append(char)

        elif char in _WHITESPACE:
            after_space = bool(buffer) and mode == "character_reader"

        elif char == "'" and mode == "character_reader":
            index = _read_quoted(tokens, index, buffer)
            seen_content = True

        elif char == "(":
            depth += 1
            create_new_node(node_stack)
            mode = "character_reader"
            seen_content = True

        elif char == ")":
            flush_buffer(buffer, node_stack, mode)
            depth -= 1
            if depth < 0:
                raise MalformedTreeError("Unbalanced parentheses in Newick string")
            close_node(node_stack)
            mode = "character_reader"

        elif char == ",":
            if depth == 0:
                raise MalformedTreeError("Separator ',' outside of parentheses")
            flush_buffer(buffer, node_stack, mode)
            close_node(node_stack)
            create_new_node(node_stack)
            mode = "character_reader"

        elif char == ":":
            flush_buffer(buffer, node_stack, mode)
            mode = "length_reader"

        elif char == "[":
            flush_buffer(buffer, node_stack, mode)
            mode = "metadata_reader"

        elif char == ";":
            flush_buffer(buffer, node_stack, mode)
            if depth != 0:
                raise MalformedTreeError("Unbalanced parentheses in Newick string")
            if tokens[index + 1 :].strip():
                logger.debug("Ignoring content after the first tree")
            return node_stack[0]

        else:
            if after_space:
                logger.warning(
                    f"Dropped whitespace inside unquoted label starting "
                    f"'{''.join(buffer)}'; quote labels that contain spaces"
                )
            buffer.append(char)
            seen_content = True

        if char not in _WHITESPACE:
            after_space = False
        index += 1

    if mode == "metadata_reader":
        raise MalformedTreeError("Unterminated comment in Newick string")
    flush_buffer(buffer, node_stack, mode)
    if depth != 0:
        raise MalformedTreeError("Unbalanced parentheses in Newick string")
    if not seen_content and not node_stack[0].name:
        raise MalformedTreeError("No tree found in Newick string")
    return node_stack[0]


# ===================================================================
# 5. PUBLIC API FUNCTIONS
# ===================================================================


def parse_newick(tokens: str) -> Node:
    """
    Parse a Newick string into a tree.

    Only the first tree is read; anything after its terminating ``;`` is
    ignored.

    Args:
        tokens: Newick format string

    Returns:
        The root Node of the parsed tree, validated.

    Raises:
        MalformedTreeError: If the string is empty, unbalanced, has invalid
            branch lengths, or yields unnamed leaves.
    """
    if not tokens or not tokens.strip() or tokens.strip() == ";":
        raise MalformedTreeError("No tree found in Newick string")

    root = _parse_newick(tokens)
    root.validate()
    return root
