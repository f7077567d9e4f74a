"""Abstract syntax tree for the rascal language.

Every node is an immutable dataclass that owns its children exclusively (sequences of children are tuples), so a tree
is finite, acyclic and never aliases a subtree. Node equality is structural: the source position a node was parsed
from is carried along for error messages but is not compared.

The set of node kinds is closed: the Evaluator keeps one handler per subclass of Node.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Tuple


@dataclass(frozen=True)
class Node:
    """Superclass of every syntax tree node."""


def _position():
    return field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Literal(Node):
    value: Any  # int or bool
    position: Any = _position()


@dataclass(frozen=True)
class Identifier(Node):
    name: str
    position: Any = _position()


@dataclass(frozen=True)
class UnaryOp(Node):
    operator: str
    operand: Node
    position: Any = _position()


@dataclass(frozen=True)
class BinaryOp(Node):
    operator: str  # one of + - * / % == != > < and or
    left: Node
    right: Node
    position: Any = _position()


@dataclass(frozen=True)
class Assignment(Node):
    name: str
    value: Node
    position: Any = _position()


@dataclass(frozen=True)
class Declaration(Node):
    name: str
    mutable: bool
    initializer: Node
    position: Any = _position()


@dataclass(frozen=True)
class Block(Node):
    statements: Tuple[Node, ...]
    position: Any = _position()


@dataclass(frozen=True)
class If(Node):
    condition: Node
    then_branch: Block
    else_branch: Optional[Node] = None  # Block, If (else-if chain) or None
    position: Any = _position()


@dataclass(frozen=True)
class While(Node):
    condition: Node
    body: Block
    position: Any = _position()


@dataclass(frozen=True)
class FunctionLiteral(Node):
    params: Tuple[str, ...]
    body: Block
    position: Any = _position()


@dataclass(frozen=True)
class Call(Node):
    callee: Node
    args: Tuple[Node, ...]
    position: Any = _position()


@dataclass(frozen=True)
class Return(Node):
    value: Node
    position: Any = _position()


def unparse(node, top_level=True):
    """Returns source text that parses back into a tree equal to node. Binary and unary operations are fully
    parenthesized, so the result does not depend on operator precedence. If top_level, node must be the Block produced
    for a whole program and its statements are not wrapped in braces.
    """
    if top_level and isinstance(node, Block):
        return "; ".join(unparse(stmt, False) for stmt in node.statements)

    if isinstance(node, Literal):
        if isinstance(node.value, bool):
            return "true" if node.value else "false"
        return str(node.value)

    elif isinstance(node, Identifier):
        return node.name

    elif isinstance(node, UnaryOp):
        return f"({node.operator}{unparse(node.operand, False)})"

    elif isinstance(node, BinaryOp):
        return f"({unparse(node.left, False)} {node.operator} {unparse(node.right, False)})"

    elif isinstance(node, Assignment):
        return f"{node.name} = {unparse(node.value, False)}"

    elif isinstance(node, Declaration):
        keyword = "var" if node.mutable else "let"
        return f"{keyword} {node.name} = {unparse(node.initializer, False)}"

    elif isinstance(node, Block):
        return "{ " + "; ".join(unparse(stmt, False) for stmt in node.statements) + " }"

    elif isinstance(node, If):
        result = f"if {unparse(node.condition, False)} {unparse(node.then_branch, False)}"
        if node.else_branch is not None:
            result += f" else {unparse(node.else_branch, False)}"
        return result

    elif isinstance(node, While):
        return f"while {unparse(node.condition, False)} {unparse(node.body, False)}"

    elif isinstance(node, FunctionLiteral):
        return f"fn [{', '.join(node.params)}] {unparse(node.body, False)}"

    elif isinstance(node, Call):
        callee = unparse(node.callee, False)
        if not isinstance(node.callee, (Identifier, Call)):
            callee = f"({callee})"
        return f"{callee}({', '.join(unparse(arg, False) for arg in node.args)})"

    elif isinstance(node, Return):
        return f"return {unparse(node.value, False)}"

    raise ValueError(f"cannot unparse {node!r}")


def display(node, indents=0):
    """Recursively displays a syntax tree in a readable format.

    Format:
    <Node>(<attr>=<value>, ...)
        <child Node>(...)
        ...
    """
    pad = "    " * indents
    attrs = []
    children = []

    for name, value in vars(node).items():
        if name == "position":
            continue
        elif isinstance(value, Node):
            children.append(value)
        elif isinstance(value, tuple) and value and all(isinstance(item, Node) for item in value):
            children.extend(value)
        elif value is not None:
            attrs.append(f"{name}={value!r}")

    result = f"{pad}{type(node).__name__}({', '.join(attrs)})"
    for child in children:
        result += "\n" + display(child, indents + 1)
    return result
