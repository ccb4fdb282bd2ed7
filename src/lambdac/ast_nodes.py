"""AST node definitions for the lambdac language."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from lambdac.tokens import Token, TokenKind


class NodeKind(Enum):
    PROGRAM = "Program"
    IDENTIFIER = "Identifier"
    MODULE = "Module"
    STRING = "String"

    @classmethod
    def for_token(cls, kind: TokenKind) -> NodeKind:
        try:
            return _TOKEN_NODES[kind]
        except KeyError:
            raise ValueError(f"no AST node for token kind {kind.name}") from None


_TOKEN_NODES: dict[TokenKind, NodeKind] = {
    TokenKind.IDENTIFIER: NodeKind.IDENTIFIER,
    TokenKind.MODULE: NodeKind.MODULE,
    TokenKind.STRING: NodeKind.STRING,
}


@dataclass(frozen=True)
class ASTNode:
    """A tree node: kind, originating token, ordered children.

    Nodes are values. Growing a tree always builds new nodes via
    ``append_child`` and ``replace_last_child``; children already in a tree
    are never touched.
    """

    kind: NodeKind
    token: Token | None = None
    children: tuple[ASTNode, ...] = ()

    @classmethod
    def from_token(cls, token: Token) -> ASTNode:
        return cls(NodeKind.for_token(token.kind), token)

    def append_child(self, child: ASTNode) -> ASTNode:
        return replace(self, children=self.children + (child,))

    def last_child(self) -> ASTNode | None:
        if not self.children:
            return None
        return self.children[-1]

    def replace_last_child(self, child: ASTNode) -> ASTNode | None:
        """Swap the last child for ``child``; None if there is no child."""
        if not self.children:
            return None
        return replace(self, children=self.children[:-1] + (child,))

    def __str__(self) -> str:
        if self.kind is not NodeKind.PROGRAM and not self.children:
            literal = self.token.literal if self.token is not None else ""
            return f"{self.kind.value}({literal})"
        return f"{self.kind.value}({', '.join(str(c) for c in self.children)})"
