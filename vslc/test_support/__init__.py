# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Shared tree builders for tests.

They spell out the node shapes the parser produces so tests can build trees
in memory without going through the grammar.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from vslc.context import CompilationContext
from vslc.tree.nodes import Node, NodeKind, identifier, list_node, number


def ident(name: str) -> Node:
	return identifier(name)


def num(value: int) -> Node:
	return number(value)


def program(*items: Node) -> Node:
	return list_node(*items)


def function(name: str, params: Sequence[str], body: Node) -> Node:
	return Node.create(
		NodeKind.FUNCTION,
		None,
		identifier(name),
		list_node(*(identifier(p) for p in params)),
		body,
	)


def global_vars(*names: str) -> Node:
	return Node.create(NodeKind.GLOBAL_DECLARATION, None, list_node(*(identifier(n) for n in names)))


def global_array(name: str, size: int) -> Node:
	item = Node.create(NodeKind.ARRAY_INDEXING, None, identifier(name), number(size))
	return Node.create(NodeKind.GLOBAL_DECLARATION, None, list_node(item))


def var_decl(*names: str) -> Node:
	return Node.create(NodeKind.VARIABLE_DECLARATION, None, list_node(*(identifier(n) for n in names)))


def block(declarations: Iterable[Node], statements: Iterable[Node]) -> Node:
	declarations = list(declarations)
	children = []
	if declarations:
		children.append(list_node(*declarations))
	children.append(list_node(*statements))
	return Node.create(NodeKind.BLOCK, None, *children)


def assign(target: str | Node, value: Node) -> Node:
	target_node = identifier(target) if isinstance(target, str) else target
	return Node.create(NodeKind.ASSIGNMENT_STATEMENT, None, target_node, value)


def ret(value: Node) -> Node:
	return Node.create(NodeKind.RETURN_STATEMENT, None, value)


def print_stmt(*items: Node) -> Node:
	return Node.create(NodeKind.PRINT_STATEMENT, None, list_node(*items))


def call(name: str, *args: Node) -> Node:
	return Node.create(NodeKind.FUNCTION_CALL, None, identifier(name), list_node(*args))


def index(name: str, position: Node) -> Node:
	return Node.create(NodeKind.ARRAY_INDEXING, None, identifier(name), position)


def resolved(ctx: CompilationContext, node: Node) -> str | None:
	"""`KIND(name)#seq` of the symbol bound to `node`, or None."""
	symbol = ctx.symbol_for(node)
	if symbol is None:
		return None
	return f"{symbol.describe()}#{symbol.sequence_number}"


__all__ = [
	"assign",
	"block",
	"call",
	"function",
	"global_array",
	"global_vars",
	"ident",
	"index",
	"num",
	"print_stmt",
	"program",
	"resolved",
	"ret",
	"var_decl",
]
