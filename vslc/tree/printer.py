# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Tree dumps.

Two renderings, both side-effect free on the tree:
  - the indented text dump: one line per node, one space per depth level,
    `KIND` plus `(payload)` for payload-bearing kinds;
  - a DOT graph description (via pydot), selected by the GRAPHVIZ_OUTPUT
    environment variable or an explicit `graphviz=True`.

Callers that have bound the tree can pass a `describe_symbol` callback; the
text dump then appends the resolved symbol to identifier lines.
"""

from __future__ import annotations

import os
import sys
from typing import Callable, List, Optional, TextIO

import pydot

from .nodes import Node, NodeKind

GRAPHVIZ_ENV = "GRAPHVIZ_OUTPUT"

SymbolDescriber = Callable[[Node], Optional[str]]


def graphviz_requested() -> bool:
	return os.environ.get(GRAPHVIZ_ENV) is not None


def node_label(node: Node) -> str:
	if node.data is None:
		return node.kind.value
	return f"{node.kind.value}({node.data.label()})"


def format_tree(node: Optional[Node], describe_symbol: Optional[SymbolDescriber] = None) -> str:
	if node is None:
		return "(NULL)"
	lines: List[str] = []
	stack = [(node, 0)]
	while stack:
		current, nesting = stack.pop()
		line = " " * nesting + node_label(current)
		if describe_symbol is not None and current.kind is NodeKind.IDENTIFIER_DATA:
			bound = describe_symbol(current)
			if bound is not None:
				line = f"{line} -> {bound}"
		lines.append(line)
		stack.extend((child, nesting + 1) for child in reversed(current.children))
	return "\n".join(lines)


def build_graph(node: Optional[Node]) -> pydot.Dot:
	"""Build a DOT digraph with one vertex per node and parent→child edges."""
	graph = pydot.Dot("syntax_tree", graph_type="digraph")
	if node is None:
		return graph
	counter = 0
	stack = [(node, None)]
	while stack:
		current, parent_id = stack.pop()
		vertex_id = f"n{counter}"
		counter += 1
		# Quote explicitly: labels carry operators and string literals.
		label = node_label(current).replace("\\", "\\\\").replace('"', '\\"')
		graph.add_node(pydot.Node(vertex_id, label=f'"{label}"', shape="box"))
		if parent_id is not None:
			graph.add_edge(pydot.Edge(parent_id, vertex_id))
		for child in reversed(current.children):
			stack.append((child, vertex_id))
	return graph


def format_graphviz(node: Optional[Node]) -> str:
	return build_graph(node).to_string()


def print_syntax_tree(
	node: Optional[Node],
	*,
	graphviz: Optional[bool] = None,
	describe_symbol: Optional[SymbolDescriber] = None,
	file: Optional[TextIO] = None,
) -> None:
	"""Print the tree to `file` (stdout by default)."""
	if file is None:
		file = sys.stdout
	if graphviz is None:
		graphviz = graphviz_requested()
	if graphviz:
		print(format_graphviz(node), file=file)
	else:
		print(format_tree(node, describe_symbol), file=file)


__all__ = [
	"GRAPHVIZ_ENV",
	"build_graph",
	"format_graphviz",
	"format_tree",
	"graphviz_requested",
	"node_label",
	"print_syntax_tree",
]
