# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Tree engine: node model, dumps and the simplification passes.

Entry points (stage API):
  - Node.create / append_to_list_node: construction
  - format_tree / print_syntax_tree: dumps
  - destroy_subtree: release
  - simplify_tree: constant folding + peephole
"""

from .nodes import (
	Identifier,
	Node,
	NodeKind,
	Number,
	Operator,
	Payload,
	PoolRef,
	StringLiteral,
	SymbolRef,
	TreeContractError,
	append_to_list_node,
	destroy_subtree,
	expression,
	identifier,
	iter_nodes,
	list_node,
	number,
	relation,
	string,
)
from .printer import format_graphviz, format_tree, print_syntax_tree
from .simplify import constant_fold_node, peephole_optimize_node, simplify_tree

__all__ = [
	"Identifier",
	"Node",
	"NodeKind",
	"Number",
	"Operator",
	"Payload",
	"PoolRef",
	"StringLiteral",
	"SymbolRef",
	"TreeContractError",
	"append_to_list_node",
	"constant_fold_node",
	"destroy_subtree",
	"expression",
	"format_graphviz",
	"format_tree",
	"identifier",
	"iter_nodes",
	"list_node",
	"number",
	"peephole_optimize_node",
	"print_syntax_tree",
	"relation",
	"simplify_tree",
	"string",
]
