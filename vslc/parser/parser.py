# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
VSL source → syntax tree.

The lark grammar (`grammar.lark`) produces a parse tree; the `_build_*`
helpers below turn it into `vslc.tree.Node`s with the shapes the symbol
engine expects:

  program              LIST(global...)
  FUNCTION             [IDENTIFIER_DATA, LIST(params), statement]
  GLOBAL_DECLARATION   [LIST(IDENTIFIER_DATA | ARRAY_INDEXING)]
  BLOCK                [LIST(VARIABLE_DECLARATION...)?, LIST(statement...)]
  VARIABLE_DECLARATION [LIST(IDENTIFIER_DATA...)]
  FUNCTION_CALL        [IDENTIFIER_DATA, LIST(args)]
  ARRAY_INDEXING       [IDENTIFIER_DATA, index]
  IF_STATEMENT         [RELATION, then, else?]
  WHILE_STATEMENT      [RELATION, body]
  PRINT_STATEMENT      [LIST(items)]

Integer literals must fit in a signed 64-bit value. Left-associative operator
runs are built iteratively, so their length is unbounded; parenthesised
nesting still recurses once per level and is limited by the interpreter
recursion limit.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from lark import Lark, Token, Tree

from vslc.core.span import Span
from vslc.tree.nodes import (
	Node,
	NodeKind,
	Operator,
	append_to_list_node,
	identifier,
	number,
	string,
)

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	start="program",
	propagate_positions=True,
	maybe_placeholders=False,
)


INT64_MAX = (1 << 63) - 1


class VslBuildError(ValueError):
	"""Parse tree shape the builder does not understand (grammar/builder mismatch)."""


class VslRangeError(ValueError):
	"""Integer literal outside the signed 64-bit range of NUMBER_DATA."""

	def __init__(self, message: str, span: Span) -> None:
		super().__init__(message)
		self.span = span


def parse_program(source: str, file: Optional[str] = None) -> Node:
	"""
	Parse VSL source into a tree rooted at a LIST of global items.

	Raises lark's `UnexpectedInput` on syntax errors and `VslRangeError` for
	literals outside 64 bits; `vslc.parser` wraps both into diagnostics for the
	driver.
	"""
	tree = _PARSER.parse(source)
	return _TreeBuilder(file).build_program(tree)


class _TreeBuilder:
	def __init__(self, file: Optional[str]) -> None:
		self._file = file

	def build_program(self, tree: Tree) -> Node:
		root = Node.create(NodeKind.LIST, span=self._span(tree))
		for child in _subtrees(tree):
			kind = _name(child)
			if kind == "function":
				append_to_list_node(root, self._build_function(child))
			elif kind == "global_declaration":
				append_to_list_node(root, self._build_global_declaration(child))
			else:
				raise VslBuildError(f"unexpected global item: {kind}")
		return root

	# --- declarations ---

	def _build_function(self, tree: Tree) -> Node:
		name_node, params_node, body_node = _subtrees(tree)
		params = self._list_of(params_node, self._build_identifier)
		return Node.create(
			NodeKind.FUNCTION,
			None,
			self._build_identifier(name_node),
			params,
			self._build_stmt(body_node),
			span=self._span(tree),
		)

	def _build_global_declaration(self, tree: Tree) -> Node:
		(variables,) = _subtrees(tree)
		items = self._list_of(variables, self._build_global_variable)
		return Node.create(NodeKind.GLOBAL_DECLARATION, None, items, span=self._span(tree))

	def _build_global_variable(self, tree: Tree) -> Node:
		if _name(tree) == "array_declaration":
			name_node, size_node = _subtrees(tree)
			return Node.create(
				NodeKind.ARRAY_INDEXING,
				None,
				self._build_identifier(name_node),
				self._build_number(size_node),
				span=self._span(tree),
			)
		return self._build_identifier(tree)

	def _build_block(self, tree: Tree) -> Node:
		children: List[Node] = []
		for part in _subtrees(tree):
			kind = _name(part)
			if kind == "declaration_list":
				children.append(self._list_of(part, self._build_variable_declaration))
			elif kind == "statement_list":
				children.append(self._list_of(part, self._build_stmt))
			else:
				raise VslBuildError(f"unexpected block part: {kind}")
		return Node.create(NodeKind.BLOCK, None, *children, span=self._span(tree))

	def _build_variable_declaration(self, tree: Tree) -> Node:
		(variables,) = _subtrees(tree)
		names = self._list_of(variables, self._build_identifier)
		return Node.create(NodeKind.VARIABLE_DECLARATION, None, names, span=self._span(tree))

	# --- statements ---

	def _build_stmt(self, tree: Tree) -> Node:
		kind = _name(tree)
		parts = _subtrees(tree)
		span = self._span(tree)
		if kind == "block":
			return self._build_block(tree)
		if kind == "assignment_statement":
			target, value = parts
			return Node.create(
				NodeKind.ASSIGNMENT_STATEMENT,
				None,
				self._build_expr(target),
				self._build_expr(value),
				span=span,
			)
		if kind == "return_statement":
			return Node.create(NodeKind.RETURN_STATEMENT, None, self._build_expr(parts[0]), span=span)
		if kind == "print_statement":
			items = self._list_of(parts[0], self._build_print_item)
			return Node.create(NodeKind.PRINT_STATEMENT, None, items, span=span)
		if kind == "break_statement":
			return Node.create(NodeKind.BREAK_STATEMENT, span=span)
		if kind == "if_statement":
			children = [self._build_relation(parts[0])]
			children.extend(self._build_stmt(part) for part in parts[1:])
			return Node.create(NodeKind.IF_STATEMENT, None, *children, span=span)
		if kind == "while_statement":
			relation_node, body = parts
			return Node.create(
				NodeKind.WHILE_STATEMENT,
				None,
				self._build_relation(relation_node),
				self._build_stmt(body),
				span=span,
			)
		if kind == "function_call":
			return self._build_call(tree)
		raise VslBuildError(f"unsupported statement: {kind}")

	def _build_print_item(self, tree: Tree) -> Node:
		if _name(tree) == "string":
			token = tree.children[0]
			return string(token.value, span=self._span(token))
		return self._build_expr(tree)

	def _build_relation(self, tree: Tree) -> Node:
		left, op_node, right = _subtrees(tree)
		return Node.create(
			NodeKind.RELATION,
			Operator(_op_value(op_node)),
			self._build_expr(left),
			self._build_expr(right),
			span=self._span(tree),
		)

	# --- expressions ---

	def _build_expr(self, tree: Tree) -> Node:
		kind = _name(tree)
		span = self._span(tree)
		if kind == "binary":
			return self._build_binary_chain(tree)
		if kind == "negation":
			(operand,) = _subtrees(tree)
			return Node.create(NodeKind.EXPRESSION, Operator("-"), self._build_expr(operand), span=span)
		if kind == "number":
			return self._build_number(tree)
		if kind == "identifier":
			return self._build_identifier(tree)
		if kind == "array_indexing":
			name_node, index = _subtrees(tree)
			return Node.create(
				NodeKind.ARRAY_INDEXING,
				None,
				self._build_identifier(name_node),
				self._build_expr(index),
				span=span,
			)
		if kind == "function_call":
			return self._build_call(tree)
		raise VslBuildError(f"unsupported expression node: {kind}")

	def _build_binary_chain(self, tree: Tree) -> Node:
		"""
		Build a left-associative run such as `a - b - c - ...` without
		recursing once per operator: walk down the left spine first, then
		attach right operands from the innermost node outward.
		"""
		spine: List[Tree] = []
		while _name(tree) == "binary":
			spine.append(tree)
			tree = _subtrees(tree)[0]
		result = self._build_expr(tree)
		for link in reversed(spine):
			_left, op_node, right = _subtrees(link)
			result = Node.create(
				NodeKind.EXPRESSION,
				Operator(_op_value(op_node)),
				result,
				self._build_expr(right),
				span=self._span(link),
			)
		return result

	def _build_call(self, tree: Tree) -> Node:
		name_node, args_node = _subtrees(tree)
		args = self._list_of(args_node, self._build_expr)
		return Node.create(
			NodeKind.FUNCTION_CALL,
			None,
			self._build_identifier(name_node),
			args,
			span=self._span(tree),
		)

	# --- leaves ---

	def _build_identifier(self, tree: Tree) -> Node:
		if _name(tree) != "identifier":
			raise VslBuildError(f"expected identifier, got {_name(tree)}")
		token = tree.children[0]
		return identifier(token.value, span=self._span(token))

	def _build_number(self, tree: Tree) -> Node:
		token = tree.children[0]
		span = self._span(token)
		value = int(token.value)
		if value > INT64_MAX:
			raise VslRangeError(f"integer literal {token.value} does not fit in 64 bits", span)
		return number(value, span=span)

	def _list_of(self, tree: Tree, build) -> Node:
		"""Fold the subtrees of `tree` into a LIST node, one element at a time."""
		result = Node.create(NodeKind.LIST, span=self._span(tree))
		for child in _subtrees(tree):
			result = append_to_list_node(result, build(child))
		return result

	def _span(self, node: Tree | Token) -> Span:
		meta = node if isinstance(node, Token) else node.meta
		return Span.from_meta(meta, file=self._file)


def _subtrees(tree: Tree) -> List[Tree]:
	return [child for child in tree.children if isinstance(child, Tree)]


def _op_value(tree: Tree) -> str:
	token = next(child for child in tree.children if isinstance(child, Token))
	return token.value


def _name(node: Tree | Token) -> str:
	if isinstance(node, Tree):
		data = node.data
		if isinstance(data, Token):
			return data.value
		return data
	if isinstance(node, Token):
		return node.type
	return str(node)


__all__ = ["INT64_MAX", "VslBuildError", "VslRangeError", "parse_program"]
