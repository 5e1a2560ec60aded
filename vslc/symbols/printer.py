# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Symbol table and string pool dumps.

Table lines read `<seq>: <KIND>(<name>)`; a function's local table follows its
symbol, indented one level (four spaces) deeper.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, List, Optional, TextIO

from vslc.tree.nodes import Node
from vslc.tree.printer import print_syntax_tree

from .pool import StringPool
from .table import SymbolKind, SymbolTable

if TYPE_CHECKING:
	from vslc.context import CompilationContext

_INDENT = "    "


def format_symbol_table(table: SymbolTable, nesting: int = 0) -> str:
	lines: List[str] = []
	_format_table(table, nesting, lines)
	return "\n".join(lines)


def _format_table(table: SymbolTable, nesting: int, lines: List[str]) -> None:
	for symbol in table:
		lines.append(f"{_INDENT * nesting}{symbol.sequence_number}: {symbol.describe()}")
		if symbol.kind is SymbolKind.FUNCTION and symbol.function_table is not None:
			_format_table(symbol.function_table, nesting + 1, lines)


def format_string_list(pool: StringPool) -> str:
	return "\n".join(f"{index}: {text}" for index, text in pool.items())


def format_tables(ctx: "CompilationContext") -> str:
	"""Global table (with nested function tables) followed by the string list."""
	parts = []
	if ctx.global_table is not None:
		parts.append(format_symbol_table(ctx.global_table))
	parts.append(" == STRING LIST == ")
	parts.append(format_string_list(ctx.string_pool))
	return "\n".join(part for part in parts if part)


def symbol_describer(ctx: "CompilationContext"):
	"""Callback for the tree printer: `KIND(name) #seq` for bound identifiers."""

	def describe(node: Node) -> Optional[str]:
		symbol = ctx.symbol_for(node)
		if symbol is None:
			return None
		return f"{symbol.describe()} #{symbol.sequence_number}"

	return describe


def print_tables(
	ctx: "CompilationContext",
	*,
	graphviz: Optional[bool] = None,
	file: Optional[TextIO] = None,
) -> None:
	"""Print the tables, the string list and the bound syntax tree."""
	if file is None:
		file = sys.stdout
	if ctx.global_table is not None:
		print(format_symbol_table(ctx.global_table), file=file)
	print("\n == STRING LIST == ", file=file)
	listing = format_string_list(ctx.string_pool)
	if listing:
		print(listing, file=file)
	print("\n == BOUND SYNTAX TREE == ", file=file)
	print_syntax_tree(ctx.root, graphviz=graphviz, describe_symbol=symbol_describer(ctx), file=file)


__all__ = [
	"format_string_list",
	"format_symbol_table",
	"format_tables",
	"print_tables",
	"symbol_describer",
]
