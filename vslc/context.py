# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Per-compilation state.

A CompilationContext replaces the process-wide singletons of a classic
front end (tree root, global symbol table, string list). Each phase takes the
context explicitly:

  build (parser or hand-built tree) → simplify → create_tables → read-only use → destroy

Contexts are independent, so tests can run many compilations side by side.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Tuple

from vslc.core.diagnostics import Diagnostic
from vslc.core.span import Span
from vslc.symbols import binder
from vslc.symbols.pool import StringPool
from vslc.symbols.table import ScopeContractError, ScopeFrame, Symbol, SymbolTable
from vslc.tree.nodes import Node, SymbolRef, destroy_subtree
from vslc.tree.simplify import simplify_tree


class CompilationContext:
	def __init__(self, root: Optional[Node] = None, source_path: Optional[Path] = None) -> None:
		self.root = root
		self.source_path = source_path
		self.global_table: Optional[SymbolTable] = None
		# Every table ever created, by id; id 0 is the global table.
		self.tables: Dict[int, SymbolTable] = {}
		# (FUNCTION node, its local table) in declaration order.
		self.function_tables: List[Tuple[Node, SymbolTable]] = []
		self.string_pool = StringPool()
		self.diagnostics: List[Diagnostic] = []
		self.destroyed = False

	# --- phases ---

	def simplify(self) -> Optional[Node]:
		"""Fold and peephole the tree; only valid before the tables are built."""
		self._require_live()
		if self.global_table is not None:
			raise ScopeContractError("simplify after create_tables would drop bound nodes")
		self.root = simplify_tree(self.root)
		return self.root

	def create_tables(self) -> SymbolTable:
		return binder.create_tables(self)

	def destroy(self) -> int:
		"""Tear down tables, string pool and tree; returns the number of nodes released."""
		self._require_live()
		binder.destroy_tables(self)
		released = destroy_subtree(self.root)
		self.root = None
		self.destroyed = True
		return released

	# --- tables ---

	def new_table(self, backup: Optional[ScopeFrame] = None) -> SymbolTable:
		self._require_live()
		table = SymbolTable(table_id=len(self.tables), backup=backup)
		self.tables[table.table_id] = table
		return table

	def lookup_symbol(self, ref: SymbolRef) -> Symbol:
		table = self.tables[ref.table_id]
		if table.released:
			raise ScopeContractError(f"symbol table {ref.table_id} already released")
		return table.symbol_at(ref.sequence_number)

	def symbol_for(self, node: Node) -> Optional[Symbol]:
		"""Symbol bound to an identifier node, or None when unbound."""
		if node.symbol is None:
			return None
		return self.lookup_symbol(node.symbol)

	def pooled_string(self, index: int) -> str:
		return self.string_pool.get(index)

	# --- diagnostics ---

	def report(self, diagnostic: Diagnostic) -> None:
		if diagnostic.span.file is None and self.source_path is not None:
			diagnostic.span = diagnostic.span.with_file(str(self.source_path))
		self.diagnostics.append(diagnostic)

	def warn(self, message: str, *, code: str, phase: str, span: Optional[Span] = None) -> None:
		self.report(Diagnostic(message=message, code=code, phase=phase, severity="warning", span=span or Span()))

	def error(self, message: str, *, code: str, phase: str, span: Optional[Span] = None) -> None:
		self.report(Diagnostic(message=message, code=code, phase=phase, severity="error", span=span or Span()))

	@property
	def has_errors(self) -> bool:
		return any(d.is_error for d in self.diagnostics)

	def _require_live(self) -> None:
		if self.destroyed:
			raise ScopeContractError("compilation context already destroyed")


__all__ = ["CompilationContext"]
