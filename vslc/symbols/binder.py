# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Symbol table construction and name binding.

Two passes over the simplified tree:
  1. find_globals: one walk over the top-level declarations. Functions get a
     local table (backed by the global frame) holding their parameters, and a
     FUNCTION symbol in the global table; global declarations add GLOBAL_VAR /
     GLOBAL_ARRAY symbols.
  2. bind_names: once per function, after pass 1 is complete, so a body may
     refer to any function or global regardless of declaration order.

Redeclarations are reported as warnings; the first symbol inserted under a
name in a frame stays authoritative. Unresolved identifiers are left unbound
for the consumer to report.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Iterator, List, Optional, Tuple, Union

from vslc.tree.nodes import Node, NodeKind, PoolRef

from .table import InsertResult, ScopeContractError, ScopeFrame, ScopeStack, Symbol, SymbolKind, SymbolTable

if TYPE_CHECKING:
	from vslc.context import CompilationContext

PHASE = "symbols"

# Identifiers anywhere below these kinds are uses, not declarations.
RESOLVING_KINDS = frozenset(
	{
		NodeKind.ASSIGNMENT_STATEMENT,
		NodeKind.RETURN_STATEMENT,
		NodeKind.PRINT_STATEMENT,
		NodeKind.IF_STATEMENT,
		NodeKind.WHILE_STATEMENT,
		NodeKind.BREAK_STATEMENT,
		NodeKind.FUNCTION_CALL,
		NodeKind.RELATION,
		NodeKind.EXPRESSION,
		NodeKind.ARRAY_INDEXING,
	}
)


def create_tables(ctx: "CompilationContext") -> SymbolTable:
	"""
	Build the global table and one local table per function, bind every
	identifier use and move string literals into the pool.
	"""
	if ctx.global_table is not None:
		raise ScopeContractError("symbol tables already created for this context")
	find_globals(ctx)
	for function, table in ctx.function_tables:
		body = function_body(function)
		if body is not None:
			bind_names(ctx, table, body)
	return ctx.global_table


def destroy_tables(ctx: "CompilationContext") -> int:
	"""Release every table (global first, recursing into function scopes) and the string pool."""
	released = 0
	if ctx.global_table is not None and not ctx.global_table.released:
		released += ctx.global_table.destroy()
	# Tables of rejected duplicate functions are not reachable from the global table.
	for table in ctx.tables.values():
		if not table.released:
			released += table.destroy()
	if not ctx.string_pool.released:
		ctx.string_pool.destroy()
	return released


# --- pass 1 ---

def find_globals(ctx: "CompilationContext") -> SymbolTable:
	global_table = ctx.new_table()
	ctx.global_table = global_table
	root = ctx.root
	if root is None:
		return global_table
	for child in root.children:
		if child.kind is NodeKind.FUNCTION:
			_declare_function(ctx, child)
		elif child.kind is NodeKind.GLOBAL_DECLARATION:
			_declare_globals(ctx, child)
	return global_table


def find_identifiers_parent(node: Node) -> Optional[Node]:
	"""First node, searching depth first, whose first child is an identifier."""
	if node.children and node.children[0].is_identifier:
		return node
	for child in node.children:
		found = find_identifiers_parent(child)
		if found is not None:
			return found
	return None


def _declare_function(ctx: "CompilationContext", function: Node) -> None:
	global_table = ctx.global_table
	name_node = function.children[0]
	local_table = ctx.new_table(backup=global_table.frame)
	ctx.function_tables.append((function, local_table))

	for param in _parameters(function):
		symbol = Symbol(name=param.name, kind=SymbolKind.PARAMETER, node=param)
		if local_table.insert(symbol) is InsertResult.COLLISION:
			ctx.warn(
				f"parameter '{param.name}' of function '{name_node.name}' is already declared",
				code="redeclaration",
				phase=PHASE,
				span=param.span,
			)

	symbol = Symbol(
		name=name_node.name,
		kind=SymbolKind.FUNCTION,
		node=name_node,
		function_table=local_table,
	)
	if global_table.insert(symbol) is InsertResult.COLLISION:
		ctx.warn(
			f"function '{name_node.name}' is already declared in the global scope",
			code="redeclaration",
			phase=PHASE,
			span=name_node.span,
		)


def _declare_globals(ctx: "CompilationContext", declaration: Node) -> None:
	for item in _declared_items(declaration):
		if item.is_identifier:
			_insert_global(ctx, item, SymbolKind.GLOBAL_VAR)
			continue
		parent = find_identifiers_parent(item)
		if parent is None:
			continue
		kind = SymbolKind.GLOBAL_ARRAY if parent.kind is NodeKind.ARRAY_INDEXING else SymbolKind.GLOBAL_VAR
		for child in parent.children:
			if child.is_identifier:
				_insert_global(ctx, child, kind)


def _insert_global(ctx: "CompilationContext", node: Node, kind: SymbolKind) -> None:
	symbol = Symbol(name=node.name, kind=kind, node=node)
	if ctx.global_table.insert(symbol) is InsertResult.COLLISION:
		ctx.warn(
			f"global '{node.name}' is already declared in the global scope",
			code="redeclaration",
			phase=PHASE,
			span=node.span,
		)


def _declared_items(declaration: Node) -> Iterable[Node]:
	if declaration.children and declaration.children[0].kind is NodeKind.LIST:
		return declaration.children[0].children
	return declaration.children


def _parameters(function: Node) -> Iterable[Node]:
	if len(function.children) < 2:
		return ()
	return [param for param in function.children[1].children if param.is_identifier]


def function_body(function: Node) -> Optional[Node]:
	return function.children[2] if len(function.children) > 2 else None


# --- pass 2 ---

class NameBinder:
	"""
	Walks one function body with an explicit scope stack:
	global frame → function frame → one frame per enclosing BLOCK.
	"""

	def __init__(self, ctx: "CompilationContext", table: SymbolTable) -> None:
		self._ctx = ctx
		self._table = table
		self._scopes = ScopeStack(ctx.global_table.frame, table.frame)

	@property
	def scopes(self) -> ScopeStack:
		return self._scopes

	def bind(self, node: Node, resolving: bool = False) -> None:
		"""
		Declare or resolve every identifier below `node`, in source order.

		The walk keeps its own stack; a BLOCK pushes a scope frame and leaves the
		frame on the work stack under its children, so the frame is popped right
		after the last child is bound.
		"""
		work: List[Tuple[Union[Node, ScopeFrame], bool]] = [(node, resolving)]
		while work:
			item, resolving = work.pop()
			if isinstance(item, ScopeFrame):
				self._scopes.pop(item)
				continue
			kind = item.kind
			if kind is NodeKind.IDENTIFIER_DATA:
				if resolving:
					self._resolve(item)
				else:
					self._declare_local(item)
				continue
			if kind is NodeKind.STRING_DATA:
				self._pool_string(item)
				continue
			if kind is NodeKind.BLOCK:
				work.append((self._scopes.push(), False))
				inner = False
			elif kind is NodeKind.VARIABLE_DECLARATION:
				inner = False
			else:
				inner = resolving or kind in RESOLVING_KINDS
			work.extend((child, inner) for child in reversed(item.children))

	def _declare_local(self, node: Node) -> None:
		symbol = Symbol(name=node.name, kind=SymbolKind.LOCAL_VAR, node=node)
		if self._table.insert(symbol, frame=self._scopes.top) is InsertResult.COLLISION:
			self._ctx.warn(
				f"local variable '{node.name}' is already declared in this scope",
				code="redeclaration",
				phase=PHASE,
				span=node.span,
			)

	def _resolve(self, node: Node) -> None:
		symbol = self._scopes.lookup(node.name)
		node.symbol = symbol.ref if symbol is not None else None

	def _pool_string(self, node: Node) -> None:
		text = node.data.text
		index = self._ctx.string_pool.add(text)
		node.rewrite(NodeKind.STRING_LIST_REFERENCE, PoolRef(index))


def bind_names(ctx: "CompilationContext", table: SymbolTable, body: Node) -> None:
	NameBinder(ctx, table).bind(body)


def iter_identifier_uses(node: Node, resolving: bool = False) -> Iterator[Node]:
	"""
	Identifier nodes of a function body that binding tries to resolve, using
	the same declaration/use classification as NameBinder.
	"""
	work = [(node, resolving)]
	while work:
		current, resolving = work.pop()
		kind = current.kind
		if kind is NodeKind.IDENTIFIER_DATA:
			if resolving:
				yield current
			continue
		if kind in (NodeKind.BLOCK, NodeKind.VARIABLE_DECLARATION):
			inner = False
		else:
			inner = resolving or kind in RESOLVING_KINDS
		work.extend((child, inner) for child in reversed(current.children))


__all__ = [
	"NameBinder",
	"RESOLVING_KINDS",
	"bind_names",
	"create_tables",
	"destroy_tables",
	"find_globals",
	"find_identifiers_parent",
	"function_body",
	"iter_identifier_uses",
]
