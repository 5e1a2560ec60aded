# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Symbol table engine: global/function tables, scope frames, name binding and
the string pool.

Entry points (stage API):
  - create_tables(ctx): both passes (globals, then per-function binding)
  - format_tables / print_tables: dumps
  - destroy_tables(ctx): teardown
"""

from .binder import (
	NameBinder,
	bind_names,
	create_tables,
	destroy_tables,
	find_globals,
	find_identifiers_parent,
	function_body,
	iter_identifier_uses,
)
from .pool import StringPool
from .printer import format_string_list, format_symbol_table, format_tables, print_tables
from .table import InsertResult, ScopeContractError, ScopeFrame, ScopeStack, Symbol, SymbolKind, SymbolTable

__all__ = [
	"InsertResult",
	"NameBinder",
	"ScopeContractError",
	"ScopeFrame",
	"ScopeStack",
	"StringPool",
	"Symbol",
	"SymbolKind",
	"SymbolTable",
	"bind_names",
	"create_tables",
	"destroy_tables",
	"find_globals",
	"find_identifiers_parent",
	"format_string_list",
	"format_symbol_table",
	"format_tables",
	"function_body",
	"iter_identifier_uses",
	"print_tables",
]
