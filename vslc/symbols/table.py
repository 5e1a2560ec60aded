# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Symbols, scope frames and symbol tables.

Ownership:
  - a SymbolTable owns its Symbols (ordered by sequence number);
  - a ScopeFrame only names Symbols; releasing a frame never releases them;
  - `ScopeFrame.backup` is a non-owning link to the enclosing frame, and every
    chain ends at the global table's frame.

Name binding walks use a ScopeStack rather than mutating a table's "current
frame": frames are pushed and popped in strict nesting order and the pop that
removes a frame is the one that releases it.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional

from vslc.tree.nodes import Node, SymbolRef


class ScopeContractError(AssertionError):
	"""Out-of-order scope handling or use of a released table/frame."""


class SymbolKind(Enum):
	FUNCTION = "FUNCTION"
	PARAMETER = "PARAMETER"
	GLOBAL_VAR = "GLOBAL_VAR"
	GLOBAL_ARRAY = "GLOBAL_ARRAY"
	LOCAL_VAR = "LOCAL_VAR"


class InsertResult(Enum):
	OK = "ok"
	COLLISION = "collision"


@dataclass(eq=False)
class Symbol:
	name: str
	kind: SymbolKind
	# Declaring node (non-owning; the tree owns it).
	node: Optional[Node] = None
	# Local table of a FUNCTION symbol.
	function_table: Optional["SymbolTable"] = None
	# Assigned by SymbolTable.insert.
	sequence_number: int = -1
	table_id: int = -1
	released: bool = False

	@property
	def ref(self) -> SymbolRef:
		if self.sequence_number < 0:
			raise ScopeContractError(f"symbol '{self.name}' was never inserted into a table")
		return SymbolRef(table_id=self.table_id, sequence_number=self.sequence_number)

	def describe(self) -> str:
		return f"{self.kind.value}({self.name})"


class ScopeFrame:
	"""name → Symbol bindings of one lexical level."""

	def __init__(self, backup: Optional["ScopeFrame"] = None) -> None:
		self.backup = backup
		self._symbols: Dict[str, Symbol] = {}
		self.released = False

	def __contains__(self, name: str) -> bool:
		return name in self._symbols

	def __len__(self) -> int:
		return len(self._symbols)

	def get(self, name: str) -> Optional[Symbol]:
		"""Lookup in this frame only."""
		return self._symbols.get(name)

	def lookup(self, name: str) -> Optional[Symbol]:
		"""Chained lookup: this frame, then each backup frame outward."""
		frame: Optional[ScopeFrame] = self
		while frame is not None:
			hit = frame._symbols.get(name)
			if hit is not None:
				return hit
			frame = frame.backup
		return None

	def bind(self, symbol: Symbol) -> InsertResult:
		if self.released:
			raise ScopeContractError("bind into a released scope frame")
		if symbol.name in self._symbols:
			return InsertResult.COLLISION
		self._symbols[symbol.name] = symbol
		return InsertResult.OK

	def release(self) -> None:
		"""Drop the bindings; the Symbols themselves stay with their table."""
		if self.released:
			raise ScopeContractError("scope frame released twice")
		self._symbols.clear()
		self.backup = None
		self.released = True


class ScopeStack:
	"""
	Explicit stack of scope frames used while binding one function body.

	The base frames (global, then the function's own frame) are borrowed from
	their tables and can never be popped.
	"""

	def __init__(self, *base: ScopeFrame) -> None:
		if not base:
			raise ScopeContractError("scope stack needs at least the global frame")
		self._frames: List[ScopeFrame] = list(base)
		self._floor = len(base)

	@property
	def top(self) -> ScopeFrame:
		return self._frames[-1]

	@property
	def depth(self) -> int:
		return len(self._frames)

	def push(self) -> ScopeFrame:
		frame = ScopeFrame(backup=self.top)
		self._frames.append(frame)
		return frame

	def pop(self, frame: ScopeFrame) -> None:
		"""Pop `frame` (which must be the innermost one) and release it."""
		if len(self._frames) <= self._floor:
			raise ScopeContractError("pop below the function scope")
		if self._frames[-1] is not frame:
			raise ScopeContractError("scope frames popped out of nesting order")
		self._frames.pop()
		frame.release()

	@contextmanager
	def scope(self) -> Iterator[ScopeFrame]:
		frame = self.push()
		try:
			yield frame
		finally:
			self.pop(frame)

	def lookup(self, name: str) -> Optional[Symbol]:
		"""Innermost to global."""
		for frame in reversed(self._frames):
			hit = frame.get(name)
			if hit is not None:
				return hit
		return None


class SymbolTable:
	"""Owned Symbols in insertion order plus the table's base scope frame."""

	def __init__(self, table_id: int, backup: Optional[ScopeFrame] = None) -> None:
		self.table_id = table_id
		self.symbols: List[Symbol] = []
		self.frame = ScopeFrame(backup=backup)
		self.released = False

	def __len__(self) -> int:
		return len(self.symbols)

	def __iter__(self) -> Iterator[Symbol]:
		return iter(self.symbols)

	def insert(self, symbol: Symbol, frame: Optional[ScopeFrame] = None) -> InsertResult:
		"""
		Bind `symbol` in `frame` (default: the table's own frame) and take
		ownership of it. A name already bound in that exact frame is a
		collision: the insertion is rejected and no sequence number is used.
		"""
		if self.released:
			raise ScopeContractError("insert into a released symbol table")
		target = frame if frame is not None else self.frame
		if symbol.name in target:
			return InsertResult.COLLISION
		symbol.sequence_number = len(self.symbols)
		symbol.table_id = self.table_id
		target.bind(symbol)
		self.symbols.append(symbol)
		return InsertResult.OK

	def lookup(self, name: str) -> Optional[Symbol]:
		return self.frame.lookup(name)

	def symbol_at(self, sequence_number: int) -> Symbol:
		return self.symbols[sequence_number]

	def destroy(self) -> int:
		"""
		Release every owned Symbol (function scopes first), the base frame and
		the symbol storage. Returns the number of Symbols released.
		"""
		if self.released:
			raise ScopeContractError(f"symbol table {self.table_id} released twice")
		released = 0
		for symbol in self.symbols:
			if symbol.function_table is not None and not symbol.function_table.released:
				released += symbol.function_table.destroy()
			symbol.released = True
			symbol.function_table = None
			symbol.node = None
			released += 1
		self.frame.release()
		self.symbols = []
		self.released = True
		return released


__all__ = [
	"InsertResult",
	"ScopeContractError",
	"ScopeFrame",
	"ScopeStack",
	"Symbol",
	"SymbolKind",
	"SymbolTable",
]
