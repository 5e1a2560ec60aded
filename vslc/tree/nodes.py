# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Syntax tree node model.

Pipeline placement:
  parser → tree (this file) → simplify → symbols → printer/driver

A `Node` is a tagged variant: `kind` selects the shape and `data` holds the
kind-specific payload. Payload classes declare whether the node owns them
(`owned`), so release never has to switch on the node kind.

Ownership rules:
- every child is owned by exactly one parent; there is no sharing;
- `symbol` is a non-owning handle into a symbol table, set only by binding;
- a node is released exactly once; releasing twice is a contract violation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Iterator, List, Optional

from vslc.core.span import Span


class TreeContractError(AssertionError):
	"""
	Upstream bug in tree construction or pass bookkeeping.

	Raised explicitly (not via `assert`) so the check survives `python -O`.
	"""


class NodeKind(Enum):
	"""Node kinds; the value is the label used by the printers."""

	LIST = "LIST"
	GLOBAL_DECLARATION = "GLOBAL_DECLARATION"
	ARRAY_INDEXING = "ARRAY_INDEXING"
	VARIABLE_DECLARATION = "VARIABLE_DECLARATION"
	FUNCTION = "FUNCTION"
	BLOCK = "BLOCK"
	ASSIGNMENT_STATEMENT = "ASSIGNMENT_STATEMENT"
	RETURN_STATEMENT = "RETURN_STATEMENT"
	PRINT_STATEMENT = "PRINT_STATEMENT"
	IF_STATEMENT = "IF_STATEMENT"
	WHILE_STATEMENT = "WHILE_STATEMENT"
	BREAK_STATEMENT = "BREAK_STATEMENT"
	FUNCTION_CALL = "FUNCTION_CALL"
	RELATION = "RELATION"
	EXPRESSION = "EXPRESSION"
	IDENTIFIER_DATA = "IDENTIFIER_DATA"
	NUMBER_DATA = "NUMBER_DATA"
	STRING_DATA = "STRING_DATA"
	STRING_LIST_REFERENCE = "STRING_LIST_REFERENCE"


# Payload variants

@dataclass(frozen=True)
class Payload:
	"""Base class for node payloads."""

	# True when the payload belongs to the node and dies with it.
	owned: ClassVar[bool] = False

	def label(self) -> str:
		raise NotImplementedError


@dataclass(frozen=True)
class Identifier(Payload):
	name: str
	owned: ClassVar[bool] = True

	def label(self) -> str:
		return self.name


@dataclass(frozen=True)
class Number(Payload):
	value: int
	owned: ClassVar[bool] = True

	def label(self) -> str:
		return str(self.value)


@dataclass(frozen=True)
class StringLiteral(Payload):
	"""Literal text exactly as written in the source (quotes included)."""

	text: str
	owned: ClassVar[bool] = True

	def label(self) -> str:
		return self.text


@dataclass(frozen=True)
class Operator(Payload):
	"""Operator spelling of an EXPRESSION/RELATION; drawn from a fixed set, never owned."""

	op: str

	def label(self) -> str:
		return self.op


@dataclass(frozen=True)
class PoolRef(Payload):
	"""Stable index into the string pool; the pool owns the text."""

	index: int

	def label(self) -> str:
		return str(self.index)


# Which payload type each kind carries; kinds not listed carry none.
PAYLOAD_TYPES: dict[NodeKind, type[Payload]] = {
	NodeKind.IDENTIFIER_DATA: Identifier,
	NodeKind.NUMBER_DATA: Number,
	NodeKind.STRING_DATA: StringLiteral,
	NodeKind.EXPRESSION: Operator,
	NodeKind.RELATION: Operator,
	NodeKind.STRING_LIST_REFERENCE: PoolRef,
}


@dataclass(frozen=True)
class SymbolRef:
	"""Non-owning handle to a Symbol: owning table id plus sequence number."""

	table_id: int
	sequence_number: int


@dataclass(eq=True)
class Node:
	"""
	One tree node. Equality is structural (kind, payload, children) so two
	trees can be compared after independent rewrites.
	"""

	kind: NodeKind
	data: Optional[Payload] = None
	children: List["Node"] = field(default_factory=list)
	symbol: Optional[SymbolRef] = field(default=None, compare=False)
	span: Span = field(default_factory=Span, compare=False, repr=False)
	released: bool = field(default=False, compare=False, repr=False)
	_capacity: int = field(default=0, compare=False, repr=False)

	def __post_init__(self) -> None:
		_check_payload(self.kind, self.data)
		for idx, child in enumerate(self.children):
			if child is None:
				raise TreeContractError(f"{self.kind.value}: child {idx} is None")
		self._capacity = len(self.children)

	@classmethod
	def create(
		cls,
		kind: NodeKind,
		data: Optional[Payload] = None,
		*children: "Node",
		span: Optional[Span] = None,
	) -> "Node":
		"""Construct a node, taking ownership of `data` and every child."""
		return cls(kind=kind, data=data, children=list(children), span=span or Span())

	@property
	def capacity(self) -> int:
		"""Allocated child slots; grows by doubling on append."""
		return self._capacity

	@property
	def is_number(self) -> bool:
		return self.kind is NodeKind.NUMBER_DATA

	@property
	def is_identifier(self) -> bool:
		return self.kind is NodeKind.IDENTIFIER_DATA

	@property
	def name(self) -> str:
		"""Identifier name; only valid on IDENTIFIER_DATA nodes."""
		if not isinstance(self.data, Identifier):
			raise TreeContractError(f"{self.kind.value} has no identifier payload")
		return self.data.name

	@property
	def value(self) -> int:
		"""Integer value; only valid on NUMBER_DATA nodes."""
		if not isinstance(self.data, Number):
			raise TreeContractError(f"{self.kind.value} has no number payload")
		return self.data.value

	@property
	def op(self) -> str | None:
		return self.data.op if isinstance(self.data, Operator) else None

	def rewrite(self, kind: NodeKind, data: Optional[Payload]) -> None:
		"""Change kind and payload in place (children are kept)."""
		_check_payload(kind, data)
		self.kind = kind
		self.data = data

	def release(self) -> None:
		"""
		Release this node alone. Children must already have been released or
		handed to a new parent by the caller.
		"""
		if self.released:
			raise TreeContractError(f"{self.kind.value} node released twice")
		if self.data is not None and self.data.owned:
			self.data = None
		self.children = []
		self._capacity = 0
		self.symbol = None
		self.released = True

	def clone(self) -> "Node":
		"""Deep copy of the subtree (bindings are not copied)."""
		return Node(
			kind=self.kind,
			data=self.data,
			children=[child.clone() for child in self.children],
			span=self.span,
		)


def _check_payload(kind: NodeKind, data: Optional[Payload]) -> None:
	expected = PAYLOAD_TYPES.get(kind)
	if expected is None:
		if data is not None:
			raise TreeContractError(f"{kind.value} carries no payload, got {type(data).__name__}")
		return
	if not isinstance(data, expected):
		raise TreeContractError(
			f"{kind.value} expects {expected.__name__} payload, got {type(data).__name__}"
		)


def append_to_list_node(list_node: Node, element: Node) -> Node:
	"""
	Append `element` to a LIST node and return the same list node, so callers
	can fold left to right while building variable-arity children.
	"""
	if list_node.kind is not NodeKind.LIST:
		raise TreeContractError(f"append on non-list node {list_node.kind.value}")
	if element is None:
		raise TreeContractError("append of a None element")
	needed = len(list_node.children) + 1
	if needed > list_node._capacity:
		capacity = 1
		while capacity < needed:
			capacity *= 2
		list_node._capacity = capacity
	list_node.children.append(element)
	return list_node


def destroy_subtree(node: Optional[Node]) -> int:
	"""Post-order release of `node` and its subtree; returns the number of nodes released."""
	if node is None:
		return 0
	# Reversed pre-order puts every child ahead of its parent.
	order = list(iter_nodes(node))
	for current in reversed(order):
		current.release()
	return len(order)


def iter_nodes(node: Node) -> Iterator[Node]:
	"""Pre-order walk of a subtree."""
	stack = [node]
	while stack:
		current = stack.pop()
		yield current
		stack.extend(reversed(current.children))


# Convenience constructors used by the parser and tests.

def identifier(name: str, span: Optional[Span] = None) -> Node:
	return Node.create(NodeKind.IDENTIFIER_DATA, Identifier(name), span=span)


def number(value: int, span: Optional[Span] = None) -> Node:
	return Node.create(NodeKind.NUMBER_DATA, Number(value), span=span)


def string(text: str, span: Optional[Span] = None) -> Node:
	return Node.create(NodeKind.STRING_DATA, StringLiteral(text), span=span)


def expression(op: str, *operands: Node, span: Optional[Span] = None) -> Node:
	return Node.create(NodeKind.EXPRESSION, Operator(op), *operands, span=span)


def relation(op: str, left: Node, right: Node, span: Optional[Span] = None) -> Node:
	return Node.create(NodeKind.RELATION, Operator(op), left, right, span=span)


def list_node(*elements: Node, span: Optional[Span] = None) -> Node:
	node = Node.create(NodeKind.LIST, span=span)
	for element in elements:
		append_to_list_node(node, element)
	return node


__all__ = [
	"Identifier",
	"Node",
	"NodeKind",
	"Number",
	"Operator",
	"PAYLOAD_TYPES",
	"Payload",
	"PoolRef",
	"StringLiteral",
	"SymbolRef",
	"TreeContractError",
	"append_to_list_node",
	"destroy_subtree",
	"expression",
	"identifier",
	"iter_nodes",
	"list_node",
	"number",
	"relation",
	"string",
]
