# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Tree simplification: constant folding plus peephole strength reduction.

Limited scope:
- Fold EXPRESSION nodes over + - * / << >> whose operands are all NUMBER_DATA.
- Rewrite multiply/divide by a power of two into shifts; drop multiply/divide by one.
- Nothing else is touched; an unknown operator or a non-literal operand simply
  leaves the node as it is.

Both rewrites run post-order (children first) and folding runs before the
peephole at every node, so a freshly folded literal is never rewritten twice.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from .nodes import Node, NodeKind, Number, Operator, destroy_subtree

_FOLDABLE_OPS = {"+", "-", "*", "/", "<<", ">>"}
_PEEPHOLE_SHIFTS = {"*": "<<", "/": ">>"}

_INT64_BITS = 64
_INT64_MASK = (1 << _INT64_BITS) - 1
_INT64_SIGN = 1 << (_INT64_BITS - 1)


def _wrap_int64(value: int) -> int:
	value &= _INT64_MASK
	return value - (1 << _INT64_BITS) if value & _INT64_SIGN else value


def _fold_binary(op: str, lhs: int, rhs: int) -> Optional[int]:
	"""Evaluate one 64-bit operation; None means the fold must not happen."""
	if op == "+":
		return _wrap_int64(lhs + rhs)
	if op == "-":
		return _wrap_int64(lhs - rhs)
	if op == "*":
		return _wrap_int64(lhs * rhs)
	if op == "/":
		if rhs == 0:
			return None
		# Truncate toward zero like the target machine does.
		quotient = abs(lhs) // abs(rhs)
		return _wrap_int64(-quotient if (lhs < 0) != (rhs < 0) else quotient)
	if op == "<<":
		if not 0 <= rhs < _INT64_BITS:
			return None
		return _wrap_int64(lhs << rhs)
	if op == ">>":
		if not 0 <= rhs < _INT64_BITS:
			return None
		return lhs >> rhs
	return None


def constant_fold_node(node: Node) -> Node:
	"""
	Replace an all-literal arithmetic EXPRESSION with a single NUMBER_DATA node.

	A unary application folds as `0 op operand`; longer operand lists fold
	left to right. The replaced subtree is destroyed after the literal is built.
	"""
	if node.kind is not NodeKind.EXPRESSION or not node.children:
		return node
	if node.op not in _FOLDABLE_OPS:
		return node
	if not all(child.is_number for child in node.children):
		return node

	op = node.op
	operands = [child.value for child in node.children]
	if len(operands) == 1:
		result = _fold_binary(op, 0, operands[0])
	else:
		result = operands[0]
		for operand in operands[1:]:
			result = _fold_binary(op, result, operand)
			if result is None:
				break
	if result is None:
		return node

	folded = Node.create(NodeKind.NUMBER_DATA, Number(result), span=node.span)
	destroy_subtree(node)
	return folded


def _power_of_two_exponent(value: int) -> Optional[int]:
	"""k for value == 2**k with 1 <= k < 64, else None."""
	if value <= 1 or value & (value - 1):
		return None
	exponent = value.bit_length() - 1
	return exponent if exponent < _INT64_BITS else None


def peephole_optimize_node(node: Node) -> Node:
	"""
	Strength-reduce `x * 2^k` / `x / 2^k` to shifts and drop `x * 1` / `x / 1`.

	Only binary nodes with a NUMBER_DATA right operand qualify. Every other
	factor is left alone, including 2**64 and above, whose shift count would be
	out of range.
	"""
	if node.kind is not NodeKind.EXPRESSION or len(node.children) != 2:
		return node
	shift = _PEEPHOLE_SHIFTS.get(node.op or "")
	if shift is None:
		return node
	left, right = node.children
	if not right.is_number:
		return node

	factor = right.value
	if factor == 1:
		# Promote the left operand; the literal and the node itself go away.
		destroy_subtree(right)
		node.children = []
		node.release()
		return left
	exponent = _power_of_two_exponent(factor)
	if exponent is None:
		return node
	node.rewrite(NodeKind.EXPRESSION, Operator(shift))
	right.rewrite(NodeKind.NUMBER_DATA, Number(exponent))
	return node


def simplify_subtree(node: Optional[Node]) -> Optional[Node]:
	"""
	Simplify children first, then try folding and the peephole at each node.

	Walks with an explicit stack so long operator chains do not hit the
	recursion limit. Reversed pre-order visits every child before its parent;
	a replacement is stored in the parent's child slot before the parent
	itself is visited.
	"""
	if node is None:
		return None
	order: List[Tuple[Optional[Node], int, Node]] = []
	stack: List[Tuple[Optional[Node], int, Node]] = [(None, -1, node)]
	while stack:
		parent, idx, current = stack.pop()
		order.append((parent, idx, current))
		for child_idx, child in enumerate(current.children):
			stack.append((current, child_idx, child))

	root = node
	for parent, idx, current in reversed(order):
		replacement = peephole_optimize_node(constant_fold_node(current))
		if parent is None:
			root = replacement
		else:
			parent.children[idx] = replacement
	return root


def simplify_tree(root: Optional[Node]) -> Optional[Node]:
	"""
	Return the simplified tree. The root itself may be replaced (e.g. a bare
	constant expression), so callers must use the returned node.
	"""
	return simplify_subtree(root)


__all__ = ["constant_fold_node", "peephole_optimize_node", "simplify_subtree", "simplify_tree"]
