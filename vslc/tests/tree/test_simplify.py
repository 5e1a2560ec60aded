# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Constant folding and peephole strength reduction.
"""

from __future__ import annotations

import pytest

from vslc.tree import (
	Node,
	NodeKind,
	constant_fold_node,
	destroy_subtree,
	expression,
	identifier,
	iter_nodes,
	list_node,
	number,
	peephole_optimize_node,
	relation,
	simplify_tree,
)


@pytest.mark.parametrize(
	"op, operands, expected",
	[
		("+", (2, 3), 5),
		("-", (2, 3), -1),
		("-", (5,), -5),
		("*", (6, 7), 42),
		("/", (7, 2), 3),
		("/", (-7, 2), -3),
		("/", (7, -2), -3),
		("<<", (1, 4), 16),
		(">>", (-16, 2), -4),
		("-", (10, 3, 2), 5),
	],
)
def test_constant_folding(op, operands, expected):
	folded = simplify_tree(expression(op, *(number(v) for v in operands)))
	assert folded == number(expected)


def test_folding_wraps_to_64_bits():
	assert simplify_tree(expression("<<", number(1), number(63))) == number(-(1 << 63))
	assert simplify_tree(expression("+", number((1 << 63) - 1), number(1))) == number(-(1 << 63))


@pytest.mark.parametrize(
	"op, operands",
	[
		("/", (1, 0)),
		("<<", (1, 64)),
		(">>", (1, -1)),
	],
)
def test_folding_skips_undefined_operations(op, operands):
	tree = expression(op, *(number(v) for v in operands))
	assert constant_fold_node(tree) is tree
	assert not tree.released


def test_folding_ignores_relations_and_non_literals():
	rel = relation("<", number(1), number(2))
	assert simplify_tree(rel) is rel
	expr = expression("+", identifier("x"), number(2))
	assert simplify_tree(expr) == expression("+", identifier("x"), number(2))


def test_folded_subtree_is_released():
	left, right = number(2), number(3)
	tree = expression("+", left, right)
	folded = simplify_tree(tree)
	assert folded is not tree
	assert tree.released and left.released and right.released
	assert not folded.released


def test_nested_folding_is_bottom_up():
	tree = expression("+", expression("*", number(2), number(3)), expression("-", number(4)))
	assert simplify_tree(tree) == number(2)


def test_multiply_by_power_of_two_becomes_shift():
	x = identifier("X")
	tree = expression("*", x, number(8))
	result = simplify_tree(tree)
	assert result is tree
	assert result == expression("<<", identifier("X"), number(3))
	assert result.children[0] is x


def test_divide_by_power_of_two_becomes_shift():
	result = simplify_tree(expression("/", identifier("X"), number(2)))
	assert result == expression(">>", identifier("X"), number(1))


def test_divide_by_one_collapses_to_left_child():
	x = identifier("X")
	one = number(1)
	tree = expression("/", x, one)
	result = simplify_tree(tree)
	assert result is x
	assert not x.released
	assert result == identifier("X")
	assert tree.released and one.released


def test_multiply_by_one_inside_statement():
	stmt = Node.create(NodeKind.RETURN_STATEMENT, None, expression("*", identifier("y"), number(1)))
	simplify_tree(stmt)
	assert stmt.children == [identifier("y")]


@pytest.mark.parametrize("factor", [3, 0, -4, 6])
def test_peephole_leaves_other_factors_alone(factor):
	tree = expression("*", identifier("X"), number(factor))
	assert simplify_tree(tree) is tree
	assert tree == expression("*", identifier("X"), number(factor))


def test_peephole_needs_literal_right_operand():
	tree = expression("*", number(8), identifier("X"))
	assert peephole_optimize_node(tree) is tree
	assert tree.op == "*"


def test_folding_runs_before_peephole():
	# 2 * 8 folds to 16 and is never turned into a shift.
	assert simplify_tree(expression("*", number(2), number(8))) == number(16)
	# The folded 4 + 4 then enables the peephole on the parent.
	tree = expression("*", identifier("X"), expression("+", number(4), number(4)))
	assert simplify_tree(tree) == expression("<<", identifier("X"), number(3))


def _sample_tree() -> Node:
	return list_node(
		expression("*", identifier("a"), number(16)),
		expression("/", identifier("b"), number(1)),
		expression("+", expression("-", number(5)), number(10)),
		expression("*", identifier("c"), expression("<<", number(1), number(2))),
		relation("=", expression("/", identifier("d"), number(3)), number(0)),
	)


def test_simplify_is_idempotent():
	first = simplify_tree(_sample_tree())
	snapshot = first.clone()
	second = simplify_tree(first)
	assert second == snapshot
	assert second == list_node(
		expression("<<", identifier("a"), number(4)),
		identifier("b"),
		number(5),
		expression("<<", identifier("c"), number(2)),
		relation("=", expression("/", identifier("d"), number(3)), number(0)),
	)


def test_destroy_after_simplify_releases_each_node_once():
	tree = _sample_tree()
	originals = list(iter_nodes(tree))
	root = simplify_tree(tree)
	root = simplify_tree(root)
	survivors = list(iter_nodes(root))
	assert len({id(node) for node in survivors}) == len(survivors)
	assert not any(node.released for node in survivors)
	assert destroy_subtree(root) == len(survivors)
	assert all(node.released for node in originals)
	assert all(node.released for node in survivors)


def test_peephole_stops_at_largest_shift():
	top = simplify_tree(expression("*", identifier("X"), number(1 << 62)))
	assert top == expression("<<", identifier("X"), number(62))


@pytest.mark.parametrize("factor", [1 << 64, 1 << 70])
def test_peephole_never_emits_out_of_range_shift(factor):
	tree = expression("*", identifier("X"), number(factor))
	assert simplify_tree(tree) is tree
	assert tree == expression("*", identifier("X"), number(factor))
