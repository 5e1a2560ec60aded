# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from pathlib import Path

import pytest
from lark.exceptions import UnexpectedInput

from vslc.context import CompilationContext
from vslc.parser import INT64_MAX, VslRangeError, parse_program, parse_source, parse_source_file
from vslc.tree import NodeKind, destroy_subtree, expression, format_tree, identifier, number, simplify_tree


def _only_function(src: str):
	root = parse_program(src)
	assert root.kind is NodeKind.LIST
	(function,) = root.children
	assert function.kind is NodeKind.FUNCTION
	return function


def _returned(src_expr: str):
	function = _only_function(f"func f() return {src_expr}")
	stmt = function.children[2]
	assert stmt.kind is NodeKind.RETURN_STATEMENT
	return stmt.children[0]


def test_parse_function_shape(tmp_path: Path):
	src = tmp_path / "main.vsl"
	src.write_text("""
func add(a, b)
begin
	var t
	t := a + b
	return t
end
""")
	root, diagnostics = parse_source_file(src)
	assert diagnostics == []
	(function,) = root.children
	name, params, body = function.children
	assert name.name == "add"
	assert [p.name for p in params.children] == ["a", "b"]
	assert body.kind is NodeKind.BLOCK
	decls, stmts = body.children
	assert [d.kind for d in decls.children] == [NodeKind.VARIABLE_DECLARATION]
	assert [i.name for i in decls.children[0].children[0].children] == ["t"]
	assert [s.kind for s in stmts.children] == [NodeKind.ASSIGNMENT_STATEMENT, NodeKind.RETURN_STATEMENT]
	assert name.span.file == str(src)
	assert name.span.line == 2


def test_block_without_declarations_has_one_list():
	function = _only_function("func f() begin print 1 end")
	body = function.children[2]
	assert len(body.children) == 1
	assert body.children[0].kind is NodeKind.LIST


def test_global_declarations():
	root = parse_program("var a, v[10], b\nfunc main() return a")
	decl = root.children[0]
	assert decl.kind is NodeKind.GLOBAL_DECLARATION
	items = decl.children[0].children
	assert [item.kind for item in items] == [
		NodeKind.IDENTIFIER_DATA,
		NodeKind.ARRAY_INDEXING,
		NodeKind.IDENTIFIER_DATA,
	]
	assert items[1].children[0].name == "v"
	assert items[1].children[1].value == 10


def test_operator_precedence():
	assert _returned("1 + 2 * 3") == expression("+", number(1), expression("*", number(2), number(3)))
	assert _returned("(1 + 2) * 3") == expression("*", expression("+", number(1), number(2)), number(3))
	assert _returned("x << 1 + 2") == expression("<<", identifier("x"), expression("+", number(1), number(2)))
	assert _returned("a - b - c") == expression("-", expression("-", identifier("a"), identifier("b")), identifier("c"))


def test_unary_minus_has_one_operand():
	assert _returned("-x * 2") == expression("*", expression("-", identifier("x")), number(2))


def test_calls_and_indexing():
	node = _returned("f(1, g(x), v[i + 1])")
	assert node.kind is NodeKind.FUNCTION_CALL
	callee, args = node.children
	assert callee.name == "f"
	assert [arg.kind for arg in args.children] == [
		NodeKind.NUMBER_DATA,
		NodeKind.FUNCTION_CALL,
		NodeKind.ARRAY_INDEXING,
	]
	assert _returned("g()").children[1].children == []


def test_if_else_and_while():
	function = _only_function("""
func f(n)
begin
	while n > 0 do
		if n = 3 then break else n := n - 1
	return n
end
""")
	loop, _ret = function.children[2].children[0].children
	assert loop.kind is NodeKind.WHILE_STATEMENT
	condition, branch = loop.children
	assert condition.kind is NodeKind.RELATION
	assert condition.op == ">"
	assert branch.kind is NodeKind.IF_STATEMENT
	assert [c.kind for c in branch.children] == [
		NodeKind.RELATION,
		NodeKind.BREAK_STATEMENT,
		NodeKind.ASSIGNMENT_STATEMENT,
	]


def test_dangling_else_binds_to_nearest_if():
	function = _only_function("func f(a) if a = 1 then if a = 2 then return 1 else return 2")
	outer = function.children[2]
	assert len(outer.children) == 2
	inner = outer.children[1]
	assert inner.kind is NodeKind.IF_STATEMENT
	assert len(inner.children) == 3


def test_print_strings_and_relations():
	function = _only_function('func f(x) begin print "x is", x if x != 0 then print "nonzero" end')
	stmts = function.children[2].children[0].children
	items = stmts[0].children[0].children
	assert items[0].kind is NodeKind.STRING_DATA
	assert items[0].data.text == '"x is"'
	assert items[1].name == "x"
	assert stmts[1].children[0].op == "!="


def test_array_assignment_and_call_statement():
	function = _only_function("func f() begin v[2] := 1 g(v[2]) end")
	assign, call_stmt = function.children[2].children[0].children
	assert assign.children[0].kind is NodeKind.ARRAY_INDEXING
	assert call_stmt.kind is NodeKind.FUNCTION_CALL


def test_comments_are_ignored():
	root = parse_program("// header\nfunc f() // trailing\n  return 1 // done\n")
	assert root.children[0].children[2].children[0] == number(1)


def test_syntax_error_becomes_diagnostic():
	root, diagnostics = parse_source("func f( return 1", file="bad.vsl")
	assert root is None
	(diag,) = diagnostics
	assert diag.code == "syntax"
	assert diag.phase == "parser"
	assert diag.span.file == "bad.vsl"
	assert diag.span.line == 1


def test_keyword_is_not_an_identifier():
	with pytest.raises(UnexpectedInput):
		parse_program("func f() begin while := 1 end")


def test_largest_int64_literal_is_accepted():
	assert _returned(str(INT64_MAX)) == number(INT64_MAX)


def test_literal_beyond_int64_is_a_range_error():
	with pytest.raises(VslRangeError):
		parse_program(f"func f() return {INT64_MAX + 1}")
	root, diagnostics = parse_source("func f(x)\n  return x * 18446744073709551616", file="big.vsl")
	assert root is None
	(diag,) = diagnostics
	assert diag.code == "range"
	assert diag.phase == "parser"
	assert (diag.span.file, diag.span.line) == ("big.vsl", 2)
	assert "18446744073709551616" in diag.message


def test_long_operator_chain_builds_left_associated():
	terms = 3000
	node = _returned(" - ".join(["x"] * terms))
	depth = 0
	while node.kind is NodeKind.EXPRESSION:
		assert node.op == "-"
		assert node.children[1] == identifier("x")
		node = node.children[0]
		depth += 1
	assert depth == terms - 1
	assert node == identifier("x")


def test_long_operator_chain_runs_through_every_phase():
	terms = 3000
	root = parse_program("func f(x) begin print " + " + ".join(["1"] * terms) + " return " + " * ".join(["x"] * terms) + " end")
	ctx = CompilationContext(root=root)
	ctx.simplify()
	printed = ctx.root.children[0].children[2].children[0].children[0].children[0].children[0]
	assert printed == number(terms)
	ctx.create_tables()
	assert len(format_tree(ctx.root).splitlines()) > terms
	assert ctx.destroy() > terms


def test_long_chain_simplifies_and_releases_without_recursion():
	tree = simplify_tree(parse_program("func f() return " + " + ".join(["2"] * 5000)))
	assert tree.children[0].children[2].children[0] == number(10000)
	assert destroy_subtree(tree) == 6
