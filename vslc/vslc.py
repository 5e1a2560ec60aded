# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
vslc driver: parse → simplify → symbol tables → dumps → teardown.

Warnings (redeclarations) are printed and compilation continues; parse
errors and unresolved identifiers fail the run with exit code 1.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from vslc.context import CompilationContext
from vslc.core.diagnostics import Diagnostic
from vslc.parser import parse_source_file
from vslc.symbols import function_body, iter_identifier_uses, print_tables
from vslc.tree.nodes import Node
from vslc.tree.printer import print_syntax_tree

PHASE = "driver"


def find_unresolved(ctx: CompilationContext) -> List[Node]:
	"""Identifier uses left unbound by create_tables, in declaration order."""
	unresolved: List[Node] = []
	for function, _table in ctx.function_tables:
		body = function_body(function)
		if body is None:
			continue
		unresolved.extend(node for node in iter_identifier_uses(body) if node.symbol is None)
	return unresolved


def report_unresolved(ctx: CompilationContext) -> None:
	for node in find_unresolved(ctx):
		ctx.error(f"unresolved identifier '{node.name}'", code="unresolved", phase=PHASE, span=node.span)


def compile_file(
	source_path: Path,
	*,
	simplify: bool = True,
	print_tree: bool = False,
	print_simplified: bool = False,
	print_symbols: bool = False,
	graphviz: Optional[bool] = None,
	out: Optional[TextIO] = None,
) -> CompilationContext:
	"""
	Run the front end over one file and return the context (already torn down).

	Diagnostics are left on `ctx.diagnostics` for the caller to render.
	"""
	if out is None:
		out = sys.stdout
	root, parse_diags = parse_source_file(source_path)
	ctx = CompilationContext(root=root, source_path=source_path)
	for diag in parse_diags:
		ctx.report(diag)
	if root is None:
		ctx.destroy()
		return ctx

	if print_tree:
		print_syntax_tree(ctx.root, graphviz=graphviz, file=out)
	if simplify:
		ctx.simplify()
	if print_simplified:
		print_syntax_tree(ctx.root, graphviz=graphviz, file=out)

	ctx.create_tables()
	report_unresolved(ctx)
	if print_symbols:
		print_tables(ctx, graphviz=graphviz, file=out)
	ctx.destroy()
	return ctx


def render_diagnostics(diagnostics: List[Diagnostic], source_path: Path, *, as_json: bool, exit_code: int) -> None:
	if as_json:
		payload = {
			"exit_code": exit_code,
			"diagnostics": [d.to_json(str(source_path)) for d in diagnostics],
		}
		print(json.dumps(payload))
		return
	for d in diagnostics:
		print(d.render(str(source_path)), file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
	"""
	Minimal CLI over the tree and symbol engines.

	With --json, prints structured diagnostics (phase/code/message/severity/
	file/line/column) and an exit_code; otherwise prints human-readable
	messages to stderr.
	"""
	parser = argparse.ArgumentParser(prog="vslc", description="VSL front end: syntax tree and symbol tables")
	parser.add_argument("source", type=Path, help="VSL source file")
	parser.add_argument("-t", "--print-tree", action="store_true", help="Print the syntax tree as parsed")
	parser.add_argument("-T", "--print-simplified", action="store_true", help="Print the syntax tree after simplification")
	parser.add_argument(
		"-s",
		"--print-symbols",
		action="store_true",
		help="Print the symbol tables, the string list and the bound syntax tree",
	)
	parser.add_argument("--no-simplify", dest="simplify", action="store_false", help="Skip constant folding and peephole rewrites")
	parser.add_argument(
		"--graphviz",
		dest="graphviz",
		action="store_true",
		default=None,
		help="Dump trees as a DOT graph (default: on when GRAPHVIZ_OUTPUT is set)",
	)
	parser.add_argument("--json", action="store_true", help="Emit diagnostics as JSON")
	args = parser.parse_args(argv)

	if not args.source.is_file():
		diag = Diagnostic(message=f"cannot read source file '{args.source}'", code="io", phase=PHASE)
		render_diagnostics([diag], args.source, as_json=args.json, exit_code=1)
		return 1

	ctx = compile_file(
		args.source,
		simplify=args.simplify,
		print_tree=args.print_tree,
		print_simplified=args.print_simplified,
		print_symbols=args.print_symbols,
		graphviz=args.graphviz,
	)
	exit_code = 1 if ctx.has_errors else 0
	if ctx.diagnostics or args.json:
		render_diagnostics(ctx.diagnostics, args.source, as_json=args.json, exit_code=exit_code)
	return exit_code


if __name__ == "__main__":
	raise SystemExit(main())
