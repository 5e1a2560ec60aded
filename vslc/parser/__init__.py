# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
VSL parser adapter.

`parse_program` raises on syntax errors; `parse_source_file` collects them as
diagnostics so the driver can report them alongside later phases.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple

from lark.exceptions import UnexpectedInput

from vslc.core.diagnostics import Diagnostic
from vslc.core.span import Span
from vslc.tree.nodes import Node

from .parser import INT64_MAX, VslBuildError, VslRangeError, parse_program

PHASE = "parser"


def parse_source(source: str, file: Optional[str] = None) -> Tuple[Optional[Node], List[Diagnostic]]:
	"""Parse VSL text; on failure return (None, [diagnostic])."""
	try:
		return parse_program(source, file=file), []
	except UnexpectedInput as err:
		span = Span(
			file=file,
			line=getattr(err, "line", None),
			column=getattr(err, "column", None),
		)
		return None, [Diagnostic(message=_first_line(str(err)), code="syntax", phase=PHASE, span=span)]
	except VslRangeError as err:
		return None, [Diagnostic(message=str(err), code="range", phase=PHASE, span=err.span)]


def parse_source_file(path: Path) -> Tuple[Optional[Node], List[Diagnostic]]:
	source = path.read_text()
	return parse_source(source, file=str(path))


def _first_line(message: str) -> str:
	lines = [line for line in message.strip().splitlines() if line.strip()]
	return lines[0] if lines else "syntax error"


__all__ = [
	"INT64_MAX",
	"VslBuildError",
	"VslRangeError",
	"parse_program",
	"parse_source",
	"parse_source_file",
]
