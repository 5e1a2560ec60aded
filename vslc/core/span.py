# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lightweight source span attached to nodes and diagnostics.

The parser fills line/column from lark's propagated positions; nodes built by
hand in tests simply carry `Span()` (unknown location).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
	"""Best-effort file/line/column of a node or diagnostic."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None

	@classmethod
	def from_meta(cls, meta: Any, file: Optional[str] = None) -> "Span":
		"""
		Build a Span from a lark `Tree.meta` or `Token`.

		Empty metas (rules that matched nothing) have no line attribute.
		"""
		if meta is None or getattr(meta, "empty", False):
			return cls(file=file)
		return cls(
			file=file,
			line=getattr(meta, "line", None),
			column=getattr(meta, "column", None),
		)

	def with_file(self, file: Optional[str]) -> "Span":
		return Span(file=file, line=self.line, column=self.column)

	def describe(self) -> str:
		line = self.line if self.line is not None else "?"
		column = self.column if self.column is not None else "?"
		return f"{line}:{column}"


__all__ = ["Span"]
