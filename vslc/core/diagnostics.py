# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Common diagnostic structure for the parser, symbol and driver phases.

A diagnostic is a message plus severity, an optional short code and a span.
The engines only ever append to a list of these; rendering is the driver's job.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .span import Span


@dataclass
class Diagnostic:
	"""Represents a compiler diagnostic (error/warning)."""

	message: str
	code: str | None = None
	# Phase label: "parser", "symbols" or "driver".
	phase: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()

	@property
	def is_error(self) -> bool:
		return self.severity == "error"

	def render(self, source: str | None = None) -> str:
		"""Human-readable `file:line:col: severity: message` form."""
		file = self.span.file or source or "<input>"
		return f"{file}:{self.span.describe()}: {self.severity}: {self.message}"

	def to_json(self, source: str | None = None) -> dict:
		"""Render to a structured JSON-friendly dict."""
		return {
			"phase": self.phase,
			"code": self.code,
			"message": self.message,
			"severity": self.severity,
			"file": self.span.file or source,
			"line": self.span.line,
			"column": self.span.column,
			"notes": list(self.notes),
		}


__all__ = ["Diagnostic"]
