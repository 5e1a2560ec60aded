# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Append-only pool of string literals referenced by stable index."""

from __future__ import annotations

from typing import Iterator, List, Tuple

from .table import ScopeContractError


class StringPool:
	def __init__(self) -> None:
		self._strings: List[str] = []
		self.released = False

	def __len__(self) -> int:
		return len(self._strings)

	def add(self, text: str) -> int:
		"""Take ownership of `text`; the returned index never changes."""
		if self.released:
			raise ScopeContractError("add to a released string pool")
		self._strings.append(text)
		return len(self._strings) - 1

	def get(self, index: int) -> str:
		if self.released:
			raise ScopeContractError("read from a released string pool")
		return self._strings[index]

	def items(self) -> Iterator[Tuple[int, str]]:
		return iter(enumerate(self._strings))

	def destroy(self) -> int:
		if self.released:
			raise ScopeContractError("string pool released twice")
		count = len(self._strings)
		self._strings = []
		self.released = True
		return count


__all__ = ["StringPool"]
