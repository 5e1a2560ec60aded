# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
vslc: front end for VSL (Very Simple Language).

Packages:
  core:    spans and diagnostics
  parser:  lark grammar → syntax tree
  tree:    node model, dumps, constant folding and peephole rewrites
  symbols: symbol tables, scope frames, name binding, string pool

The CLI entrypoint is `vslc.vslc:main`.
"""

__all__ = ["context", "core", "parser", "symbols", "tree"]
