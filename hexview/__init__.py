"""
Hex tile overview package.

This package lays out a fixed set of items as hexagonal tiles and drives the
interactive view on top of them. The system is split into three parts:

1. A layout engine that fits N tiles into a diamond-like silhouette (or a
   caller-supplied pattern) on an axial grid
2. A viewport engine that owns the scale/translate transform for fitting,
   zooming, panning and focusing a tile
3. A sequencer that runs focus/unfocus transitions one at a time while
   locking user input
"""

__version__ = "0.1.0"
