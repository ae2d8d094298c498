"""
Sticky Board.

Multi-window sticky notes over one shared key-value store. Each window
keeps its own mirror of the collection, writes the whole collection back
on every change, and signals its siblings to reload.
"""
