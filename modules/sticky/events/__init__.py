"""Cross-window change signalling."""
