"""FastAPI backend for baseline inspection, selection, and threshold derivation."""
