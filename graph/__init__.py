"""Reducer usage model and the import-graph walker."""
