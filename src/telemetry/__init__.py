"""Solve event sinks."""
