"""Workflows that wire pure receipt parsing to runtime collaborators."""
