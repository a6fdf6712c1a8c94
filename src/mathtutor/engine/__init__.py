"""Orchestration: the tool-use conversation loop and its prompt."""
