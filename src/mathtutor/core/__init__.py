"""Conversation data types."""
