"""Standup Hub backend."""
