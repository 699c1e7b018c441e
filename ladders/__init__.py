"""Snakes & Ladders promotional game backend."""
