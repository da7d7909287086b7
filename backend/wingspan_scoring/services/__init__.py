"""Scoring domain services: goals, round and end-game scoring, session state and game history.

Everything here is plain logic that HTTP routes and socket handlers import,
keeping transport concerns separated from the scoring rules. Only the
history package touches the database.
"""
