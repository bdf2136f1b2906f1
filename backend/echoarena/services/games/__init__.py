"""Game session services: rooms, questions, turns, adjudication and timers.

Blueprints and socket handlers call into these modules; nothing here builds
an HTTP response. Failures surface as ``errors.GameError`` subclasses.
"""
