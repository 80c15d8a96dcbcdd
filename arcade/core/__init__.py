"""Simulation primitives shared by every game (tick input, effects, geometry, strategies).

Kept free of FastAPI and Redis concerns so the games can run headless in tests,
scripts, and the tick scheduler alike.
"""
