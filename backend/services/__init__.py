"""
Services around the game engine: objective generation, analytics, session orchestration.
"""
