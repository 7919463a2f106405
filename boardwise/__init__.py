"""
BoardWise - build-your-own board game.
Board design, share links and a single-process play engine.
"""

__version__ = "1.0.0"
