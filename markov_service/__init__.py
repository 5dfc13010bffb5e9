"""
Markov chain service: build token-transition models, generate text, export DOT graphs.
"""

__version__ = "1.0.0"
