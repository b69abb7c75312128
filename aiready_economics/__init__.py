"""
AIReady unit economics.

Turns code-quality signals into cost, acceptance-rate and value-chain estimates.
"""

__version__ = "0.13.0"
