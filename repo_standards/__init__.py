"""
Repository standards compiler.

Maintains a master checklist of repository compliance items and compiles it
into deterministic per-stack and per-CI-system artifacts.
"""

__version__ = "2.0.0"
