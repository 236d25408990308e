"""
Experiments for the break-even bundling simulator.

    - distributions.py: competitive ratio across arrival distributions
"""

__all__ = ["distributions"]
