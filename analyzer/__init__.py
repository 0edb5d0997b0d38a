"""
Analyzer package

Records broker traffic during a run and turns it into summaries,
a JSON Lines event log and a trajectory diagram.
"""

from .statistics import Statistics

__all__ = ['Statistics']
