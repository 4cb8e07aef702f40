"""
connect_four.ai - Computer-controlled opponents for Connect Four
"""

from connect_four.ai.opponent import HeuristicOpponent

__all__ = ['HeuristicOpponent']
