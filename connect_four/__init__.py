"""
connect_four - Connect Four engine with a local heuristic opponent and
quiz-gated online play

The package provides the board rules, win detection, the opponent heuristic,
the local turn engine and the online turn coordinator. Rendering and real
persistence are left to the host application.
"""

# Version number
__version__ = '0.1.0'
