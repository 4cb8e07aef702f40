#!/usr/bin/env python3
"""
run.py - Main entry point for the Connect Four engine

Examples:

    # Play against the computer
    python run.py play

    # Play against the computer with a fixed seed and no thinking delay
    python run.py play --seed 7 --delay 0

    # Two players on one terminal, vocabulary quiz before every move
    python run.py hotseat

    # Inspect a board given in wire form
    python run.py check --position 0,0,0,0,0,0,0,...,1,1,1,0,2,2,0
"""

import sys

from connect_four.interfaces.cli import main

if __name__ == "__main__":
    sys.exit(main())
