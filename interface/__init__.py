"""
Interface package: text front ends for the quantum chess engine.

Modules:
    console — Line-oriented protocol handler.
              Reads commands from stdin, writes replies to stdout.
              Run with: python -m interface.console
"""
