"""Unified command-line interface for slipscan.

Usage:
    slipscan parse <text_file> [--json] [--rules PATH]
    slipscan scan <image> [--json] [--no-ai] [--save-text]
    slipscan serve [--host] [--port]
"""
