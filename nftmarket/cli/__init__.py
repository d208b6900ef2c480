"""nftmarket CLI — Typer-based command-line interface.

Provides the ``nftmarket`` command with subcommands for running the demo
scenario and inspecting a journal (listings, proceeds, history, verify).

All output uses Rich for formatted terminal display.
"""
