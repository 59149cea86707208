#!/usr/bin/env python
"""
FinTerm launcher

    python run_cli.py              interactive terminal (same as `finterm run`)
    python run_cli.py cmd DES AAPL one command, printed, exit 1 on an error view
    python run_cli.py ticker       one poll of the live strip
"""
import sys

from finterm.cli.main import app

if __name__ == "__main__":
    # The typer callback starts the REPL when no subcommand is given
    app(args=sys.argv[1:])
