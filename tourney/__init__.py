"""
tourney package
===============

A terminal board over a published spreadsheet of poker tournament listings.

- The CLI entry point is in `tourney/cli.py`.
- Row normalization (text -> typed fields, prize multiplier) is in
  `tourney/parsing.py` and `tourney/loader.py`.
- The filter / sort / render cycle is in `tourney/engine.py`.
- UI state (filters, sort, query string) is in `tourney/state.py`.
"""

__version__ = '0.3.0'
