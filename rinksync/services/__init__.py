"""
Services module for import and standings logic.

This module organizes services into:
- parsing: Pasted-text parsers (tabular games/standings, free-text schedules)
- sync: Team resolution, clustering and import reconciliation
- standings: Standings computation, pool standings and playdowns
"""
