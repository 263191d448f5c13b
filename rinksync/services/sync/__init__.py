"""
Import Sync Service

Reconciles parsed records with the canonical teams, events and games.

Key components:
- Matchers: Resolve teams and find existing games for parsed records
- TournamentClusterer: Group event-less records into inferred events
- ImportReconciler: Coordinate the import flows and report per-record status
"""
