"""RinkSync: hockey schedule, score and standings import and reconciliation."""

__version__ = "1.0.0"
