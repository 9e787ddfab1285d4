"""
LogJournal - work log entries with checklist templates and document export.
"""

__version__ = "0.1.0"
