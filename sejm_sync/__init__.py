"""
sejm-sync: incremental ETL for Polish parliament open data.

Fetches deputies, sittings, transcripts, votes, committees, drafts,
written questions, interpellations, enacted acts and financial disclosures
from the public API and materializes them into a normalized SQLite store.
"""

__version__ = "1.0.0"
