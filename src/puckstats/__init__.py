"""
Puckstats - Hockey Match & Scoring Data Layer

Relational storage for hockey matches, their scoring events, and the
player statistics derived from them.

Main components:
- db: SQLAlchemy models and session management
- paging: Shared paging / sorting primitives for every listing
- matches: Match store, score event store, and the match detail aggregator
- players: Player listing and per-season scoring statistics
- rosters: Idempotent team participation and player contract creation
"""

__version__ = "0.1.0"
