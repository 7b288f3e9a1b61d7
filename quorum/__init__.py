"""
Quorum — Suggestion Boards with a Voting Economy
=================================================
Members of a board post short suggestions, vote on each other's ideas,
and spend boosts earned by voting to push a suggestion further.  State
lives in a shared document store and every client sees changes as they
land.

Package layout::

    quorum/
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Vote alphabet, exchange rate
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + session helper
    │   └── models.py      # documents table
    ├── engine/            # Pure logic, no I/O
    │   ├── records.py     # Board / Suggestion / EconomyAccount documents
    │   ├── ledger.py      # Score, quorum predicates, boost rules
    │   ├── economy.py     # Fragments → boosts
    │   ├── lifecycle.py   # Suggestion state transitions
    │   ├── views.py       # pending / review / ranked projection
    │   ├── events.py      # Changed(collection, snapshot)
    │   └── errors.py      # Domain error taxonomy
    ├── sync/
    │   ├── base.py        # SyncAdapter interface + subscriptions
    │   ├── memory.py      # In-process store
    │   └── sql.py         # SQL store + PG LISTEN/NOTIFY
    ├── services/
    │   ├── context.py           # Wiring: one store, every service
    │   ├── board_service.py     # BoardRegistry
    │   ├── economy_service.py   # Account persistence
    │   ├── suggestion_service.py  # SuggestionStore
    │   └── view_service.py      # ViewProjector + LiveViews
    └── api/
        ├── main.py        # FastAPI app
        ├── deps.py        # JWT identity + context injection
        └── routes/        # Boards + suggestions endpoints
"""

__version__ = "0.1.0"
