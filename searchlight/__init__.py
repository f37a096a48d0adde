# Searchlight Package
"""
Federated local search for a keyboard launcher.

Layers:
  - Search (search/): scoring, query routing, ranking, the engine facade
  - Providers (search/providers/): applications, bookmarks, history, tabs,
    dictionary and IDE recent projects
  - Services (services/): usage ledger, key-value store, refresh scheduler
"""

__version__ = "0.1.0-dev"
