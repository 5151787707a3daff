# Routes package init
"""
LeetNotes Backend — API Routes Package
========================================

Route Inventory:
    - health.py:    GET  /                               (welcome message)
                    GET  /health                         (dependency status)
    - fetch.py:     POST /api/fetch-data                 (scrape + ingest)
    - problems.py:  GET  /api/profile-stats
                    GET  /api/problems
                    GET  /api/problems/{problem_id}
    - notes.py:     POST /api/generate-notes/{problem_id}
                    GET  /api/notes
                    GET  /api/notes/{problem_id}

Routes stay thin: resolve the caller with `get_current_user`, call one
service, return its result. Everything except `/` and `/health` requires a
bearer token.
"""
