# Routes package init
"""
NoteKeeper Backend — API Routes Package
=========================================

Route Inventory:
    - me.py:      GET /me                          (caller identity)
    - notes.py:   GET|POST /notes                  (list, create)
                  GET|PUT|DELETE /notes/{name}     (read, update, delete)
    - health.py:  GET /health                      (service health check)

Design Principle:
    Routes are THIN: resolve the caller, validate input, call a service,
    shape the response. Persistence rules live in the services.
"""
