# Services package init
"""
NoteKeeper Backend — Services Layer
=====================================

Service Inventory:
    - CredentialResolver: bearer token → User (auth_service.py)
    - NoteService: owner-scoped CRUD on named notes (note_service.py)

Both are stateless apart from the store timeout. The application factory
builds one instance of each and keeps it on app.state; sessions are passed
per call.
"""
