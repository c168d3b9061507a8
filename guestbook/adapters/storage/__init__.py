"""Guest entry storage adapters.

The submission pipeline depends only on AbstractGuestRepository; the in-memory
adapter backs tests and single-process demos, the SQLAlchemy adapter backs
real deployments.
"""
