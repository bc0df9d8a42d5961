"""
Service layer.

Services encapsulate business logic and validation.  They depend on a
store interface from ``repositories`` rather than on a concrete
database, so API handlers never issue queries themselves.
"""
