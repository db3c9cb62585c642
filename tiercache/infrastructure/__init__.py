"""
Infrastructure Module

Concrete implementations behind the core interfaces: backend adapters,
the process tier and the cache facade.
"""
