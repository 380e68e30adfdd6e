"""
Shared infrastructure: database sessions, structured logging, exceptions.
"""
