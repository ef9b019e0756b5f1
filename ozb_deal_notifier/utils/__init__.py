"""
Shared utilities: structured logging and error handling.
"""
