"""
Shared logging and configuration.
"""
