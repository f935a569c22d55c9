"""
Logging and metrics for the pet provider.
"""
