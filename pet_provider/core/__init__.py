"""
Core domain pieces: addressing, models, validators and rules.
"""
