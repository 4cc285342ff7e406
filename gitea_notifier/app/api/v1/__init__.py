"""
Version 1 of the notifier API.
"""
