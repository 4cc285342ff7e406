"""
Cross‑cutting infrastructure: configuration, logging, database access and
webhook signature checks.
"""
