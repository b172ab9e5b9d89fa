"""
Orchestration that combines integrations into the records the API returns.
"""
