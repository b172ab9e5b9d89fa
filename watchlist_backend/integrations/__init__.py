"""
External system integrations (TMDb, IBM Cloud App ID).

New external clients should live under this namespace so they remain
decoupled from app entrypoints (`api/`).
"""
