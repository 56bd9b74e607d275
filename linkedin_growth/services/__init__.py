"""Business logic services.

Pure analyzers (dashboard, analytics, algo, post pulse) take parsed snapshot
records and return schemas. Orchestrators (reports, synergy, post sync) take
their LinkedIn client and DB session explicitly.
"""
