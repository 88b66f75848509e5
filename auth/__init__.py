"""auth/ -- Administrator credentials and bearer tokens for Sigma.

Layer rule: auth/ imports only stdlib, third-party libraries and core/.
It does NOT import from api/ or sessions/.
api/ imports from auth/, not the other way around.
"""
