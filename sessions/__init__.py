"""sessions/ -- Table-session lifecycle for Sigma.

Layer rule: sessions/ imports only stdlib, third-party libraries and core/.
It does NOT import from api/ or auth/.
"""
