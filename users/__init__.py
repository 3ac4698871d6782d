"""users/ -- The User aggregate: domain dataclasses, persistence, filtering, service.

Layer rule: users/ imports only stdlib + third-party libraries.
It does NOT import from api/ or auth/. api/ and auth/ import from users/,
not the other way around.
"""
