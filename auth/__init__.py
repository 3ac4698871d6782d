"""auth/ -- Authentication and authorization package for the user management service.

Layer rule: auth/ may import from core/ (settings) and users/ (the principal
store). It does NOT import from api/. api/ imports from auth/, not the other
way around.
"""
