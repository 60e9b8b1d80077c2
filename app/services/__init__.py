"""
Services layer - business logic for reports, enrichment, media, notifications and stats.

DESIGN PRINCIPLE:
- Services contain business logic, NOT routes
- Services raise app.core.errors exceptions, routes turn them into HTTP errors
- Collaborators are passed in (see app.core.container), never looked up globally
"""
