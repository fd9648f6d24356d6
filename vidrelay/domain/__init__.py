"""
Domain layer: entities, value objects, repository and service interfaces.
"""
