"""
Infrastructure Layer

Redis, S3 and ECS adapters for the domain ports.
"""
