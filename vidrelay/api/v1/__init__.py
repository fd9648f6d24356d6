"""
API v1 - vidrelay REST API

This module contains the versioned API endpoints with OpenAPI/Swagger documentation.
"""

import os

from flask import Blueprint
from flask_restx import Api

# Get API version from environment
API_VERSION = os.getenv("API_VERSION", "v1")

api_v1_bp = Blueprint("api_v1", __name__, url_prefix=f"/api/{API_VERSION}")

api = Api(
    api_v1_bp,
    version="1.0",
    title="vidrelay API",
    description="Multipart video upload and transcoding job coordination",
    doc="/docs",  # Swagger UI will be available at /api/v1/docs
)

# Import namespaces after api is created to avoid circular imports
from .namespaces import upload_ns, video_ns

api.add_namespace(video_ns, path="/videos")
api.add_namespace(upload_ns, path="/uploads")
