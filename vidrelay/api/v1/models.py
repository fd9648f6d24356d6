"""
API Models for request/response validation and Swagger documentation
"""

from flask_restx import fields

from vidrelay.api.v1 import api

# =============================================================================
# Request Models
# =============================================================================

create_video_request = api.model(
    "CreateVideoRequest",
    {
        "title": fields.String(required=True, description="Video title", example="Holiday"),
        "content_type": fields.String(
            required=True, description="MIME type of the file", example="video/mp4"
        ),
        "fileName": fields.String(
            required=True, description="Name of the uploaded file", example="a.mp4"
        ),
    },
)

part_urls_request = api.model(
    "PartUrlsRequest",
    {
        "key": fields.String(required=True, description="Storage key of the upload"),
        "upload_id": fields.String(required=True, description="Multipart upload id"),
        "part_numbers": fields.List(
            fields.Integer(min=1, max=10000),
            required=True,
            description="Part numbers to issue upload URLs for",
            example=[1, 2, 3],
        ),
        "videoId": fields.String(required=True, description="Video identifier"),
    },
)

completed_part = api.model(
    "CompletedPart",
    {
        "etag": fields.String(required=True, description="ETag returned by the part upload"),
        "part_number": fields.Integer(required=True, min=1, max=10000),
    },
)

complete_upload_request = api.model(
    "CompleteUploadRequest",
    {
        "key": fields.String(required=True, description="Storage key of the upload"),
        "upload_id": fields.String(required=True, description="Multipart upload id"),
        "parts": fields.List(fields.Nested(completed_part), required=True),
        "videoId": fields.String(required=True, description="Video identifier"),
    },
)

reopen_session_request = api.model(
    "ReopenSessionRequest",
    {
        "content_type": fields.String(
            required=True, description="MIME type of the file", example="video/mp4"
        ),
    },
)

abandon_request = api.model(
    "AbandonRequest",
    {
        "reason": fields.String(
            required=False, description="Why the video is abandoned", example="Upload cancelled"
        ),
    },
)

# =============================================================================
# Response Models
# =============================================================================

upload_session_response = api.model(
    "UploadSessionResponse",
    {
        "upload_id": fields.String(description="Multipart upload id"),
        "key": fields.String(description="Storage key parts are uploaded to"),
        "bucket": fields.String(description="Bucket holding the upload"),
        "video_id": fields.String(description="Video identifier"),
    },
)

part_url = api.model(
    "PartUrl",
    {
        "part_number": fields.Integer(description="Part number"),
        "signed_url": fields.String(description="Time-limited URL to PUT the part to"),
    },
)

part_urls_response = api.model(
    "PartUrlsResponse",
    {"signed_urls": fields.List(fields.Nested(part_url), description="Ordered by part number")},
)

complete_upload_response = api.model(
    "CompleteUploadResponse",
    {
        "message": fields.String(description="Status message", example="Added to queue"),
        "video_id": fields.String(description="Video identifier"),
    },
)

video_response = api.model(
    "Video",
    {
        "video_id": fields.String(description="Video identifier"),
        "title": fields.String(description="Video title"),
        "raw_file_name": fields.String(description="Uploaded file name"),
        "status": fields.String(
            description="Lifecycle status",
            enum=["CREATED", "UPLOADING", "QUEUED", "PROCESSING", "COMPLETED", "FAILED"],
        ),
        "created_at": fields.String(description="Creation time (ISO 8601)"),
        "updated_at": fields.String(description="Last status change (ISO 8601)"),
        "error_message": fields.String(description="Failure reason", allow_null=True),
    },
)

error_response = api.model(
    "ErrorResponse",
    {
        "error": fields.String(description="Error category"),
        "title": fields.String(description="Error title"),
        "message": fields.String(description="User-friendly error message"),
        "action": fields.String(description="Suggested action for user"),
        "details": fields.String(description="Technical details", required=False),
    },
)
