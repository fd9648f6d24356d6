"""
API Namespaces - Organized endpoint groups
"""

import logging

from flask import current_app, request
from flask_restx import Namespace, Resource

from vidrelay.api.v1.models import (
    abandon_request,
    complete_upload_request,
    complete_upload_response,
    create_video_request,
    error_response,
    part_urls_request,
    part_urls_response,
    reopen_session_request,
    upload_session_response,
    video_response,
)
from vidrelay.application.upload_coordinator import UploadCoordinator
from vidrelay.application.upload_service import UploadService
from vidrelay.domain.errors import (
    ErrorCategory,
    ValidationError,
    categorize_domain_error,
    create_error_response,
)
from vidrelay.domain.upload_session import CompletedPart

logger = logging.getLogger(__name__)

DEFAULT_ABANDON_REASON = "Abandoned by client"


def _domain_error_response(error: Exception, endpoint: str):
    """Render a raised error as a structured error response."""
    category, status_code = categorize_domain_error(error)

    if category == ErrorCategory.SYSTEM_ERROR:
        logger.exception(f"Unexpected error in {endpoint}: {error}")
        return create_error_response(
            category, f"Unexpected error: {error}", status_code=status_code
        )

    if status_code >= 500:
        logger.error(f"{endpoint} failed: {error}")
    return create_error_response(category, str(error), status_code=status_code)


def _parse_parts(raw_parts):
    try:
        return [
            CompletedPart(part_number=part.get("part_number"), etag=part.get("etag"))
            for part in raw_parts or []
        ]
    except AttributeError as e:
        raise ValidationError("parts must be a list of objects", e) from e


# =============================================================================
# Video Namespace - Video creation, lookup and recovery
# =============================================================================

video_ns = Namespace("videos", description="Video operations")


@video_ns.route("")
class VideoList(Resource):
    """Create videos and list completed ones"""

    @video_ns.doc("create_video")
    @video_ns.expect(create_video_request, validate=True)
    @video_ns.response(200, "Success", upload_session_response)
    @video_ns.response(400, "Bad Request", error_response)
    @video_ns.response(502, "Storage Unavailable", error_response)
    def post(self):
        """
        Create a video and begin its multipart upload

        Returns the upload id, storage key and bucket the client uploads parts to.
        """
        data = request.get_json()

        try:
            coordinator = current_app.container.resolve(UploadCoordinator)
            created = coordinator.create_video(
                data.get("title"), data.get("content_type"), data.get("fileName")
            )
            return created.to_dict(), 200
        except Exception as e:
            return _domain_error_response(e, "POST /videos")

    @video_ns.doc("list_completed_videos")
    @video_ns.response(200, "Success", [video_response])
    def get(self):
        """
        List videos whose transcoding completed
        """
        try:
            upload_service = current_app.container.resolve(UploadService)
            videos = upload_service.list_completed_videos()
            return [video.to_dict() for video in videos], 200
        except Exception as e:
            return _domain_error_response(e, "GET /videos")


@video_ns.route("/<string:video_id>")
@video_ns.param("video_id", "The video identifier")
class VideoDetail(Resource):
    """Video lookup"""

    @video_ns.doc("get_video")
    @video_ns.response(200, "Success", video_response)
    @video_ns.response(404, "Video Not Found", error_response)
    def get(self, video_id):
        """
        Get a video and its current status
        """
        try:
            upload_service = current_app.container.resolve(UploadService)
            return upload_service.get_video(video_id).to_dict(), 200
        except Exception as e:
            return _domain_error_response(e, "GET /videos/<id>")


@video_ns.route("/<string:video_id>/session")
@video_ns.param("video_id", "The video identifier")
class VideoSession(Resource):
    """Upload session recovery"""

    @video_ns.doc("reopen_session")
    @video_ns.expect(reopen_session_request, validate=True)
    @video_ns.response(200, "Success", upload_session_response)
    @video_ns.response(400, "Bad Request", error_response)
    @video_ns.response(404, "Video Not Found", error_response)
    @video_ns.response(502, "Storage Unavailable", error_response)
    def post(self, video_id):
        """
        Begin an upload session for a video created without one

        Used after video creation failed to open the storage session.
        """
        data = request.get_json()

        try:
            coordinator = current_app.container.resolve(UploadCoordinator)
            created = coordinator.reopen_session(video_id, data.get("content_type"))
            return created.to_dict(), 200
        except Exception as e:
            return _domain_error_response(e, "POST /videos/<id>/session")


@video_ns.route("/<string:video_id>/abandon")
@video_ns.param("video_id", "The video identifier")
class VideoAbandon(Resource):
    """Explicit cleanup"""

    @video_ns.doc("abandon_video")
    @video_ns.expect(abandon_request, validate=False)
    @video_ns.response(200, "Success", video_response)
    @video_ns.response(404, "Video Not Found", error_response)
    def post(self, video_id):
        """
        Fail a video and abort its open upload session
        """
        data = request.get_json(silent=True) or {}
        reason = data.get("reason") or DEFAULT_ABANDON_REASON

        try:
            coordinator = current_app.container.resolve(UploadCoordinator)
            return coordinator.abandon_video(video_id, reason).to_dict(), 200
        except Exception as e:
            return _domain_error_response(e, "POST /videos/<id>/abandon")


# =============================================================================
# Upload Namespace - Part URLs and completion
# =============================================================================

upload_ns = Namespace("uploads", description="Multipart upload operations")


@upload_ns.route("/part-urls")
class PartUrls(Resource):
    """Part upload URL issuance"""

    @upload_ns.doc("issue_part_urls")
    @upload_ns.expect(part_urls_request, validate=True)
    @upload_ns.response(200, "Success", part_urls_response)
    @upload_ns.response(400, "Bad Request", error_response)
    @upload_ns.response(404, "Session Not Found", error_response)
    @upload_ns.response(409, "Session Finalized", error_response)
    @upload_ns.response(502, "Storage Unavailable", error_response)
    def post(self):
        """
        Issue time-limited upload URLs for parts

        Either every requested URL is returned or none is.
        """
        data = request.get_json()

        try:
            coordinator = current_app.container.resolve(UploadCoordinator)
            part_urls = coordinator.issue_part_urls(
                data.get("key"),
                data.get("upload_id"),
                data.get("videoId"),
                data.get("part_numbers"),
            )
            return {"signed_urls": [part_url.to_dict() for part_url in part_urls]}, 200
        except Exception as e:
            return _domain_error_response(e, "POST /uploads/part-urls")


@upload_ns.route("/complete")
class CompleteUpload(Resource):
    """Upload completion"""

    @upload_ns.doc("complete_upload")
    @upload_ns.expect(complete_upload_request, validate=True)
    @upload_ns.response(200, "Success", complete_upload_response)
    @upload_ns.response(400, "Bad Request", error_response)
    @upload_ns.response(404, "Session Not Found", error_response)
    @upload_ns.response(409, "Session Finalized", error_response)
    @upload_ns.response(502, "Dispatch Failed", error_response)
    def post(self):
        """
        Complete the multipart upload and queue the video for transcoding
        """
        data = request.get_json()

        try:
            parts = _parse_parts(data.get("parts"))
            upload_service = current_app.container.resolve(UploadService)
            dispatched = upload_service.complete_and_dispatch(
                data.get("key"), data.get("upload_id"), data.get("videoId"), parts
            )
            return dispatched.to_dict(), 200
        except Exception as e:
            return _domain_error_response(e, "POST /uploads/complete")
