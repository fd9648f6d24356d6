"""
Job Dispatch Value Objects
"""

from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class TranscodeJobParameters:
    """
    Parameters the downstream transcoding job needs for one video.

    Attributes:
        file_name: Raw file name the video was uploaded under
        video_id: Video identifier
    """
    file_name: str
    video_id: str

    def to_dict(self) -> Dict[str, str]:
        """Convert to dictionary for API responses."""
        return {"fileName": self.file_name, "videoId": self.video_id}

    def to_environment(self) -> Dict[str, str]:
        """Container environment variables carrying the parameters."""
        return {"FILENAME": self.file_name, "VIDEO_ID": self.video_id}
