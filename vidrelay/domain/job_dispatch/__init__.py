"""
Job Dispatch Domain

Parameters and launcher interface for the downstream transcoding job.
"""

from .job_launcher import JobLauncher
from .value_objects import TranscodeJobParameters

__all__ = ['JobLauncher', 'TranscodeJobParameters']
