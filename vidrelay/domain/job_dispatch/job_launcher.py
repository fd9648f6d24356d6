"""
Job Launcher Interface

Abstract interface for the external compute-job launcher.
"""

from abc import ABC, abstractmethod
from typing import Dict


class JobLauncher(ABC):
    """Abstract interface for dispatching compute jobs."""

    @abstractmethod
    def dispatch(self, parameters: Dict[str, str]) -> str:
        """
        Dispatch a job.

        Args:
            parameters: Mapping of environment variable name to value

        Returns:
            Opaque handle identifying the started job

        Raises:
            DispatchError: If the launcher refuses or fails to start the job
        """
        pass
