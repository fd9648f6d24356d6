"""
Job Launcher Configuration

ECS task settings for the transcoding job, read from the environment.
"""

import os
from typing import Dict, List


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class JobLauncherConfig:
    """ECS RunTask settings."""

    def __init__(self):
        self.region = os.getenv("ECS_REGION", os.getenv("S3_REGION", "us-east-1"))
        self.cluster = os.getenv("ECS_CLUSTER", "")
        self.task_definition = os.getenv("ECS_TASK_DEFINITION", "")
        self.container_name = os.getenv("ECS_CONTAINER_NAME", "transcoder-container")
        self.launch_type = os.getenv("ECS_LAUNCH_TYPE", "FARGATE")
        self.subnets = _split_csv(os.getenv("ECS_SUBNETS", ""))
        self.security_groups = _split_csv(os.getenv("ECS_SECURITY_GROUPS", ""))
        self.assign_public_ip = (
            "ENABLED"
            if os.getenv("ECS_ASSIGN_PUBLIC_IP", "true").lower() == "true"
            else "DISABLED"
        )

    def passthrough_environment(self) -> Dict[str, str]:
        """
        Environment forwarded to every job so it can reach storage and the event bus.

        Only variables that are set are forwarded.
        """
        names = ("REDIS_URL", "S3_BUCKET_NAME", "S3_REGION")
        return {name: os.environ[name] for name in names if os.environ.get(name)}
