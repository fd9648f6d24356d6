"""
ECS Job Launcher Implementation

Starts the transcoding container as an Amazon ECS task with RunTask.
"""

import logging
from typing import Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from vidrelay.config.job_launcher_config import JobLauncherConfig
from vidrelay.domain.errors import DispatchError
from vidrelay.domain.job_dispatch.job_launcher import JobLauncher

logger = logging.getLogger(__name__)


class EcsJobLauncher(JobLauncher):
    """
    JobLauncher that runs one ECS task per job.

    Job parameters are passed as container environment overrides, merged
    over the configured pass-through environment.
    """

    def __init__(self, config: Optional[JobLauncherConfig] = None, client=None):
        self.config = config or JobLauncherConfig()
        self.client = client or boto3.client("ecs", region_name=self.config.region)

    def _build_request(self, parameters: Dict[str, str]) -> Dict:
        environment = dict(self.config.passthrough_environment())
        environment.update(parameters)

        request = {
            "cluster": self.config.cluster,
            "taskDefinition": self.config.task_definition,
            "launchType": self.config.launch_type,
            "count": 1,
            "overrides": {
                "containerOverrides": [
                    {
                        "name": self.config.container_name,
                        "environment": [
                            {"name": name, "value": value}
                            for name, value in sorted(environment.items())
                        ],
                    }
                ]
            },
        }

        if self.config.subnets:
            request["networkConfiguration"] = {
                "awsvpcConfiguration": {
                    "subnets": self.config.subnets,
                    "securityGroups": self.config.security_groups,
                    "assignPublicIp": self.config.assign_public_ip,
                }
            }

        return request

    def dispatch(self, parameters: Dict[str, str]) -> str:
        """
        Run the transcoding task.

        Returns:
            ARN of the started task

        Raises:
            DispatchError: If ECS rejects the request or starts no task
        """
        try:
            response = self.client.run_task(**self._build_request(parameters))
        except (BotoCoreError, ClientError) as e:
            raise DispatchError(f"RunTask failed: {e}", e) from e

        failures = response.get("failures") or []
        tasks = response.get("tasks") or []

        if failures or not tasks:
            reasons = ", ".join(
                f"{failure.get('arn', '?')}: {failure.get('reason', 'unknown')}"
                for failure in failures
            )
            raise DispatchError(f"RunTask started no task ({reasons or 'no tasks returned'})")

        task_arn = tasks[0]["taskArn"]
        logger.info(f"Dispatched transcoding task {task_arn}")
        return task_arn
