"""Metrics Service - Fire-and-forget metrics and error alerts.

Responsibilities:
- Counters/timers with an optional single dimension
- Error notifications (subject + message)
- Never propagating failures of the sink itself

Two sinks share the same interface: LoggingMetricsService writes to the
editor log, CloudWatchMetricsService pushes to CloudWatch and SNS.
"""

import asyncio
from typing import Optional

import boto3


class LoggingMetricsService:
    """Metrics sink that only writes to the OpenHome editor log."""

    def __init__(self, worker, namespace: str = "HowFar"):
        """Initialize LoggingMetricsService.

        Args:
            worker: AgentWorker for logging
            namespace: Metric namespace shown in log lines
        """
        self.worker = worker
        self.namespace = namespace

    def emit_metric(
        self,
        name: str,
        unit: str,
        value: float,
        dimension_name: Optional[str] = None,
        dimension_value: Optional[str] = None,
    ):
        self.worker.editor_logging_handler.info(
            f"[HowFar] Metric {self.namespace}/{name} = {value} ({unit}, "
            f"{dimension_name} = {dimension_value})"
        )

    def publish_alert(self, subject: str, message: str):
        self.worker.editor_logging_handler.error(f"[HowFar] ALERT {subject}: {message}")


class CloudWatchMetricsService(LoggingMetricsService):
    """Metrics sink backed by CloudWatch metrics and an SNS alert topic.

    Every call is scheduled as a background session task, so callers never
    wait on AWS and never see its errors.
    """

    def __init__(
        self,
        worker,
        namespace: str = "HowFar",
        alert_topic_arn: Optional[str] = None,
        region: str = "us-east-1",
        cloudwatch_client=None,
        sns_client=None,
    ):
        """Initialize CloudWatchMetricsService.

        Args:
            worker: AgentWorker for logging and background tasks
            namespace: CloudWatch namespace
            alert_topic_arn: SNS topic for error alerts; alerts are only logged if unset
            region: AWS region for the default clients
            cloudwatch_client: Optional pre-built boto3 CloudWatch client
            sns_client: Optional pre-built boto3 SNS client
        """
        super().__init__(worker, namespace)
        self.alert_topic_arn = alert_topic_arn
        self.region = region
        self._cloudwatch = cloudwatch_client
        self._sns = sns_client

    @property
    def cloudwatch(self):
        if self._cloudwatch is None:
            self._cloudwatch = boto3.client("cloudwatch", region_name=self.region)
        return self._cloudwatch

    @property
    def sns(self):
        if self._sns is None:
            self._sns = boto3.client("sns", region_name=self.region)
        return self._sns

    def emit_metric(
        self,
        name: str,
        unit: str,
        value: float,
        dimension_name: Optional[str] = None,
        dimension_value: Optional[str] = None,
    ):
        super().emit_metric(name, unit, value, dimension_name, dimension_value)
        datum = {"MetricName": name, "Unit": unit, "Value": float(value)}
        if dimension_name:
            datum["Dimensions"] = [{"Name": dimension_name, "Value": str(dimension_value)}]
        self.worker.session_tasks.create(self._put_metric(datum))

    def publish_alert(self, subject: str, message: str):
        super().publish_alert(subject, message)
        if not self.alert_topic_arn:
            return
        self.worker.session_tasks.create(self._publish(subject, message))

    async def _put_metric(self, datum: dict):
        try:
            await asyncio.to_thread(
                self.cloudwatch.put_metric_data,
                Namespace=self.namespace,
                MetricData=[datum],
            )
        except Exception as e:
            # Log only: reporting this as a metric would loop
            self.worker.editor_logging_handler.error(
                f"[HowFar] Failed emitting CloudWatch metric {datum['MetricName']}: {e}"
            )

    async def _publish(self, subject: str, message: str):
        try:
            await asyncio.to_thread(
                self.sns.publish,
                TopicArn=self.alert_topic_arn,
                Subject=subject[:100],
                Message=message,
            )
        except Exception as e:
            self.worker.editor_logging_handler.error(
                f"[HowFar] Failed publishing alert '{subject}': {e}"
            )


def build_metrics_service(worker, settings):
    """Pick the metrics sink configured in settings."""
    if settings.cloudwatch_enabled:
        return CloudWatchMetricsService(
            worker,
            namespace=settings.metrics_namespace,
            alert_topic_arn=settings.alert_topic_arn,
            region=settings.aws_region,
        )
    return LoggingMetricsService(worker, namespace=settings.metrics_namespace)
