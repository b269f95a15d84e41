"""
Connection context: the boto3 session and the clients built from it.

One Connection is shared by every list, get and hydrate call of a query.
Clients are created lazily, once per (service, region), and reused across
threads; boto3 clients are safe to share for concurrent API calls.
"""

import threading
from typing import Any, Dict, Optional, Tuple

import boto3
from botocore.config import Config as BotocoreConfig

from ..config import Config
from ..utils import get_logger

DEFAULT_CONNECT_TIMEOUT = 10
DEFAULT_RETRY_MODE = "standard"


class Connection:
    """Shared, read-only access to AWS for one plugin configuration."""

    def __init__(self, config: Config, session: Optional[Any] = None) -> None:
        self.config = config
        self.session = session if session is not None else boto3.Session(profile_name=config.aws_profile)
        self._clients: Dict[Tuple[str, str], Any] = {}
        self._common_columns: Optional[Dict[str, str]] = None
        self._lock = threading.Lock()
        self._client_config = BotocoreConfig(
            retries={"max_attempts": config.max_retries, "mode": DEFAULT_RETRY_MODE},
            connect_timeout=DEFAULT_CONNECT_TIMEOUT,
            read_timeout=config.timeout_seconds,
            max_pool_connections=max(config.max_workers, 10),
        )

    def client(self, service_name: str, region: Optional[str] = None) -> Any:
        """
        Return the client for a service and region, creating it on first use.

        Args:
            service_name: boto3 service name (iam, ssm, sqs, ec2, sts)
            region: AWS region, defaults to the first configured region

        Returns:
            boto3 client
        """
        region_name = region or self.config.default_region
        key = (service_name, region_name)
        with self._lock:
            client = self._clients.get(key)
            if client is None:
                get_logger().debug(f"Creating {service_name} client for {region_name}")
                client = self.session.client(service_name, region_name=region_name, config=self._client_config)
                self._clients[key] = client
            return client

    def common_columns(self) -> Dict[str, str]:
        """
        Return the account id and partition of the caller, fetched once per connection.

        Returns:
            Dict with 'AccountId' and 'Partition' keys
        """
        with self._lock:
            if self._common_columns is not None:
                return self._common_columns

        identity = self.client("sts").get_caller_identity()
        # arn:<partition>:sts::<account>:assumed-role/...
        partition = identity["Arn"].split(":")[1]
        columns = {"AccountId": identity["Account"], "Partition": partition}

        with self._lock:
            if self._common_columns is None:
                self._common_columns = columns
            return self._common_columns
