"""
Tests for the shared connection and its client cache.
"""

import unittest
from unittest.mock import MagicMock, patch

from src.cloud_tables.connection import Connection
from src.config import Config

from tests.aws_fakes import ACCOUNT_ID, sts_client


class TestConnection(unittest.TestCase):
    """Test client creation, caching and common columns."""

    def setUp(self) -> None:
        self.session = MagicMock()
        self.session.client.side_effect = lambda service_name, region_name=None, config=None: MagicMock(
            service=service_name, region=region_name
        )
        self.config = Config(regions=["eu-west-2", "us-east-1"], max_workers=25, max_retries=5, timeout_seconds=45)
        self.connection = Connection(self.config, session=self.session)

    def test_clients_are_cached_per_service_and_region(self) -> None:
        first = self.connection.client("iam")
        self.assertIs(self.connection.client("iam", "eu-west-2"), first)
        self.assertIsNot(self.connection.client("iam", "us-east-1"), first)
        self.assertEqual(self.session.client.call_count, 2)

    def test_client_config(self) -> None:
        self.connection.client("sqs", "us-east-1")
        _, kwargs = self.session.client.call_args
        client_config = kwargs["config"]
        self.assertEqual(kwargs["region_name"], "us-east-1")
        self.assertEqual(client_config.retries, {"max_attempts": 5, "mode": "standard"})
        self.assertEqual(client_config.read_timeout, 45)
        self.assertEqual(client_config.max_pool_connections, 25)

    def test_common_columns_fetched_once(self) -> None:
        sts = sts_client(partition="aws-cn")
        self.session.client.side_effect = None
        self.session.client.return_value = sts

        self.assertEqual(self.connection.common_columns(), {"AccountId": ACCOUNT_ID, "Partition": "aws-cn"})
        self.connection.common_columns()
        sts.get_caller_identity.assert_called_once()

    @patch("src.cloud_tables.connection.boto3.Session")
    def test_session_built_from_profile(self, mock_session: MagicMock) -> None:
        Connection(Config(aws_profile="audit"))
        mock_session.assert_called_once_with(profile_name="audit")


if __name__ == "__main__":
    unittest.main()
