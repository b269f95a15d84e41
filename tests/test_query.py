"""
Tests for the query runner: list and get modes, limits, filters and regions.
All AWS interactions are mocked to avoid real API calls.
"""

import unittest
from datetime import datetime, timezone
from typing import Any, Dict, List
from unittest.mock import MagicMock

from botocore.exceptions import ClientError

from src.cloud_tables.errors import HydrateError, UnknownTableError
from src.cloud_tables.query import QueryRunner
from src.cloud_tables.registry import build_plugin
from src.utils import LOGGER_NAME

from tests.aws_fakes import ACCOUNT_ID, client_error, make_connection, make_paginator

CREATED = datetime(2021, 3, 1, tzinfo=timezone.utc)


def iam_user(name: str, path: str = "/") -> Dict[str, Any]:
    return {
        "UserName": name,
        "UserId": f"AIDA{name.upper()}",
        "Path": path,
        "Arn": f"arn:aws:iam::{ACCOUNT_ID}:user{path}{name}",
        "CreateDate": CREATED,
    }


def iam_client(user_pages: List[Dict[str, Any]], inline_policies: Dict[str, List[str]], fetched: List) -> MagicMock:
    """IAM client listing the given user pages; fetched records list_users pages only."""
    client = MagicMock()
    paginators = {
        "list_users": make_paginator(user_pages, fetched),
        "list_user_policies": make_paginator(
            lambda UserName: [{"PolicyNames": inline_policies.get(UserName, [])}]
        ),
    }
    client.get_paginator.side_effect = lambda operation: paginators[operation]

    def get_user_policy(UserName: str, PolicyName: str) -> Dict[str, Any]:
        if PolicyName == "bad":
            raise client_error("AccessDenied", "GetUserPolicy")
        return {
            "UserName": UserName,
            "PolicyName": PolicyName,
            "PolicyDocument": "%7B%22Version%22%3A%222012-10-17%22%2C%22Statement%22%3A%5B%5D%7D",
        }

    client.get_user_policy.side_effect = get_user_policy
    return client


class TestQueryRunnerList(unittest.TestCase):
    """Test list mode against the IAM user table."""

    def setUp(self) -> None:
        self.fetched: List[Dict[str, Any]] = []
        self.pages = [
            {"Users": [iam_user("alice"), iam_user("bob", "/admin/")]},
            {"Users": [iam_user("carol")]},
        ]
        self.iam = iam_client(self.pages, {"carol": ["ok", "bad"], "bob": ["ok"]}, self.fetched)
        self.runner = QueryRunner(build_plugin(), make_connection({"iam": self.iam}))

    def test_pages_are_concatenated_in_order(self) -> None:
        rows = list(self.runner.run("aws_iam_user", columns=["name"]))
        self.assertEqual(rows, [{"name": "alice"}, {"name": "bob"}, {"name": "carol"}])
        self.assertEqual(len(self.fetched), 2)

    def test_only_required_hydrate_functions_run(self) -> None:
        list(self.runner.run("aws_iam_user", columns=["name", "arn", "create_date"]))
        self.iam.get_user.assert_not_called()
        self.iam.get_user_policy.assert_not_called()

    def test_failing_inline_policy_fails_the_row_after_earlier_rows(self) -> None:
        rows = []
        with self.assertRaises(HydrateError) as context:
            for row in self.runner.run("aws_iam_user", columns=["name", "inline_policies"]):
                rows.append(row)

        policy = {"PolicyName": "ok", "PolicyDocument": {"Version": "2012-10-17", "Statement": []}}
        self.assertEqual(rows, [
            {"name": "alice", "inline_policies": []},
            {"name": "bob", "inline_policies": [policy]},
        ])
        self.assertEqual(context.exception.item_key, "carol")
        self.assertEqual(context.exception.hydrator, "get_iam_user_inline_policies")
        self.assertIsInstance(context.exception.__cause__, ClientError)
        self.assertEqual(len(self.fetched), 2)

    def test_limit_stops_further_page_requests(self) -> None:
        rows = list(self.runner.run("aws_iam_user", columns=["name"], limit=2))
        self.assertEqual([row["name"] for row in rows], ["alice", "bob"])
        self.assertEqual(len(self.fetched), 1)

    def test_zero_limit_returns_nothing(self) -> None:
        self.assertEqual(list(self.runner.run("aws_iam_user", limit=0)), [])
        self.assertEqual(self.fetched, [])

    def test_non_key_quals_filter_rows(self) -> None:
        rows = list(self.runner.run("aws_iam_user", columns=["name"], quals={"path": "/admin/"}))
        self.assertEqual(rows, [{"name": "bob"}])

    def test_common_columns_come_from_caller_identity(self) -> None:
        rows = list(self.runner.run("aws_iam_user", columns=["name", "account_id", "partition"], limit=1))
        self.assertEqual(rows, [{"name": "alice", "account_id": ACCOUNT_ID, "partition": "aws"}])

    def test_unknown_table_and_column_fail_before_any_call(self) -> None:
        with self.assertRaises(UnknownTableError):
            self.runner.run("aws_s3_bucket")
        with self.assertRaises(ValueError):
            self.runner.run("aws_iam_user", columns=["nickname"])
        with self.assertRaises(ValueError):
            self.runner.run("aws_iam_user", quals={"nickname": "al"})
        self.iam.get_paginator.assert_not_called()


class TestQueryRunnerGet(unittest.TestCase):
    """Test get mode and not-found suppression."""

    def setUp(self) -> None:
        self.iam = MagicMock()
        self.runner = QueryRunner(build_plugin(), make_connection({"iam": self.iam}))

    def test_get_existing_key_returns_one_row(self) -> None:
        self.iam.get_user.return_value = {"User": iam_user("alice")}
        rows = list(self.runner.run("aws_iam_user", columns=["name", "user_id"], quals={"name": "alice"}))

        self.assertEqual(rows, [{"name": "alice", "user_id": "AIDAALICE"}])
        self.iam.get_user.assert_called_once_with(UserName="alice")
        self.iam.get_paginator.assert_not_called()

    def test_configured_not_found_code_returns_no_rows(self) -> None:
        self.iam.get_user.side_effect = client_error("NoSuchEntity")
        self.assertEqual(list(self.runner.run("aws_iam_user", quals={"name": "nobody"})), [])

    def test_other_errors_propagate(self) -> None:
        self.iam.get_user.side_effect = client_error("AccessDenied")
        with self.assertLogs(LOGGER_NAME, level="ERROR") as logs:
            with self.assertRaises(ClientError):
                list(self.runner.run("aws_iam_user", quals={"name": "alice"}))
        self.assertIn("AccessDenied", logs.output[0])

    def test_configured_extra_ignore_codes(self) -> None:
        connection = make_connection({"iam": self.iam})
        connection.config.ignore_error_codes = ["AccessDenied"]
        runner = QueryRunner(build_plugin(connection.config), connection)

        self.iam.get_user.side_effect = client_error("AccessDenied")
        self.assertEqual(list(runner.run("aws_iam_user", quals={"name": "alice"})), [])


class TestQueryRunnerRegions(unittest.TestCase):
    """Test region iteration for regional tables."""

    def test_regional_table_queries_every_region(self) -> None:
        ec2_clients = {
            ("ec2", region): MagicMock(**{
                "get_paginator.return_value": make_paginator(
                    [{"Vpcs": [{"VpcId": f"vpc-{region}", "CidrBlock": "10.0.0.0/16"}]}]
                ),
            })
            for region in ("eu-west-2", "us-east-1")
        }
        connection = make_connection(ec2_clients, regions=["eu-west-2", "us-east-1"])
        runner = QueryRunner(build_plugin(), connection)

        rows = list(runner.run("aws_vpc", columns=["vpc_id", "region"]))
        self.assertEqual(rows, [
            {"vpc_id": "vpc-eu-west-2", "region": "eu-west-2"},
            {"vpc_id": "vpc-us-east-1", "region": "us-east-1"},
        ])

    def test_global_table_queries_default_region_once(self) -> None:
        fetched: List[Dict[str, Any]] = []
        iam = iam_client([{"Users": [iam_user("alice")]}], {}, fetched)
        connection = make_connection({"iam": iam}, regions=["eu-west-2", "us-east-1"])
        runner = QueryRunner(build_plugin(), connection)

        rows = list(runner.run("aws_iam_user", columns=["name"]))
        self.assertEqual(rows, [{"name": "alice"}])
        self.assertEqual(len(fetched), 1)


if __name__ == "__main__":
    unittest.main()
