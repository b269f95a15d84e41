"""
Tests for the aws_iam_role table functions.
"""

import unittest
from datetime import datetime, timezone
from types import MappingProxyType
from unittest.mock import MagicMock
from urllib.parse import quote

from src.cloud_tables.hydrate import HydrateContext
from src.cloud_tables.items import IamRole
from src.cloud_tables.tables.iam_role import (
    get_iam_role_data,
    get_iam_role_inline_policies,
    list_iam_role_inline_policies,
    list_iam_roles,
    table_aws_iam_role,
)

from tests.aws_fakes import paginated_client

TRUST_POLICY = '{"Version":"2012-10-17","Statement":[{"Effect":"Allow","Principal":{"Service":"lambda.amazonaws.com"},"Action":"sts:AssumeRole"}]}'


class TestIamRoleTable(unittest.TestCase):
    """Test IAM role list and hydrate functions."""

    def setUp(self) -> None:
        self.iam = MagicMock()
        self.connection = MagicMock()
        self.connection.client.return_value = self.iam
        self.role = IamRole({
            "RoleName": "lambda-exec",
            "RoleId": "AROAEXAMPLE",
            "MaxSessionDuration": 3600,
            "AssumeRolePolicyDocument": quote(TRUST_POLICY),
        })

    def context(self, **kwargs) -> HydrateContext:
        return HydrateContext(connection=self.connection, region="eu-west-2", item=self.role, **kwargs)

    def test_list_iam_roles(self) -> None:
        self.connection.client.return_value = paginated_client({
            "list_roles": [{"Roles": [{"RoleName": "a"}, {"RoleName": "b"}]}],
        })
        self.assertEqual([role.role_name for role in list_iam_roles(self.context())], ["a", "b"])

    def test_get_iam_role_data(self) -> None:
        last_used = datetime(2024, 5, 1, tzinfo=timezone.utc)
        self.iam.get_role.return_value = {
            "Role": {
                "RoleName": "lambda-exec",
                "Tags": [{"Key": "env", "Value": "dev"}],
                "RoleLastUsed": {"LastUsedDate": last_used, "Region": "eu-west-2"},
            }
        }

        data = get_iam_role_data(self.context())

        self.assertEqual(data["Tags"], {"env": "dev"})
        self.assertEqual(data["RoleLastUsedDate"], last_used)
        self.assertEqual(data["RoleLastUsedRegion"], "eu-west-2")
        self.assertIsNone(data["PermissionsBoundaryArn"])

    def test_inline_policies(self) -> None:
        self.iam = paginated_client({"list_role_policies": [{"PolicyNames": ["logs"]}]})
        self.iam.get_role_policy.return_value = {
            "RoleName": "lambda-exec",
            "PolicyName": "logs",
            "PolicyDocument": quote(TRUST_POLICY),
        }
        self.connection.client.return_value = self.iam

        names = list_iam_role_inline_policies(self.context())
        ctx = self.context(results=MappingProxyType({"list_iam_role_inline_policies": names}))
        policies = get_iam_role_inline_policies(ctx)

        self.assertEqual(names, ["logs"])
        self.assertEqual(policies[0]["PolicyDocument"]["Statement"][0]["Action"], "sts:AssumeRole")
        self.iam.get_role_policy.assert_called_once_with(RoleName="lambda-exec", PolicyName="logs")

    def test_item_columns(self) -> None:
        table = table_aws_iam_role()
        self.assertEqual(table.column("name").value(self.role, {}), "lambda-exec")
        self.assertEqual(table.column("max_session_duration").value(self.role, {}), 3600)
        policy = table.column("assume_role_policy").value(self.role, {})
        self.assertEqual(policy["Statement"][0]["Principal"], {"Service": "lambda.amazonaws.com"})


if __name__ == "__main__":
    unittest.main()
