"""
Tests for the aws_ssm_maintenance_window table.
All AWS interactions are mocked to avoid real API calls.
"""

import logging
import unittest
from unittest.mock import MagicMock

from src.cloud_tables.hydrate import HydrateContext
from src.cloud_tables.items import MaintenanceWindow
from src.cloud_tables.query import QueryRunner
from src.cloud_tables.registry import build_plugin
from src.cloud_tables.tables.ssm_maintenance_window import (
    get_maintenance_window,
    get_maintenance_window_akas,
    get_maintenance_window_tags,
    get_maintenance_window_targets,
    list_ssm_maintenance_windows,
    table_aws_ssm_maintenance_window,
)
from src.config import Config
from src.utils import LOGGER_NAME

from tests.aws_fakes import ACCOUNT_ID, client_error, make_connection, make_paginator

WINDOW = {
    "WindowId": "mw-0123456789abcdef0",
    "Name": "patching",
    "Enabled": True,
    "Duration": 3,
    "Cutoff": 1,
    "Schedule": "cron(0 2 ? * SUN *)",
    "NextExecutionTime": "2024-06-02T02:00Z",
}


class TestMaintenanceWindowFunctions(unittest.TestCase):
    """Test maintenance window list and hydrate functions."""

    def setUp(self) -> None:
        self.ssm = MagicMock()
        self.connection = MagicMock()
        self.connection.client.return_value = self.ssm
        self.connection.common_columns.return_value = {"AccountId": ACCOUNT_ID, "Partition": "aws"}
        self.ctx = HydrateContext(
            connection=self.connection,
            region="us-east-1",
            item=MaintenanceWindow(WINDOW),
        )

    def test_list_windows(self) -> None:
        self.ssm.get_paginator.return_value = make_paginator([{"WindowIdentities": [WINDOW]}])
        windows = list(list_ssm_maintenance_windows(self.ctx))
        self.assertEqual([w.window_id for w in windows], ["mw-0123456789abcdef0"])
        self.ssm.get_paginator.assert_called_once_with("describe_maintenance_windows")

    def test_get_window_by_qual_without_item(self) -> None:
        self.ssm.get_maintenance_window.return_value = dict(WINDOW, ResponseMetadata={"HTTPStatusCode": 200})
        ctx = HydrateContext(connection=self.connection, region="us-east-1", quals={"window_id": "mw-1"})

        window = get_maintenance_window(ctx)

        self.assertNotIn("ResponseMetadata", window.data)
        self.ssm.get_maintenance_window.assert_called_once_with(WindowId="mw-1")

    def test_tags(self) -> None:
        self.ssm.list_tags_for_resource.return_value = {"TagList": [{"Key": "owner", "Value": "ops"}]}
        self.assertEqual(get_maintenance_window_tags(self.ctx), {"TagList": [{"Key": "owner", "Value": "ops"}]})
        self.ssm.list_tags_for_resource.assert_called_once_with(
            ResourceType="MaintenanceWindow",
            ResourceId="mw-0123456789abcdef0",
        )

    def test_targets_are_collected_across_pages(self) -> None:
        self.ssm.get_paginator.return_value = make_paginator(
            [{"Targets": [{"WindowTargetId": "t1"}]}, {"Targets": [{"WindowTargetId": "t2"}]}]
        )
        targets = get_maintenance_window_targets(self.ctx)
        self.assertEqual([t["WindowTargetId"] for t in targets], ["t1", "t2"])

    def test_akas(self) -> None:
        self.assertEqual(
            get_maintenance_window_akas(self.ctx),
            [f"arn:aws:ssm:us-east-1:{ACCOUNT_ID}:maintenancewindow/mw-0123456789abcdef0"],
        )


class TestMaintenanceWindowQuery(unittest.TestCase):
    """Test the maintenance window table through the query runner."""

    def setUp(self) -> None:
        self.ssm = MagicMock()
        self.runner = QueryRunner(build_plugin(), make_connection({"ssm": self.ssm}))

    def test_table_ignores_does_not_exist(self) -> None:
        table = table_aws_ssm_maintenance_window()
        self.assertTrue(table.regional)
        self.assertEqual(table.get.ignore_error_codes, ("DoesNotExistException",))

    def test_get_missing_window_returns_no_rows(self) -> None:
        self.ssm.get_maintenance_window.side_effect = client_error("DoesNotExistException", "GetMaintenanceWindow")
        rows = list(self.runner.run("aws_ssm_maintenance_window", quals={"window_id": "mw-missing"}))
        self.assertEqual(rows, [])

    def test_missing_window_in_every_region_is_logged_at_info_only(self) -> None:
        self.ssm.get_maintenance_window.side_effect = client_error("DoesNotExistException", "GetMaintenanceWindow")
        runner = QueryRunner(build_plugin(), make_connection({"ssm": self.ssm}, regions=["eu-west-2", "us-east-1"]))

        with self.assertLogs(LOGGER_NAME, level="INFO") as logs:
            rows = list(runner.run("aws_ssm_maintenance_window", quals={"window_id": "mw-missing"}))

        self.assertEqual(rows, [])
        self.assertFalse([r for r in logs.records if r.levelno >= logging.ERROR])
        suppressed = [r for r in logs.records if r.levelno == logging.INFO and "DoesNotExistException" in r.getMessage()]
        self.assertEqual(len(suppressed), 2)

    def test_configured_codes_extend_the_table_codes(self) -> None:
        connection = make_connection({"ssm": self.ssm})
        connection.config.ignore_error_codes = ["AccessDeniedException"]
        runner = QueryRunner(build_plugin(connection.config), connection)
        self.ssm.get_maintenance_window.side_effect = client_error("AccessDeniedException", "GetMaintenanceWindow")

        rows = list(runner.run("aws_ssm_maintenance_window", quals={"window_id": "mw-0123456789abcdef0"}))

        self.assertEqual(rows, [])

    def test_configured_codes_do_not_drop_the_table_codes(self) -> None:
        plugin = build_plugin(Config(ignore_error_codes=["AccessDeniedException"]))
        self.assertEqual(
            plugin.ignore_error_codes(plugin.table("aws_ssm_maintenance_window")),
            ("DoesNotExistException", "AccessDeniedException"),
        )

    def test_list_rows(self) -> None:
        self.ssm.get_paginator.return_value = make_paginator([{"WindowIdentities": [WINDOW]}])
        self.ssm.list_tags_for_resource.return_value = {"TagList": [{"Key": "owner", "Value": "ops"}]}

        rows = list(self.runner.run(
            "aws_ssm_maintenance_window",
            columns=["window_id", "enabled", "cutoff", "tags", "region", "akas"],
        ))

        self.assertEqual(rows, [{
            "window_id": "mw-0123456789abcdef0",
            "enabled": True,
            "cutoff": 1,
            "tags": {"owner": "ops"},
            "region": "eu-west-2",
            "akas": [f"arn:aws:ssm:eu-west-2:{ACCOUNT_ID}:maintenancewindow/mw-0123456789abcdef0"],
        }])


if __name__ == "__main__":
    unittest.main()
