"""
AWS Table Definitions Package.

Each module defines one table: its columns, list and get functions, and the
hydrate functions that enrich its items.
"""

from .iam_role import table_aws_iam_role
from .iam_user import table_aws_iam_user
from .sqs_queue import table_aws_sqs_queue
from .ssm_maintenance_window import table_aws_ssm_maintenance_window
from .vpc import table_aws_vpc

__all__ = [
    "table_aws_iam_role",
    "table_aws_iam_user",
    "table_aws_sqs_queue",
    "table_aws_ssm_maintenance_window",
    "table_aws_vpc",
]
