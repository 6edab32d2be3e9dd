"""Shared fixtures for the cfn_stack_graph tests."""

from __future__ import annotations

from datetime import datetime, timezone

import boto3
import pytest

from cfn_stack_graph.cache import ResponseCache


def make_stack(name, app=None, environment=None, parent_id=None, tags=None):
    """Build a stack dict shaped like a DescribeStacks entry."""
    if tags is None:
        tags = []
        if app:
            tags.append({"Key": "balsamiq-product", "Value": app})
        if environment:
            tags.append({"Key": "environment", "Value": environment})

    stack = {
        "StackId": f"arn:aws:cloudformation:us-east-1:123456789012:stack/{name}/0000",
        "StackName": name,
        "CreationTime": datetime(2024, 1, 1, tzinfo=timezone.utc),
        "StackStatus": "CREATE_COMPLETE",
        "Tags": tags,
    }
    if parent_id:
        stack["ParentId"] = parent_id
    return stack


def make_export(name, stack):
    return {
        "ExportingStackId": stack["StackId"],
        "Name": name,
        "Value": f"value-of-{name}",
    }


def index_stacks(*stacks):
    """Same shape as CloudFormationReader.read_stacks()."""
    result = {}
    for stack in stacks:
        result[stack["StackId"]] = stack
        result[stack["StackName"]] = stack
    return result


@pytest.fixture
def cache(tmp_path):
    return ResponseCache(str(tmp_path / "cache"))


@pytest.fixture
def cfn_client():
    return boto3.client(
        "cloudformation",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )
