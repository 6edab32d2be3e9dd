"""Tests for DependencyGraphWriter unit files."""

from __future__ import annotations

import os

import pytest
import yaml

from cfn_stack_graph.errors import InvalidResourceError
from cfn_stack_graph.graph_writer import DependencyGraphWriter
from cfn_stack_graph.stack_filter import StackFilter

from conftest import index_stacks, make_export, make_stack


def read_unit(directory, node):
    with open(os.path.join(directory, f"{node}.yaml"), encoding="utf-8") as f:
        return yaml.safe_load(f)


@pytest.fixture
def dirs(tmp_path):
    return str(tmp_path / "apps"), str(tmp_path / "stacks")


def make_writer(dirs, apps=None):
    apps_dir, stacks_dir = dirs
    writer = DependencyGraphWriter(StackFilter("prod", apps=apps), apps_dir, stacks_dir)
    writer.prepare()
    return writer


@pytest.fixture
def landscape():
    shared = make_stack("shared-prod-network", app="shared", environment="prod")
    editor_api = make_stack("editor-prod-api", app="editor", environment="prod")
    editor_web = make_stack("editor-prod-web", app="editor", environment="prod")
    staging = make_stack("editor-staging-api", app="editor", environment="staging")
    return shared, editor_api, editor_web, staging


class TestPrepare:
    def test_creates_dirs_and_removes_old_units(self, dirs) -> None:
        apps_dir, stacks_dir = dirs
        os.makedirs(stacks_dir)
        with open(os.path.join(stacks_dir, "stale.yaml"), "w") as f:
            f.write("- Node: gone\n")
        with open(os.path.join(stacks_dir, "notes.txt"), "w") as f:
            f.write("keep me")

        make_writer(dirs)

        assert os.path.isdir(apps_dir)
        assert sorted(os.listdir(stacks_dir)) == ["notes.txt"]


class TestWriteNodes:
    def test_writes_empty_units_for_interesting_stacks(self, dirs, landscape) -> None:
        apps_dir, stacks_dir = dirs
        writer = make_writer(dirs)

        writer.write_nodes(index_stacks(*landscape))

        assert sorted(os.listdir(stacks_dir)) == [
            "editor-prod-api.yaml", "editor-prod-web.yaml", "shared-prod-network.yaml",
        ]
        assert sorted(os.listdir(apps_dir)) == ["editor-prod.yaml", "shared-prod.yaml"]
        assert read_unit(stacks_dir, "editor-prod-api") is None

    def test_single_app_skips_app_units(self, dirs, landscape) -> None:
        apps_dir, stacks_dir = dirs
        writer = make_writer(dirs, apps=["editor"])

        writer.write_nodes(index_stacks(*landscape))

        assert os.listdir(apps_dir) == []
        assert sorted(os.listdir(stacks_dir)) == ["editor-prod-api.yaml", "editor-prod-web.yaml"]


class TestWriteEdges:
    def test_cross_app_dependency_in_both_graphs(self, dirs, landscape) -> None:
        apps_dir, stacks_dir = dirs
        shared, editor_api, _web, _staging = landscape
        stacks = index_stacks(*landscape)
        writer = make_writer(dirs)
        writer.write_nodes(stacks)

        writer.write_edges(stacks, [(make_export("vpc-id", shared), ["editor-prod-api"])])

        assert read_unit(stacks_dir, "editor-prod-api") == [
            {"Node": "shared-prod-network", "Export": "vpc-id"},
        ]
        assert read_unit(apps_dir, "editor-prod") == [
            {"Node": "shared-prod", "Export": "vpc-id"},
        ]
        assert (writer.app_edges, writer.stack_edges) == (1, 1)

    def test_same_app_dependency_only_in_stack_graph(self, dirs, landscape) -> None:
        apps_dir, stacks_dir = dirs
        _shared, editor_api, _web, _staging = landscape
        stacks = index_stacks(*landscape)
        writer = make_writer(dirs)
        writer.write_nodes(stacks)

        writer.write_edges(stacks, [(make_export("api-url", editor_api), ["editor-prod-web"])])

        assert read_unit(stacks_dir, "editor-prod-web") == [
            {"Node": "editor-prod-api", "Export": "api-url"},
        ]
        assert read_unit(apps_dir, "editor-prod") is None

    def test_self_reference_is_skipped(self, dirs, landscape) -> None:
        _apps_dir, stacks_dir = dirs
        shared = landscape[0]
        stacks = index_stacks(*landscape)
        writer = make_writer(dirs)
        writer.write_nodes(stacks)

        writer.write_edges(stacks, [(make_export("vpc-id", shared), ["shared-prod-network"])])

        assert read_unit(stacks_dir, "shared-prod-network") is None
        assert writer.stack_edges == 0

    def test_uninteresting_stacks_are_skipped(self, dirs, landscape) -> None:
        _apps_dir, stacks_dir = dirs
        shared, _api, _web, staging = landscape
        stacks = index_stacks(*landscape)
        writer = make_writer(dirs)
        writer.write_nodes(stacks)

        writer.write_edges(stacks, [
            (make_export("vpc-id", shared), ["editor-staging-api"]),
            (make_export("staging-url", staging), ["editor-prod-api"]),
        ])

        assert writer.stack_edges == 0
        assert read_unit(stacks_dir, "editor-prod-api") is None

    def test_several_exports_append_in_order(self, dirs, landscape) -> None:
        _apps_dir, stacks_dir = dirs
        shared = landscape[0]
        stacks = index_stacks(*landscape)
        writer = make_writer(dirs)
        writer.write_nodes(stacks)

        writer.write_edges(stacks, [
            (make_export("vpc-id", shared), ["editor-prod-api"]),
            (make_export("shared:subnet-ids", shared), ["editor-prod-api"]),
        ])

        assert read_unit(stacks_dir, "editor-prod-api") == [
            {"Node": "shared-prod-network", "Export": "vpc-id"},
            {"Node": "shared-prod-network", "Export": "shared:subnet-ids"},
        ]

    def test_unknown_exporting_stack_is_invalid(self, dirs, landscape) -> None:
        writer = make_writer(dirs)
        export = {"ExportingStackId": "arn:missing", "Name": "x"}
        with pytest.raises(InvalidResourceError):
            writer.write_edges(index_stacks(*landscape), [(export, [])])

    def test_export_without_stack_id_is_invalid(self, dirs, landscape) -> None:
        writer = make_writer(dirs)
        with pytest.raises(InvalidResourceError):
            writer.write_edges(index_stacks(*landscape), [({"Name": "x"}, [])])

    def test_unknown_importing_stack_is_invalid(self, dirs, landscape) -> None:
        writer = make_writer(dirs)
        export = make_export("vpc-id", landscape[0])
        with pytest.raises(InvalidResourceError):
            writer.write_edges(index_stacks(*landscape), [(export, ["ghost-prod"])])


class TestAppGraphToggle:
    @pytest.fixture
    def two_products(self):
        api = make_stack("editor-prod-api", app="editor", environment="prod")
        search = make_stack("editor-prod-search", app="search", environment="prod")
        return api, search

    def test_single_app_writes_no_app_edges(self, dirs, two_products) -> None:
        apps_dir, stacks_dir = dirs
        api, _search = two_products
        stacks = index_stacks(*two_products)
        writer = make_writer(dirs, apps=["editor"])
        writer.write_nodes(stacks)

        writer.write_edges(stacks, [(make_export("api-url", api), ["editor-prod-search"])])

        assert os.listdir(apps_dir) == []
        assert writer.app_edges == 0
        assert read_unit(stacks_dir, "editor-prod-search") == [
            {"Node": "editor-prod-api", "Export": "api-url"},
        ]

    def test_several_apps_write_app_edges(self, dirs, landscape) -> None:
        apps_dir, _stacks_dir = dirs
        shared = landscape[0]
        stacks = index_stacks(*landscape)
        writer = make_writer(dirs, apps=["editor", "shared"])
        writer.write_nodes(stacks)

        writer.write_edges(stacks, [(make_export("vpc-id", shared), ["editor-prod-api"])])

        assert read_unit(apps_dir, "editor-prod") == [
            {"Node": "shared-prod", "Export": "vpc-id"},
        ]
        assert writer.app_edges == 1


class TestNodeFileNames:
    def test_tag_with_path_separators_stays_in_unit_dir(self, tmp_path, dirs) -> None:
        apps_dir, _stacks_dir = dirs
        shared = make_stack("shared-prod-network", app="shared", environment="prod")
        odd = make_stack("odd-prod-api", app="../odd", environment="prod")
        stacks = index_stacks(shared, odd)
        writer = make_writer(dirs)
        writer.write_nodes(stacks)

        writer.write_edges(stacks, [(make_export("vpc-id", shared), ["odd-prod-api"])])

        assert sorted(os.listdir(apps_dir)) == ["_._odd-prod.yaml", "shared-prod.yaml"]
        assert sorted(os.listdir(tmp_path)) == ["apps", "stacks"]
        assert read_unit(apps_dir, "_._odd-prod") == [
            {"Node": "shared-prod", "Export": "vpc-id"},
        ]
