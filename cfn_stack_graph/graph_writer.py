# -*- coding: utf-8 -*-
"""
依存グラフ出力モジュール
ノードごとにユニットファイルを作り、依存関係を追記する
"""

import os

import yaml

from .errors import InvalidResourceError

UNIT_SUFFIX = '.yaml'


def safe_node_name(node):
    """ファイル名に使えない文字を置き換えたノード名"""
    safe_name = node.replace('/', '_').replace('\\', '_')
    safe_name = safe_name.replace(':', '_').replace('*', '_')
    if safe_name.startswith('.'):
        safe_name = '_' + safe_name[1:]
    return safe_name


def unit_path(directory, node):
    """ノードのユニットファイル"""
    return os.path.join(directory, f"{node}{UNIT_SUFFIX}")


class DependencyGraphWriter:
    """アプリ単位・スタック単位の 2 種類のユニットを書き出すクラス"""

    def __init__(self, stack_filter, apps_dir, stacks_dir):
        self.stack_filter = stack_filter
        self.apps_dir = apps_dir
        self.stacks_dir = stacks_dir

        self.app_nodes = set()
        self.stack_nodes = set()
        self.app_edges = 0
        self.stack_edges = 0

    def prepare(self):
        """出力先を作成し、前回のユニットを削除"""
        for directory in (self.apps_dir, self.stacks_dir):
            os.makedirs(directory, exist_ok=True)
            for file in os.listdir(directory):
                if file.endswith(UNIT_SUFFIX):
                    os.remove(os.path.join(directory, file))

    def _write_unit(self, directory, node):
        with open(unit_path(directory, node), 'w', encoding='utf-8'):
            pass

    def _append_dependency(self, directory, importing_node, exporting_node, export_name):
        entry = [{'Node': exporting_node, 'Export': export_name}]
        with open(unit_path(directory, importing_node), 'a', encoding='utf-8') as f:
            yaml.safe_dump(entry, f, default_flow_style=False, allow_unicode=True, sort_keys=False)

    def write_nodes(self, stacks):
        """対象スタックごとに空のユニットを書く"""
        stack_filter = self.stack_filter

        for stack in stacks.values():
            if not stack_filter.is_interesting(stack):
                continue

            if stack_filter.app_graph_enabled:
                app_node = safe_node_name(stack_filter.node_name_for_app(stack))
                if app_node not in self.app_nodes:
                    self._write_unit(self.apps_dir, app_node)
                    self.app_nodes.add(app_node)

            stack_node = safe_node_name(stack_filter.node_name_for_stack(stack))
            if stack_node not in self.stack_nodes:
                self._write_unit(self.stacks_dir, stack_node)
                self.stack_nodes.add(stack_node)

    def write_edges(self, stacks, exports_with_imports):
        """インポート元ユニットにエクスポート元への依存を追記する

        Args:
            stacks: StackId / StackName をキーにしたスタックの辞書
            exports_with_imports: (export, [importing stack name]) のリスト
        """
        stack_filter = self.stack_filter

        for export, imports in exports_with_imports:
            exporting_stack_id = export.get('ExportingStackId')
            if not exporting_stack_id:
                raise InvalidResourceError('export', export)

            exporting_stack = stacks.get(exporting_stack_id)
            if exporting_stack is None:
                raise InvalidResourceError('stack', exporting_stack_id)
            if not stack_filter.is_interesting(exporting_stack):
                continue

            for importing_stack_name in imports:
                importing_stack = stacks.get(importing_stack_name)
                if importing_stack is None:
                    raise InvalidResourceError('stack', importing_stack_name)
                if not stack_filter.is_interesting(importing_stack):
                    continue

                if stack_filter.app_graph_enabled:
                    exporting_node = safe_node_name(stack_filter.node_name_for_app(exporting_stack))
                    importing_node = safe_node_name(stack_filter.node_name_for_app(importing_stack))
                    if exporting_node != importing_node:
                        self._append_dependency(
                            self.apps_dir, importing_node, exporting_node, export['Name'])
                        self.app_edges += 1

                exporting_node = safe_node_name(stack_filter.node_name_for_stack(exporting_stack))
                importing_node = safe_node_name(stack_filter.node_name_for_stack(importing_stack))
                if exporting_node != importing_node:
                    self._append_dependency(
                        self.stacks_dir, importing_node, exporting_node, export['Name'])
                    self.stack_edges += 1
