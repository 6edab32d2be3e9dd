# -*- coding: utf-8 -*-
"""
依存グラフ描画モジュール
ユニットファイルを読み込んで図を生成する
"""

import os

import yaml
from diagrams import Diagram, Edge
from diagrams.aws.management import Cloudformation

from .graph_writer import UNIT_SUFFIX


def load_unit_graph(unit_dir, errors=None):
    """ユニットディレクトリからノードと依存関係を読み込む

    Returns:
        (ノード名のリスト, [(importing node, exporting node, export name), ...])
    """
    nodes = []
    edges = []

    for file in sorted(os.listdir(unit_dir)):
        if not file.endswith(UNIT_SUFFIX):
            continue

        node = file[:-len(UNIT_SUFFIX)]
        nodes.append(node)

        filepath = os.path.join(unit_dir, file)
        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                dependencies = yaml.safe_load(f) or []
        except yaml.YAMLError as e:
            if errors is not None:
                errors.append(f"⚠ Failed to parse {filepath}: {str(e)[:50]}")
            continue

        # - Node: ... / Export: ... のリストのみ受け付ける
        if not isinstance(dependencies, list) or not all(
                isinstance(d, dict) and d.get('Node') for d in dependencies):
            if errors is not None:
                errors.append(f"⚠ Invalid unit {filepath}: expected a list of Node entries")
            continue

        for dependency in dependencies:
            edges.append((node, str(dependency['Node']), dependency.get('Export')))

    return nodes, edges


class DependencyDiagramGenerator:
    """スタック間の依存関係図を生成するクラス"""

    def __init__(self, unit_dir, title='CloudFormation Stacks'):
        self.unit_dir = unit_dir
        self.title = title
        self.errors = []
        self.drawn_edges = set()

    def generate(self, output_dir, output_name):
        """<output_dir>/<output_name>.png を生成"""
        print(f"  Rendering {self.title}...")

        os.makedirs(output_dir, exist_ok=True)
        output_path = os.path.join(output_dir, output_name)

        node_names, edges = load_unit_graph(self.unit_dir, self.errors)

        graph_attr = {
            "fontsize": "14",
            "bgcolor": "white",
            "nodesep": "0.6",
            "ranksep": "1.0",
            "pad": "0.5",
            "fontname": "Sans-Serif"
        }

        with Diagram(
            self.title,
            filename=output_path,
            show=False,
            direction="LR",
            outformat="png",
            graph_attr=graph_attr
        ):
            nodes = {}
            for name in node_names:
                nodes[name] = Cloudformation(name)

            for importing_node, exporting_node, _export_name in edges:
                # 同じスタック間の複数エクスポートは 1 本にまとめる
                edge_key = (importing_node, exporting_node)
                if edge_key in self.drawn_edges:
                    continue

                source = nodes.get(importing_node)
                target = nodes.get(exporting_node)
                if source is None or target is None:
                    self.errors.append(f"⚠ Unknown node in {importing_node}: {exporting_node}")
                    continue

                source >> Edge(color="gray") >> target
                self.drawn_edges.add(edge_key)

        print(f"    {len(nodes)} node(s), {len(self.drawn_edges)} edge(s)")
        print(f"✓ Diagram saved: {output_path}.png")
        return f"{output_path}.png"
