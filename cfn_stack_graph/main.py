# -*- coding: utf-8 -*-
"""
CloudFormation スタック依存関係図生成器

機能:
1. CloudFormation からスタック・エクスポート・インポートを読み取り（ページネーション対応）
2. API レスポンスを .cache にキャッシュ（2 回目以降は API を呼ばない）
3. 環境・アプリ・リソース種別で対象スタックを絞り込み
4. アプリ単位・スタック単位の依存関係図を生成

使用方法:
    # production 環境の全アプリ
    cfn-stack-graph production

    # 特定アプリのスタックだけ
    cfn-stack-graph production --app editor

    # 複数アプリ間の関係
    cfn-stack-graph production --app editor --app billing
"""

import argparse
import json
import os
import subprocess
import sys

from botocore.exceptions import BotoCoreError, ClientError

from . import config
from .cache import ResponseCache
from .cf_reader import CloudFormationReader
from .errors import InvalidResourceError
from .graph_writer import DependencyGraphWriter
from .stack_filter import StackFilter


def build_parser():
    parser = argparse.ArgumentParser(
        prog='cfn-stack-graph',
        description='CloudFormation スタック依存関係図生成器',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
使用例:
    # production 環境の全アプリ
    cfn-stack-graph production

    # 1 アプリのスタックだけに注目
    cfn-stack-graph production -a editor

    # MySQL / Redis のスタックも含める
    cfn-stack-graph production --keep-resource-stacks

    # キャッシュを使わずに取り直す
    cfn-stack-graph production --no-cache
"""
    )

    parser.add_argument('environment', help='対象の環境名')

    parser.add_argument(
        '-a', '--app',
        dest='apps',
        action='append',
        metavar='APP',
        help='1 アプリのスタック、または指定アプリ間の関係に注目（複数指定可）'
    )

    parser.add_argument(
        '--region',
        help='AWS リージョン (default: boto3 の既定値)'
    )

    parser.add_argument(
        '--cache-dir',
        default=config.CACHE_DIR,
        help=f'キャッシュディレクトリ (default: {config.CACHE_DIR})'
    )

    parser.add_argument(
        '--no-cache',
        action='store_true',
        help='キャッシュを読まずに API から取り直す'
    )

    parser.add_argument(
        '--output-dir',
        default=config.OUTPUT_BASEDIR,
        help=f'ユニットファイルの出力先 (default: {config.OUTPUT_BASEDIR})'
    )

    parser.add_argument(
        '--image-dir',
        default=config.IMAGE_DIR,
        help=f'図の出力先 (default: {config.IMAGE_DIR})'
    )

    parser.add_argument(
        '--exclude-stack',
        action='append',
        default=[],
        metavar='REGEX',
        help='除外するスタック名の正規表現（複数指定可）'
    )

    parser.add_argument(
        '--exclude-kind',
        action='append',
        metavar='KIND',
        help='除外するリソース種別 (default: %s)' % ', '.join(config.EXCLUDED_RESOURCE_KINDS)
    )

    parser.add_argument(
        '--keep-resource-stacks',
        action='store_true',
        help='リソース種別による除外をしない'
    )

    parser.add_argument(
        '--app-tag',
        default=config.APP_TAG_KEY,
        help=f'アプリ名のタグキー (default: {config.APP_TAG_KEY})'
    )

    parser.add_argument(
        '--env-tag',
        default=config.ENV_TAG_KEY,
        help=f'環境名のタグキー (default: {config.ENV_TAG_KEY})'
    )

    parser.add_argument(
        '--no-diagram',
        action='store_true',
        help='図の生成をスキップ（ユニットファイルのみ出力）'
    )

    return parser


def build_filter(args):
    if args.keep_resource_stacks:
        excluded_kinds = []
    else:
        excluded_kinds = args.exclude_kind or config.EXCLUDED_RESOURCE_KINDS

    return StackFilter(
        args.environment,
        apps=args.apps,
        excluded_kinds=excluded_kinds,
        excluded_patterns=config.EXCLUDED_STACK_PATTERNS + args.exclude_stack,
        app_tag=args.app_tag,
        env_tag=args.env_tag,
    )


def main(argv=None, client=None):
    args = build_parser().parse_args(argv)

    print("\n" + "=" * 80)
    print("CloudFormation Stack Dependency Graph")
    print("=" * 80)
    print(f"Environment: {args.environment}")
    print(f"Apps: {', '.join(args.apps) if args.apps else '(all)'}")
    print(f"Cache Directory: {args.cache_dir}")
    print(f"Output Directory: {args.output_dir}")
    print("=" * 80 + "\n")

    stack_filter = build_filter(args)
    apps_dir, stacks_dir = config.unit_dirs(args.output_dir)

    try:
        cache = ResponseCache(args.cache_dir, enabled=not args.no_cache)
        reader = CloudFormationReader(cache, region=args.region, client=client)

        stacks = reader.read_stacks()
        exports_with_imports = reader.read_exports_with_imports()

        writer = DependencyGraphWriter(stack_filter, apps_dir, stacks_dir)
        writer.prepare()
        writer.write_nodes(stacks)
        writer.write_edges(stacks, exports_with_imports)
    except (ClientError, BotoCoreError, InvalidResourceError,
            json.JSONDecodeError, OSError) as e:
        print(f"\nERROR: Failed to build the dependency graph: {e}")
        return 1

    print(f"\n  Cache: {cache.hits} hit(s), {cache.misses} miss(es)")
    if stack_filter.app_graph_enabled:
        print(f"  Apps: {len(writer.app_nodes)} node(s), {writer.app_edges} dependency(ies)")
    print(f"  Stacks: {len(writer.stack_nodes)} node(s), {writer.stack_edges} dependency(ies)")

    if not writer.stack_nodes:
        print("\n⚠ No interesting stacks found. Check the environment and app filters.")

    errors = []
    if not args.no_diagram:
        # graphviz が必要なので使う時だけ読み込む
        from graphviz import ExecutableNotFound

        from .diagram_generator import DependencyDiagramGenerator

        print("\n" + "=" * 80)
        print("Generating Dependency Diagrams...")
        print("=" * 80 + "\n")

        graphs = []
        if stack_filter.app_graph_enabled:
            graphs.append((apps_dir, f"Apps ({args.environment})", config.APP_GRAPH_NAME))
        graphs.append((stacks_dir, f"Stacks ({args.environment})", config.STACK_GRAPH_NAME))

        for unit_dir, title, output_name in graphs:
            generator = DependencyDiagramGenerator(unit_dir, title=title)
            try:
                generator.generate(args.image_dir, output_name)
            except (ExecutableNotFound, subprocess.CalledProcessError) as e:
                # dot がない・描画に失敗した場合
                print(f"\nERROR: Failed to render {output_name}.png: {e}")
                return 1
            errors.extend(generator.errors)

    if errors:
        print("\nWarnings/Errors:")
        print("-" * 40)
        for error in errors[:20]:  # 最初の20件のみ
            print(error)
        if len(errors) > 20:
            print(f"... and {len(errors) - 20} more errors")
        print("-" * 40)

    print("\n" + "=" * 80)
    print("Complete!")
    print(f"Output directory: {os.path.abspath(args.output_dir)}")
    print("=" * 80 + "\n")

    return 0


if __name__ == '__main__':
    sys.exit(main())
