# -*- coding: utf-8 -*-
"""
既定値の定義
"""

import os

# ディレクトリ
CACHE_DIR = '.cache'
OUTPUT_BASEDIR = '.output'
APP_OUTPUT_SUBDIR = 'apps'
STACK_OUTPUT_SUBDIR = 'stacks'
IMAGE_DIR = '.'

APP_GRAPH_NAME = 'graph-apps'
STACK_GRAPH_NAME = 'graph-stacks'

# 既定の 3 回では "Throttling: Rate exceeded" が発生する
MAX_ATTEMPTS = 10

# アプリ単位のノード名に使うタグ
APP_TAG_KEY = 'balsamiq-product'
ENV_TAG_KEY = 'environment'

# 常に除外するスタック
EXCLUDED_STACK_PATTERNS = [
    r'^CDKToolkit$',  # CDK toolkit
    r'^internal-',  # 共有インフラ
    r'^(balsamiq-slack)$',  # アプリ・環境をまたぐシングルトン
    r'^(workflow-triggerer|autosavedreactionsforslack|acetaia|bottega)-',
]

# リソース単体のスタック（将来は外すかもしれない）
EXCLUDED_RESOURCE_KINDS = ['mysql', 'redis']


def unit_dirs(output_basedir):
    """アプリ単位・スタック単位のユニットディレクトリ"""
    return (
        os.path.join(output_basedir, APP_OUTPUT_SUBDIR),
        os.path.join(output_basedir, STACK_OUTPUT_SUBDIR),
    )
