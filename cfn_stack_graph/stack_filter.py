# -*- coding: utf-8 -*-
"""
スタックフィルタモジュール
対象スタックの判定とグラフのノード名を決める
"""

import re

from .config import (
    APP_TAG_KEY, ENV_TAG_KEY, EXCLUDED_RESOURCE_KINDS, EXCLUDED_STACK_PATTERNS
)
from .errors import InvalidResourceError


class StackFilter:
    """命名規則からグラフに含めるスタックを選ぶクラス"""

    def __init__(self, environment, apps=None, excluded_kinds=None,
                 excluded_patterns=None, app_tag=APP_TAG_KEY, env_tag=ENV_TAG_KEY):
        """
        Args:
            environment: 対象の環境名（例: production）
            apps: 対象アプリ名のリスト（None の場合は全アプリ）
            excluded_kinds: 除外するリソース種別（スタック名の末尾）
            excluded_patterns: 除外するスタック名の正規表現
            app_tag: アプリ名のタグキー
            env_tag: 環境名のタグキー
        """
        self.environment = environment
        self.apps = apps or None
        self.app_tag = app_tag
        self.env_tag = env_tag

        if excluded_kinds is None:
            excluded_kinds = EXCLUDED_RESOURCE_KINDS
        if excluded_patterns is None:
            excluded_patterns = EXCLUDED_STACK_PATTERNS

        self.excluded = [re.compile(p) for p in excluded_patterns]
        if excluded_kinds:
            kinds = '|'.join(re.escape(k) for k in excluded_kinds)
            self.excluded.append(re.compile(f"-({kinds})$"))

        env = re.escape(environment)
        self.environment_re = re.compile(f"-{env}-|-{env}$")

        self.apps_re = None
        if self.apps:
            apps_alt = '|'.join(re.escape(a) for a in self.apps)
            self.apps_re = re.compile(f"^({apps_alt})-")

    @property
    def app_graph_enabled(self):
        """アプリ単位のグラフは複数アプリを対象にする場合のみ"""
        return not self.apps or len(self.apps) > 1

    def is_interesting(self, stack):
        """グラフに含めるスタックか"""
        stack_name = stack.get('StackName')
        if not stack_name:
            raise InvalidResourceError('stack', stack)

        # ネストされたスタック
        if 'ParentId' in stack:
            return False

        for pattern in self.excluded:
            if pattern.search(stack_name):
                return False

        if not self.environment_re.search(stack_name):
            return False

        return self.apps_re is None or bool(self.apps_re.search(stack_name))

    # ==================== ノード名 ====================

    def get_tag_value(self, stack, key):
        """タグの値を取得（タグがなければ None）"""
        tags = stack.get('Tags')
        if tags is None:
            raise InvalidResourceError('stack', stack)

        for tag in tags:
            if tag.get('Key') == key:
                if not tag.get('Value'):
                    raise InvalidResourceError('tag', tag)
                return tag['Value']
        return None

    def node_name_for_app(self, stack):
        """アプリ単位のノード名（<app>-<environment>）"""
        app_name = self.get_tag_value(stack, self.app_tag)
        environment = self.get_tag_value(stack, self.env_tag)
        if app_name and environment:
            return f"{app_name}-{environment}"
        if stack.get('StackName'):
            return stack['StackName']
        raise InvalidResourceError('stack', stack)

    def node_name_for_stack(self, stack):
        """スタック単位のノード名"""
        if stack.get('StackName'):
            return stack['StackName']
        raise InvalidResourceError('stack', stack)
