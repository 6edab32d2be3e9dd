# -*- coding: utf-8 -*-
"""
CloudFormation リーダーモジュール
スタック・エクスポート・インポートを AWS API から読み取る
"""

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from .config import MAX_ATTEMPTS
from .errors import InvalidResourceError


class CloudFormationReader:
    """CloudFormation のスタックとエクスポートを読み取るクラス"""

    def __init__(self, cache, region=None, client=None):
        """
        Args:
            cache: ResponseCache のインスタンス
            region: AWS リージョン（None の場合は boto3 の既定値）
            client: テスト用に差し替える cloudformation クライアント
        """
        self.cache = cache
        self.region = region

        if client is None:
            print(f"Initializing CloudFormation client for region: {region or '(default)'}")
            client = boto3.client(
                'cloudformation',
                region_name=region,
                config=Config(retries={'max_attempts': MAX_ATTEMPTS}),
            )
        self.cfn = client

    def _paginate(self, client_method, key, **kwargs):
        """NextToken ベースのページネーションで全ページを集める"""
        items = []
        next_token = None

        while True:
            if next_token:
                kwargs['NextToken'] = next_token

            response = client_method(**kwargs)
            items.extend(response.get(key) or [])

            next_token = response.get('NextToken')
            if not next_token:
                break

        return items

    # ==================== API 呼び出し ====================

    def describe_stacks(self):
        """すべてのスタックを取得"""
        return self.cache.get_or_fetch(
            'stacks',
            lambda: self._paginate(self.cfn.describe_stacks, 'Stacks'),
        )

    def list_exports(self):
        """すべてのエクスポートを取得"""
        return self.cache.get_or_fetch(
            'exports',
            lambda: self._paginate(self.cfn.list_exports, 'Exports'),
        )

    def list_imports(self, export_name):
        """エクスポートをインポートしているスタック名を取得"""
        def fetch():
            try:
                return self._paginate(self.cfn.list_imports, 'Imports', ExportName=export_name)
            except ClientError as e:
                message = e.response.get('Error', {}).get('Message', '')
                if message == f"Export '{export_name}' is not imported by any stack.":
                    return []
                raise

        return self.cache.get_or_fetch(f"imports-{export_name}", fetch)

    # ==================== 集計 ====================

    def read_stacks(self):
        """StackId と StackName の両方をキーにしたスタックの辞書"""
        print("  Reading Stacks...")

        result = {}
        for stack in self.describe_stacks():
            if not stack.get('StackId') or not stack.get('StackName'):
                raise InvalidResourceError('stack', stack)
            result[stack['StackId']] = stack
            result[stack['StackName']] = stack

        print(f"    Found {len(result) // 2} Stack(s)")
        return result

    def read_exports_with_imports(self):
        """エクスポートとそれをインポートしているスタック名の組"""
        print("  Reading Exports...")
        exports = self.list_exports()
        print(f"    Found {len(exports)} Export(s)")

        print("  Reading Imports...")
        result = []
        total_imports = 0
        for export in exports:
            if not export.get('Name'):
                raise InvalidResourceError('export', export)

            imports = self.list_imports(export['Name'])
            total_imports += len(imports)
            result.append((export, imports))

        print(f"    Found {total_imports} Import(s)")
        return result
