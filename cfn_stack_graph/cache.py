# -*- coding: utf-8 -*-
"""
API レスポンスキャッシュモジュール
API 呼び出しごとの結果を JSON ファイルとして保存する
"""

import json
import os


class ResponseCache:
    """ディレクトリに JSON を保存する読み取りキャッシュ"""

    def __init__(self, cache_dir, enabled=True):
        """
        Args:
            cache_dir: キャッシュファイルの保存先
            enabled: False の場合は読み込みを行わない（書き込みは行う）
        """
        self.cache_dir = cache_dir
        self.enabled = enabled
        self.hits = 0
        self.misses = 0

        os.makedirs(cache_dir, exist_ok=True)

    def path_for(self, key):
        """キーに対応するファイルパス"""
        safe_name = key.replace('/', '_').replace(':', '_').replace('*', '_')
        safe_name = safe_name.replace(os.sep, '_')
        return os.path.join(self.cache_dir, f"{safe_name}.cache.json")

    def load(self, key):
        """キャッシュを読む（存在しなければ None）"""
        try:
            with open(self.path_for(key), 'r', encoding='utf-8') as f:
                return json.load(f)
        except FileNotFoundError:
            return None

    def save(self, key, value):
        """キャッシュを書く（途中で止まっても壊れたファイルを残さない）"""
        path = self.path_for(key)
        tmp_path = f"{path}.tmp"
        with open(tmp_path, 'w', encoding='utf-8') as f:
            # boto3 の datetime は文字列として保存
            json.dump(value, f, indent=2, default=str)
        os.replace(tmp_path, path)

    def get_or_fetch(self, key, fetch):
        """キャッシュがあれば返し、なければ fetch() の結果を保存して返す"""
        if self.enabled:
            value = self.load(key)
            if value is not None:
                self.hits += 1
                return value

        self.misses += 1
        value = fetch()
        self.save(key, value)
        return value
