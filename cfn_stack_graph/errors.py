# -*- coding: utf-8 -*-


class InvalidResourceError(ValueError):
    """API が返したスタック・エクスポートに必須項目がない"""

    def __init__(self, kind, resource):
        self.kind = kind
        self.resource = resource
        super().__init__(f"Invalid {kind} '{resource}'")
