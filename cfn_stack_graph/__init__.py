# -*- coding: utf-8 -*-
"""
CloudFormation Stack Dependency Graph
"""

from .cache import ResponseCache
from .cf_reader import CloudFormationReader
from .errors import InvalidResourceError
from .graph_writer import DependencyGraphWriter
from .stack_filter import StackFilter

__version__ = '1.0.0'
__all__ = [
    'ResponseCache',
    'CloudFormationReader',
    'InvalidResourceError',
    'DependencyGraphWriter',
    'StackFilter',
]
