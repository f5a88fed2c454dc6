"""
Tree Layer

Read-only narrative tree supplied by the host, plus the record loader.
"""

from .model import TreeModel
from .loader import load_manuscript, load_tree, load_tree_file, node_from_record

__all__ = ['TreeModel', 'load_manuscript', 'load_tree', 'load_tree_file', 'node_from_record']
