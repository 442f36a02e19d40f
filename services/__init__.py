"""
Stateful services built on the codec engines (sequential PCD writer).
"""

from .seq_writer import SeqWriter

__all__ = ['SeqWriter']
