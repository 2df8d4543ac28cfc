"""
ViewModel工具包
"""
from .debounce import Debouncer

__all__ = [
    "Debouncer",
]
