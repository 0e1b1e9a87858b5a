"""Generic search: query compiler, field handlers and executors"""
from .query_compiler import CompiledQuery, CompiledSearch, QueryCompiler, build_search_queries
from .query_executor import AsyncSearchExecutor, SearchExecutor

__all__ = [
    'CompiledQuery', 'CompiledSearch', 'QueryCompiler', 'build_search_queries',
    'AsyncSearchExecutor', 'SearchExecutor',
]
