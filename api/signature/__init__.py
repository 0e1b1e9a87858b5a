"""
Signature package - hierarchical signature indexing.

This package handles:
- Components: named classification axes with a numbering scheme and counter
- Elements: nodes of a component linked into a parent DAG
- Index formatting (decimal, roman, alphabetic)
- Signature path encoding and label resolution
"""
