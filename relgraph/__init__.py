"""
RELGRAPH - Relational Graph Extractor

Reads the catalog and column statistics of a relational schema and infers a
semantic model of it, written out as subject-predicate-object facts:
1. Dimensions - discrete vs. scalar columns
2. Keys - single keys, compound keys and their strong/weak components
3. Relationships - one-to-many and many-to-many column pairs

Version: 1.0.0
"""

__version__ = "1.0.0"
__author__ = "RELGRAPH Development Team"
