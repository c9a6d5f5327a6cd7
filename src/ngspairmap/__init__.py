"""
ngspairmap: paired-end read span mapping for stranded RNA-seq.

This package provides tools for:
- Indexing reference replicons (linear and circular) by exact k-mers
- Resolving read pairs to the placement with the shortest end-to-end distance
- Accumulating per-strand depth over the full span of each pair
- Exporting depth tables, windowed coverage and run summaries
"""

__version__ = "0.3.0"
__author__ = "ngspairmap Team"
