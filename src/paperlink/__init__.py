"""paperlink: similarity, phantom-edge and cluster inference for paper collections."""

__version__ = "0.1.0"
