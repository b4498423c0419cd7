"""FX quote API: cached currency conversion quotes over HTTP."""

__version__ = "0.1.0"
