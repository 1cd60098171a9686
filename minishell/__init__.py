"""Building blocks of a small shell: lexing, syntax checks, expansion, heredocs, builtins and pipelines."""

__version__ = "0.1.0"