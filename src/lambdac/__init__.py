"""lambdac: lexer and parser front end for a minimal lambda-calculus language."""

__version__ = "0.1.0"
