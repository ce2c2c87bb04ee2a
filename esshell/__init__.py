"""Components of an extensible shell: terms, statuses, signals, matching, splitting,
formatting, parse trees, lexing, variables, option parsing and child processes."""

__version__ = "0.9.2"

__all__ = [
    "errors",
    "lexer",
    "match",
    "openfile",
    "opt",
    "printfmt",
    "proc",
    "signals",
    "split",
    "status",
    "syntax",
    "term",
    "tree",
    "util",
    "variables",
]