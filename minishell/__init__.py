"""A small interactive shell with pipes, redirections, heredocs and builtins."""

__version__ = "0.1.0"
__all__ = [
    "builtins",
    "commands",
    "environment",
    "errors",
    "execution",
    "expansion",
    "lexer",
    "shell",
    "validation",
]