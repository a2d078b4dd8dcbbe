"""CLI tools for the standprompt pipeline.

- ``python -m standprompt.cli`` composes a prompt from a specification
  file (see :mod:`standprompt.cli.compose`).
"""
