"""Allow ``python -m standprompt.cli`` execution."""

from standprompt.cli.compose import main

main()
