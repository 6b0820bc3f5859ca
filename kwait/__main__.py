"""
CLI entry point, when used as a module: `python -m kwait`.

Useful for debugging in the IDEs (use the start-mode "Module", module "kwait").
"""
from kwait import cli

if __name__ == '__main__':
    cli.main()
