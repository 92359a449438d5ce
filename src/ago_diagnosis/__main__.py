"""Allow ``python -m ago_diagnosis``."""

from ago_diagnosis.cli.main import cli


if __name__ == "__main__":
    cli()
