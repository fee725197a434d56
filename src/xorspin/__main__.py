"""Main entry point for the xorspin package."""
from xorspin.cli import cli


def main():
    """Main entry point function."""
    cli()


if __name__ == "__main__":
    main()
