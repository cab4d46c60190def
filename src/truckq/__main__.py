"""
Entry point for running truckq as a module.

Usage:
    python -m truckq [command] [options]

Example:
    python -m truckq classify orders/createOrder --offline
    python -m truckq queue status
"""

from truckq.cli.main import cli

if __name__ == "__main__":
    cli()
