#!/usr/bin/env python3
"""
DNS Updater - Main Entry Point

This is the main entry point for the DNS Updater.
It can be run directly or imported as a module.
"""

from dns_updater.cli.main import main

if __name__ == "__main__":
    main()
