"""
hoptrace - Unprivileged UDP traceroute

Entry point for running as a module:
    python -m hoptrace <target>
"""

from .cli import main

if __name__ == '__main__':
    main()
