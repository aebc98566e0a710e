"""Entry point for 'python -m crewboard'.

Runs the same CLI as the ``crewboard`` console script, e.g.
'python -m crewboard dashboard'.
"""

from crewboard.cli import main

if __name__ == "__main__":
    main()
