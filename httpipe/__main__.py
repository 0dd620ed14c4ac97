"""
Main entry point for serving a pipe: `python -m httpipe`.
"""

from httpipe.run import main

if __name__ == "__main__":
    main()
