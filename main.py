"""StudyDesk ingestion -- command-line entry point.

Extracts text from one stored upload:

    python main.py uploads/1712345678-notes.pdf --name notes.pdf

See ``studydesk_ingest.cli`` for the startup sequence.
"""

import sys

from studydesk_ingest.cli import main

if __name__ == "__main__":
    sys.exit(main())
