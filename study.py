"""
VocabCards: topic flashcards
----------------------------

Command-line entry point: browse topics, mark words known or to learn,
and back up progress.
"""

import sys

from vocabcards.cli import main


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n[!] Aborted by user.")
        sys.exit(1)
