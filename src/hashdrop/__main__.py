"""Start the hashdrop tray app.

Puts the tray icon up and, while the shortcut is enabled, downloads the IPFS
hash on the clipboard whenever the hotkey is pressed. Works both as
`python -m hashdrop` and when this file is run directly.
"""

import sys
from pathlib import Path

if __package__ is None or __package__ == "":
    sys.path.insert(0, str(Path(__file__).resolve().parents[1]))
    from hashdrop.app import main
else:
    from .app import main

if __name__ == "__main__":
    raise SystemExit(main())
