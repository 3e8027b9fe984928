"""Entry point for the types.xml editor."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

logger = logging.getLogger(__name__)


def main() -> int:
    from typeseditor.logger_config import setup_logging
    from typeseditor.remote import RemoteConfig
    from typeseditor.tui import TypesEditorApp

    setup_logging()
    try:
        app = TypesEditorApp(Path.cwd(), RemoteConfig.from_env())
        app.run()
    except Exception as err:
        logger.exception("Terminal UI failed")
        print(f"typeseditor: {err}", file=sys.stderr)
        return 1
    return app.return_code or 0


if __name__ == "__main__":
    sys.exit(main())
