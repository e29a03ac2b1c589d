import sys
from stt.common.logger import log
from stt.ui.app import main

# Entry point for `python -m stt`
def run() -> None:
    try:
        main()
    except SystemExit:
        raise
    except Exception:
        # Full stack trace, always. This is also where an unusable database ends up at startup.
        log.exception("Uncaught exception in entrypoint, exiting")
        sys.exit(1)

if __name__ == "__main__":
    run()
