"""Thin runnable wrapper for the listener viewer."""

from linetap.viewer_app import main as viewer_main


def main() -> int:
    return viewer_main()


if __name__ == "__main__":
    raise SystemExit(main())
