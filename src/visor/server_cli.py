"""CLI entry point for the VISOR API server."""

import argparse
import os


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="visor-server",
        description="VISOR API server: multi-tenant VISOR report store",
    )
    parser.add_argument("--host", default="0.0.0.0", help="Bind host (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=8080, help="Bind port (default: 8080)")
    parser.add_argument(
        "--local",
        action="store_true",
        help="Local dev mode: SQLite database file, console logs",
    )
    args = parser.parse_args(argv)

    if args.local:
        os.environ["VISOR_LOCAL_MODE"] = "1"
        os.environ.setdefault("VISOR_JSON_LOGS", "0")

    import uvicorn

    uvicorn.run("visor.main:app", host=args.host, port=args.port)


if __name__ == "__main__":
    main()
